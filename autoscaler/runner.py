"""
autoscaler/runner.py - 최상위 모니터 러너

shutdown 이벤트와 FatalSignal을 소유하고, 평가기를 시작한 뒤
결과를 종료 코드로 변환합니다.

종료 코드:
    0   SIGTERM 등으로 정상 종료 (진행 중인 호출은 제한 시간 동안 drain)
    1   설정 오류 / check 명령의 조회 실패
    70  워치독 발생 또는 평가기 스레드 비정상 종료 (EX_SOFTWARE).
        외부 supervisor가 재시작한다는 전제
    130 Ctrl+C
"""

from __future__ import annotations

import logging
import signal
import threading
from typing import TYPE_CHECKING, Any

from core.config import settings

from .watchdog import FatalSignal

if TYPE_CHECKING:
    from .table_monitor import TableMonitor

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_CHECK_FAILED = 1
EXIT_LIVENESS = 70
EXIT_INTERRUPTED = 130


def flush_logging() -> None:
    """루트 로거의 모든 핸들러 flush"""
    for handler in logging.getLogger().handlers:
        handler.flush()


class MonitorRunner:
    """TableMonitor 실행기

    Attributes:
        monitor: 실행할 TableMonitor
        shutdown: 평가기 종료 이벤트
        fatal: 워치독 채널
    """

    def __init__(
        self,
        monitor: TableMonitor,
        install_signal_handlers: bool = True,
        drain_timeout: float = settings.SHUTDOWN_DRAIN_SECONDS,
        poll_seconds: float = 0.5,
    ):
        self.monitor = monitor
        self.shutdown = threading.Event()
        self.fatal = FatalSignal()
        self._install_signal_handlers = install_signal_handlers
        self._drain_timeout = drain_timeout
        self._poll_seconds = poll_seconds
        self._previous_handlers: dict[int, Any] = {}

    def stop(self) -> None:
        """평가기에 종료 요청"""
        self.shutdown.set()

    def run(self) -> int:
        """평가기를 시작하고 종료될 때까지 블록

        Returns:
            종료 코드
        """
        if self._install_signal_handlers:
            self._set_signal_handlers()

        config = self.monitor.config
        logger.info(
            "monitoring %s (%s) every %gs, cooldown %gs",
            config.table_name,
            config.region,
            config.poll_interval,
            config.cooldown,
        )

        try:
            threads = self.monitor.start(self.shutdown, self.fatal)
            try:
                while not self.shutdown.is_set():
                    if self.fatal.wait(self._poll_seconds):
                        return self._abort()
                    dead = [t.name for t in threads if not t.is_alive()]
                    # shutdown 없이 끝난 스레드는 모니터링이 멈춘 것
                    if dead and not self.shutdown.is_set():
                        return self._abort(f"evaluator thread stopped: {', '.join(dead)}")
            except KeyboardInterrupt:
                logger.info("interrupted, stopping evaluators")
                self.shutdown.set()
                self._drain(threads)
                return EXIT_INTERRUPTED

            self._drain(threads)
            if self.fatal.is_set():
                return self._abort()
            return EXIT_OK
        finally:
            self._restore_signal_handlers()

    def _abort(self, reason: str | None = None) -> int:
        # 멈춘 스레드는 기다리지 않음 (daemon)
        self.shutdown.set()
        logger.critical("aborting monitor for %s: %s", self.monitor.table_name, reason or self.fatal.error)
        flush_logging()
        return EXIT_LIVENESS

    def _drain(self, threads: list[threading.Thread]) -> None:
        """진행 중인 체크가 끝날 때까지 제한 시간 동안 대기"""
        for thread in threads:
            thread.join(self._drain_timeout)
            if thread.is_alive():
                logger.warning("%s did not stop within %gs", thread.name, self._drain_timeout)
        logger.info("monitor for %s stopped", self.monitor.table_name)

    def _handle_signal(self, signum: int, frame: Any) -> None:
        logger.info("received %s, stopping evaluators", signal.Signals(signum).name)
        self.shutdown.set()

    def _set_signal_handlers(self) -> None:
        if threading.current_thread() is not threading.main_thread():
            return
        for signum in (signal.SIGTERM,):
            self._previous_handlers[signum] = signal.signal(signum, self._handle_signal)

    def _restore_signal_handlers(self) -> None:
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()
