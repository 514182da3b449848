"""
autoscaler/watchdog.py - 체크 라이브니스 감시

체크 하나가 제한 시간(2 × poll interval) 안에 끝나지 않으면
FatalSignal을 발생시킵니다. 멈춘 원격 호출은 조용히 모니터링이 죽는 것보다
나쁘다고 보고, 프로세스 재시작(supervisor 전제)으로 영향 범위를 한정합니다.

FatalSignal은 최상위 러너가 소비합니다. 러너는 로그를 flush한 뒤
비정상 종료 코드로 끝냅니다. 평가기 스레드에서 직접 프로세스를 죽이지 않습니다.

Example:
    fatal = FatalSignal()
    watchdog = Watchdog("checkReads", timeout=10.0, fatal=fatal)

    with watchdog.guard():
        monitor.check(READS)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Generator
from contextlib import contextmanager

from core.exceptions import LivenessViolation

logger = logging.getLogger(__name__)


class FatalSignal:
    """치명적 이벤트 채널 (스레드 안전)

    여러 번 trigger되어도 모두 기록하지만, 러너는 첫 번째 에러로 종료합니다.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._errors: list[LivenessViolation] = []

    def trigger(self, error: LivenessViolation) -> None:
        with self._lock:
            self._errors.append(error)
        logger.critical("%s", error)
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """trigger될 때까지 대기

        Returns:
            trigger되었으면 True
        """
        return self._event.wait(timeout)

    @property
    def error(self) -> LivenessViolation | None:
        """첫 번째 에러"""
        with self._lock:
            return self._errors[0] if self._errors else None

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._errors)


class Watchdog:
    """체크 단위 타이머

    guard() 진입 시 타이머를 걸고, 블록이 끝나면(정상/예외 모두) 해제합니다.
    타이머는 1회성이므로 멈춘 체크 하나당 정확히 한 번 발생합니다.

    Attributes:
        name: 체크 이름 (로그/에러 메시지용)
        timeout: 제한 시간 (초)
        fatal: 발생 시 trigger할 FatalSignal
    """

    def __init__(
        self,
        name: str,
        timeout: float,
        fatal: FatalSignal,
        timer_factory: Callable[[float, Callable[[], None]], threading.Timer] = threading.Timer,
    ):
        if timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {timeout}")
        self.name = name
        self.timeout = timeout
        self.fatal = fatal
        self._timer_factory = timer_factory

    @contextmanager
    def guard(self) -> Generator[None, None, None]:
        timer = self._timer_factory(self.timeout, self._fire)
        timer.daemon = True
        timer.name = f"watchdog-{self.name}"
        timer.start()
        try:
            yield
        finally:
            timer.cancel()

    def _fire(self) -> None:
        self.fatal.trigger(LivenessViolation(self.name, self.timeout))
