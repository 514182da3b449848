"""
autoscaler/table_monitor.py - 테이블 모니터와 방향별 평가기

TableMonitor는 테이블 하나에 대해 reads/writes 평가기 두 개를 독립적으로 돌립니다.
두 평가기는 테이블 이름과 원격 조회기(TableMetrics, TableCapacity)만 공유하고
가변 상태는 공유하지 않으므로 락이 필요 없습니다.

평가기 상태 머신:
    IDLE ──tick──▶ CHECKING ──▶ SCALE_FLAGGED ──cooldown──▶ IDLE
                       ├──────▶ NO_ACTION ───────────────▶ IDLE
                       └──────▶ FAILED ──────────────────▶ IDLE

- CHECKING은 Watchdog 아래에서 실행됩니다 (2 × poll interval)
- 조회 실패는 로그만 남기고 판정/쿨다운 없이 다음 틱으로 넘어갑니다
- shutdown 이벤트는 IDLE 대기와 쿨다운 대기에서 확인합니다

Note:
    스케일 필요 판정은 로그만 남기고 실제 용량 변경(UpdateTable)은 하지 않습니다.
    쿨다운은 외부 주체가 신호에 반응할 시간을 주기 위한 것입니다.

Example:
    config = MonitorConfig(table_name="orders", region="us-east-1")
    monitor = TableMonitor.from_config(config)

    shutdown = threading.Event()
    fatal = FatalSignal()
    threads = monitor.start(shutdown, fatal)
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from core.aws import categorize_error, create_session, get_client
from core.exceptions import APICallError
from shared.aws.dynamodb import TableCapacity
from shared.aws.metrics.table_metrics import TableMetrics

from .decision import scale_needed
from .types import DIRECTIONS, CheckResult, Direction, EvaluatorState, MonitorConfig, TickOutcome
from .watchdog import FatalSignal, Watchdog

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TableMonitor:
    """테이블 하나의 모니터

    Attributes:
        config: 모니터 설정 (불변)
        metrics: CloudWatch 합계 조회기
        capacity: 프로비저닝 용량 조회기
    """

    def __init__(
        self,
        config: MonitorConfig,
        metrics: TableMetrics,
        capacity: TableCapacity,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.config = config
        self.metrics = metrics
        self.capacity = capacity
        self._now = now

        if not config.window_is_contiguous:
            logger.warning(
                "lookback (%dm) differs from evaluation window (%dm): windows will not end at the current time",
                config.lookback_minutes,
                config.evaluation_minutes,
            )

    @classmethod
    def from_config(cls, config: MonitorConfig) -> TableMonitor:
        """설정의 리전/프로파일로 boto3 세션과 클라이언트를 만들어 생성"""
        session = create_session(config.region, config.profile)
        cloudwatch = get_client(session, "cloudwatch", region_name=config.region)
        dynamodb = get_client(session, "dynamodb", region_name=config.region)
        return cls(
            config,
            metrics=TableMetrics(cloudwatch, evaluation_minutes=config.evaluation_minutes),
            capacity=TableCapacity(dynamodb),
        )

    @property
    def table_name(self) -> str:
        return self.config.table_name

    def window_start(self) -> datetime:
        """이번 틱의 평가 구간 시작 (now - lookback)"""
        return self._now() - self.config.lookback

    def check(self, direction: Direction) -> CheckResult:
        """한 방향의 소비량/프로비저닝/쓰로틀을 조회해 판정

        세 조회 모두 같은 window_start를 사용합니다.

        Args:
            direction: READS 또는 WRITES

        Returns:
            CheckResult

        Raises:
            APICallError: 세 조회 중 하나라도 실패
        """
        table_name = self.table_name
        window_start = self.window_start()

        consumed = self.metrics.sum(direction.consumed_metric, table_name, window_start)
        provisioned = direction.provisioned(self.capacity.describe(table_name))
        throttled = self.metrics.sum(direction.throttle_metric, table_name, window_start)
        thresholds = direction.thresholds(self.config.thresholds)

        return CheckResult(
            table_name=table_name,
            direction=direction.name,
            window_start=window_start,
            consumed=consumed,
            provisioned=provisioned,
            throttled=throttled,
            thresholds=thresholds,
            scale_needed=scale_needed(consumed, provisioned, throttled, thresholds),
        )

    def evaluator(
        self,
        direction: Direction,
        shutdown: threading.Event,
        fatal: FatalSignal,
        clock: Callable[[], float] = time.monotonic,
    ) -> Evaluator:
        return Evaluator(self, direction, shutdown, fatal, clock=clock)

    def start(
        self,
        shutdown: threading.Event,
        fatal: FatalSignal,
        directions: Iterable[Direction] = DIRECTIONS,
    ) -> list[threading.Thread]:
        """방향별 평가기 스레드 시작

        스레드는 daemon입니다. 워치독이 발생한 뒤 멈춘 호출이
        프로세스 종료를 막지 않도록 하기 위함입니다.

        Returns:
            시작된 스레드 목록
        """
        threads = []
        for direction in directions:
            evaluator = self.evaluator(direction, shutdown, fatal)
            thread = threading.Thread(
                target=evaluator.run,
                name=f"{self.table_name}-{direction.name}",
                daemon=True,
            )
            thread.start()
            threads.append(thread)
        return threads


class Evaluator:
    """방향 하나의 주기 평가기

    reads/writes 모두 이 클래스 하나로 처리하며 Direction 기술자로 구분합니다.

    Attributes:
        monitor: 소속 TableMonitor
        direction: 평가 방향
        watchdog: 체크 단위 라이브니스 타이머
        state: 현재 상태
    """

    def __init__(
        self,
        monitor: TableMonitor,
        direction: Direction,
        shutdown: threading.Event,
        fatal: FatalSignal,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.monitor = monitor
        self.direction = direction
        self._shutdown = shutdown
        self._clock = clock
        self.watchdog = Watchdog(self.name, monitor.config.watchdog_timeout, fatal)
        self.state = EvaluatorState.IDLE

    @property
    def name(self) -> str:
        """체크 이름 (예: checkReads)"""
        return f"check{self.direction.name.capitalize()}"

    def tick(self) -> TickOutcome:
        """CHECKING 한 번 실행

        Returns:
            TickOutcome (SCALE_FLAGGED, NO_ACTION, FAILED)
        """
        self.state = EvaluatorState.CHECKING
        logger.info("checking %s: %s", self.direction, self.monitor.table_name)

        try:
            with self.watchdog.guard():
                result = self.monitor.check(self.direction)
        except APICallError as e:
            logger.error("%s: %s [%s]", self.name, e, categorize_error(e).value)
            outcome = TickOutcome(EvaluatorState.FAILED, error=e)
        except Exception as e:
            # 스레드가 조용히 죽지 않도록 예상 밖 에러도 틱 실패로 처리
            logger.exception("%s: unexpected error", self.name)
            outcome = TickOutcome(EvaluatorState.FAILED, error=e)
        else:
            if result.scale_needed:
                logger.warning(
                    "%s: scale needed for %s (consumed=%.1f limit=%.1f provisioned=%d throttled=%.0f ceiling=%.0f)",
                    self.name,
                    result.table_name,
                    result.consumed,
                    result.utilization_limit,
                    result.provisioned,
                    result.throttled,
                    result.thresholds.throttle_ceiling,
                )
                outcome = TickOutcome(EvaluatorState.SCALE_FLAGGED, result=result)
            else:
                logger.debug(
                    "%s: ok (consumed=%.1f limit=%.1f throttled=%.0f)",
                    self.name,
                    result.consumed,
                    result.utilization_limit,
                    result.throttled,
                )
                outcome = TickOutcome(EvaluatorState.NO_ACTION, result=result)

        self.state = outcome.state
        return outcome

    def run(self) -> None:
        """shutdown까지 고정 주기로 틱 실행 (스레드 진입점)

        루프를 벗어난 예외는 로그로 남기고 스레드를 끝냅니다.
        러너는 shutdown 없이 끝난 스레드를 치명적 이벤트로 처리합니다.
        """
        try:
            self._loop()
        except Exception:
            self.state = EvaluatorState.FAILED
            logger.critical("%s: evaluator died", self.name, exc_info=True)
            return

        self.state = EvaluatorState.IDLE
        logger.debug("%s stopped", self.name)

    def _loop(self) -> None:
        """고정 주기 틱 루프

        틱 경계는 시작 시각 + k × interval입니다. 체크가 interval보다 오래 걸리면
        밀린 틱은 버리고 바로 다음 틱을 실행합니다.
        스케일 필요 판정 후에는 cooldown만큼 쉬고 곧바로 다음 틱을 실행합니다.
        """
        config = self.monitor.config
        interval = config.poll_interval
        next_tick = self._clock() + interval

        while not self._shutdown.is_set():
            self.state = EvaluatorState.IDLE
            if self._wait(next_tick - self._clock()):
                break

            outcome = self.tick()

            if outcome.needs_cooldown:
                logger.info("%s: cooling down for %gs", self.name, config.cooldown)
                if self._wait(config.cooldown):
                    break
                next_tick = self._clock()
            else:
                next_tick = max(next_tick + interval, self._clock())

    def _wait(self, seconds: float) -> bool:
        """shutdown을 감시하며 대기

        Returns:
            shutdown이 설정되었으면 True
        """
        if seconds <= 0:
            return self._shutdown.is_set()
        return self._shutdown.wait(seconds)
