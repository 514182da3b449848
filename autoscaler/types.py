"""
autoscaler/types.py - 모니터 설정과 결과 타입

주요 구성 요소:
- DirectionThresholds / ThresholdConfig: 방향별(reads/writes) 임계값
- MonitorConfig: 테이블 하나의 모니터 설정 (생성 시 주입, 불변)
- Direction: 평가기 하나가 다루는 방향 기술자 (READS, WRITES)
- EvaluatorState / CheckResult / TickOutcome: 평가기 상태와 틱 결과
"""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from core.config import settings
from core.exceptions import ConfigError, ValidationError
from shared.aws.dynamodb import ProvisionedCapacity
from shared.aws.metrics.table_metrics import (
    CONSUMED_READ_CAPACITY_UNITS,
    CONSUMED_WRITE_CAPACITY_UNITS,
    READ_THROTTLE_EVENTS,
    WRITE_THROTTLE_EVENTS,
)

# =============================================================================
# 임계값
# =============================================================================


@dataclass(frozen=True)
class DirectionThresholds:
    """한 방향의 임계값

    Attributes:
        headroom: 프로비저닝 대비 여유 비율 (0.0~1.0).
            소비량이 provisioned * (1 - headroom)을 넘으면 스케일 필요
        throttle_ceiling: 허용하는 쓰로틀 이벤트 수. 이를 넘으면 스케일 필요
    """

    headroom: float = settings.HEADROOM
    throttle_ceiling: float = settings.THROTTLE_CEILING

    def __post_init__(self) -> None:
        if math.isnan(self.headroom) or not 0.0 <= self.headroom <= 1.0:
            raise ValidationError("headroom", self.headroom, "0.0 <= headroom <= 1.0")
        if math.isnan(self.throttle_ceiling) or self.throttle_ceiling < 0:
            raise ValidationError("throttle_ceiling", self.throttle_ceiling, "throttle_ceiling >= 0")

    def utilization_limit(self, provisioned: float) -> float:
        """스케일 없이 허용되는 최대 소비량"""
        return provisioned * (1 - self.headroom)


@dataclass(frozen=True)
class ThresholdConfig:
    """방향별 임계값 묶음. 모니터는 읽기만 합니다."""

    reads: DirectionThresholds = field(default_factory=DirectionThresholds)
    writes: DirectionThresholds = field(default_factory=DirectionThresholds)


# =============================================================================
# 모니터 설정
# =============================================================================


@dataclass(frozen=True)
class MonitorConfig:
    """테이블 하나의 모니터 설정

    Attributes:
        table_name: 모니터링 대상 테이블
        region: 테이블 리전
        profile: AWS 프로파일 (None이면 기본 체인)
        poll_interval: 틱 주기 (초). 워치독 타임아웃은 이 값의 2배
        cooldown: 스케일 필요 판정 후 같은 방향의 다음 틱까지 대기 (초)
        evaluation_minutes: 메트릭 집계 구간 길이 (분)
        lookback_minutes: 집계 구간 시작을 현재보다 앞당기는 정도 (분).
            CloudWatch 수집 지연을 보정하며, evaluation_minutes와 같아야 틱 사이에 빈 구간이 없음
        thresholds: 방향별 임계값
    """

    table_name: str
    region: str = settings.DEFAULT_REGION
    profile: str | None = None
    poll_interval: float = settings.POLL_INTERVAL_SECONDS
    cooldown: float = settings.COOLDOWN_SECONDS
    evaluation_minutes: int = settings.EVALUATION_MINUTES
    lookback_minutes: int = settings.LOOKBACK_MINUTES
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)

    def __post_init__(self) -> None:
        if not self.table_name:
            raise ConfigError("table_name", "table name must be set")
        # Event.wait / Timer는 TIMEOUT_MAX를 넘는 대기에서 OverflowError
        if not math.isfinite(self.poll_interval) or not 0 < 2 * self.poll_interval <= threading.TIMEOUT_MAX:
            raise ValidationError(
                "poll_interval", self.poll_interval, f"0 < poll_interval <= {threading.TIMEOUT_MAX / 2:g}"
            )
        if not math.isfinite(self.cooldown) or not 0 <= self.cooldown <= threading.TIMEOUT_MAX:
            raise ValidationError("cooldown", self.cooldown, f"0 <= cooldown <= {threading.TIMEOUT_MAX:g}")
        if self.evaluation_minutes < 1:
            raise ValidationError("evaluation_minutes", self.evaluation_minutes, "evaluation_minutes >= 1")
        if self.lookback_minutes < 0:
            raise ValidationError("lookback_minutes", self.lookback_minutes, "lookback_minutes >= 0")

    @property
    def lookback(self) -> timedelta:
        return timedelta(minutes=self.lookback_minutes)

    @property
    def watchdog_timeout(self) -> float:
        """체크 하나가 끝나야 하는 시간 (초)"""
        return 2 * self.poll_interval

    @property
    def window_is_contiguous(self) -> bool:
        """lookback과 평가 구간 길이가 같아 구간이 현재 시각에서 끝나는지"""
        return self.lookback_minutes == self.evaluation_minutes


# =============================================================================
# 방향 기술자
# =============================================================================


@dataclass(frozen=True)
class Direction:
    """평가기 하나가 다루는 방향

    Attributes:
        name: 로그용 이름 ("reads", "writes")
        consumed_metric: 소비 용량 메트릭 이름
        throttle_metric: 쓰로틀 이벤트 메트릭 이름
        capacity_field: ProvisionedCapacity 필드 이름 ("read", "write")
    """

    name: str
    consumed_metric: str
    throttle_metric: str
    capacity_field: str

    def provisioned(self, capacity: ProvisionedCapacity) -> int:
        return getattr(capacity, self.capacity_field)

    def thresholds(self, config: ThresholdConfig) -> DirectionThresholds:
        return getattr(config, self.name)

    def __str__(self) -> str:
        return self.name


READS = Direction(
    name="reads",
    consumed_metric=CONSUMED_READ_CAPACITY_UNITS,
    throttle_metric=READ_THROTTLE_EVENTS,
    capacity_field="read",
)
WRITES = Direction(
    name="writes",
    consumed_metric=CONSUMED_WRITE_CAPACITY_UNITS,
    throttle_metric=WRITE_THROTTLE_EVENTS,
    capacity_field="write",
)
DIRECTIONS: tuple[Direction, ...] = (READS, WRITES)


# =============================================================================
# 평가기 상태 / 결과
# =============================================================================


class EvaluatorState(Enum):
    """평가기 상태

    IDLE → CHECKING → (SCALE_FLAGGED | NO_ACTION | FAILED) → IDLE
    """

    IDLE = "idle"
    CHECKING = "checking"
    SCALE_FLAGGED = "scale_flagged"
    NO_ACTION = "no_action"
    FAILED = "failed"


@dataclass(frozen=True)
class CheckResult:
    """한 틱에서 관측한 값과 판정

    세 값은 모두 같은 window_start 기준으로 조회됩니다.
    """

    table_name: str
    direction: str
    window_start: datetime
    consumed: float
    provisioned: int
    throttled: float
    thresholds: DirectionThresholds
    scale_needed: bool

    @property
    def utilization_limit(self) -> float:
        return self.thresholds.utilization_limit(self.provisioned)

    @property
    def utilization(self) -> float | None:
        """소비/프로비저닝 비율. provisioned가 0이면 None"""
        if self.provisioned <= 0:
            return None
        return self.consumed / self.provisioned


@dataclass(frozen=True)
class TickOutcome:
    """틱 하나의 결과

    Attributes:
        state: SCALE_FLAGGED, NO_ACTION, FAILED 중 하나
        result: 판정 결과 (FAILED면 None)
        error: 실패 원인 (FAILED일 때만)
    """

    state: EvaluatorState
    result: CheckResult | None = None
    error: Exception | None = None

    @property
    def needs_cooldown(self) -> bool:
        return self.state is EvaluatorState.SCALE_FLAGGED
