"""
tests/autoscaler/test_types.py - 모니터 설정/결과 타입 테스트
"""

import threading
from datetime import datetime, timedelta, timezone

import pytest

from autoscaler import (
    CheckResult,
    DirectionThresholds,
    EvaluatorState,
    MonitorConfig,
    ThresholdConfig,
    TickOutcome,
)
from core.exceptions import ConfigError, ValidationError


class TestDirectionThresholds:
    """DirectionThresholds 검증 테스트"""

    def test_defaults(self):
        thresholds = DirectionThresholds()
        assert thresholds.headroom == 0.2
        assert thresholds.throttle_ceiling == 0

    @pytest.mark.parametrize("headroom", [-0.1, 1.1, float("nan")])
    def test_invalid_headroom(self, headroom):
        with pytest.raises(ValidationError):
            DirectionThresholds(headroom=headroom)

    @pytest.mark.parametrize("headroom", [0.0, 1.0])
    def test_headroom_bounds(self, headroom):
        """0과 1은 허용"""
        assert DirectionThresholds(headroom=headroom).headroom == headroom

    def test_invalid_ceiling(self):
        with pytest.raises(ValidationError):
            DirectionThresholds(throttle_ceiling=-1)

    def test_utilization_limit(self):
        assert DirectionThresholds(headroom=0.25).utilization_limit(100) == 75

    def test_frozen(self):
        """모니터가 임계값을 바꿀 수 없음"""
        with pytest.raises(Exception):  # FrozenInstanceError
            ThresholdConfig().reads.headroom = 0.5


class TestMonitorConfig:
    """MonitorConfig 테스트"""

    def test_defaults(self):
        config = MonitorConfig(table_name="orders")
        assert config.region == "us-east-1"
        assert config.poll_interval == 5
        assert config.cooldown == 300
        assert config.lookback == timedelta(minutes=5)
        assert config.window_is_contiguous

    def test_watchdog_timeout(self):
        """워치독 타임아웃은 2 × interval"""
        assert MonitorConfig(table_name="orders", poll_interval=7.5).watchdog_timeout == 15

    def test_empty_table_name(self):
        with pytest.raises(ConfigError):
            MonitorConfig(table_name="")

    @pytest.mark.parametrize(
        "field,value",
        [
            ("poll_interval", 0),
            ("cooldown", -1),
            ("evaluation_minutes", 0),
            ("lookback_minutes", -1),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError) as exc_info:
            MonitorConfig(table_name="orders", **{field: value})

        assert exc_info.value.field == field

    @pytest.mark.parametrize(
        "field,value",
        [
            ("poll_interval", float("nan")),
            ("poll_interval", float("inf")),
            ("poll_interval", threading.TIMEOUT_MAX),
            ("cooldown", float("nan")),
            ("cooldown", float("inf")),
            ("cooldown", threading.TIMEOUT_MAX * 2),
        ],
    )
    def test_wait_durations_must_be_finite(self, field, value):
        """Event.wait가 받을 수 없는 대기 시간은 설정 단계에서 거부"""
        with pytest.raises(ValidationError) as exc_info:
            MonitorConfig(table_name="orders", **{field: value})

        assert exc_info.value.field == field

    def test_max_wait_durations(self):
        """TIMEOUT_MAX 경계는 허용"""
        config = MonitorConfig(
            table_name="orders",
            poll_interval=threading.TIMEOUT_MAX / 2,
            cooldown=threading.TIMEOUT_MAX,
        )
        assert config.watchdog_timeout == threading.TIMEOUT_MAX

    def test_non_contiguous_window(self):
        config = MonitorConfig(table_name="orders", evaluation_minutes=5, lookback_minutes=10)
        assert not config.window_is_contiguous


class TestResults:
    """CheckResult / TickOutcome 테스트"""

    def _result(self, provisioned: int = 1000, consumed: float = 500) -> CheckResult:
        return CheckResult(
            table_name="orders",
            direction="reads",
            window_start=datetime(2024, 1, 15, tzinfo=timezone.utc),
            consumed=consumed,
            provisioned=provisioned,
            throttled=0,
            thresholds=DirectionThresholds(headroom=0.1),
            scale_needed=False,
        )

    def test_utilization(self):
        result = self._result()
        assert result.utilization == 0.5
        assert result.utilization_limit == 900

    def test_utilization_without_capacity(self):
        """provisioned 0이면 None"""
        assert self._result(provisioned=0).utilization is None

    def test_needs_cooldown(self):
        """SCALE_FLAGGED만 쿨다운"""
        assert TickOutcome(EvaluatorState.SCALE_FLAGGED).needs_cooldown
        assert not TickOutcome(EvaluatorState.NO_ACTION).needs_cooldown
        assert not TickOutcome(EvaluatorState.FAILED, error=ValueError()).needs_cooldown
