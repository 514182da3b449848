"""
tests/autoscaler/test_table_monitor.py - TableMonitor / Evaluator 테스트

주기/쿨다운 시나리오는 FakeClock + FakeShutdown으로 실제 대기 없이 검증합니다.
"""

import logging
import threading
import time
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest

from autoscaler import (
    READS,
    WRITES,
    DirectionThresholds,
    EvaluatorState,
    FatalSignal,
    MonitorConfig,
    TableMonitor,
    ThresholdConfig,
)
from conftest import FakeClock, FakeShutdown, create_mock_client_error
from core.exceptions import APICallError
from shared.aws.dynamodb import ProvisionedCapacity

NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_config(**kwargs) -> MonitorConfig:
    options = {
        "table_name": "orders",
        "poll_interval": 5,
        "cooldown": 60,
        "thresholds": ThresholdConfig(
            reads=DirectionThresholds(headroom=0.1, throttle_ceiling=0),
            writes=DirectionThresholds(headroom=0.1, throttle_ceiling=0),
        ),
    }
    options.update(kwargs)
    return MonitorConfig(**options)


def make_monitor(config=None, sums=None, capacity=None):
    """metrics.sum은 메트릭 이름 → 값(또는 예외) 딕셔너리로 응답"""
    sums = {} if sums is None else sums

    def fake_sum(metric_name, table_name, start_time):
        value = sums.get(metric_name, 0.0)
        if callable(value):
            value = value()
        if isinstance(value, Exception):
            raise value
        return value

    metrics = MagicMock()
    metrics.sum.side_effect = fake_sum
    table_capacity = MagicMock()
    table_capacity.describe.return_value = capacity or ProvisionedCapacity(read=1000, write=1000)

    monitor = TableMonitor(config or make_config(), metrics, table_capacity, now=lambda: NOW)
    return monitor


def api_error(operation="GetMetricStatistics"):
    return APICallError.from_client_error(
        "cloudwatch", operation, create_mock_client_error("ThrottlingException", "Rate exceeded")
    )


class TestCheck:
    """TableMonitor.check() 테스트"""

    def test_window_start_shared(self):
        """한 틱의 모든 조회가 같은 window_start 사용"""
        monitor = make_monitor()

        result = monitor.check(READS)

        starts = {c.args[2] for c in monitor.metrics.sum.call_args_list}
        assert starts == {NOW - timedelta(minutes=5)}
        assert result.window_start == NOW - timedelta(minutes=5)

    def test_fetch_order_and_metrics(self):
        """consumed → provisioned → throttled"""
        monitor = make_monitor()
        manager = MagicMock()
        manager.attach_mock(monitor.metrics, "metrics")
        manager.attach_mock(monitor.capacity, "capacity")

        monitor.check(WRITES)

        names = [c[0] for c in manager.mock_calls]
        assert names == ["metrics.sum", "capacity.describe", "metrics.sum"]
        assert manager.mock_calls[0].args[:2] == ("ConsumedWriteCapacityUnits", "orders")
        assert manager.mock_calls[2].args[:2] == ("WriteThrottleEvents", "orders")

    def test_scale_needed_by_utilization(self):
        monitor = make_monitor(sums={"ConsumedReadCapacityUnits": 950})
        result = monitor.check(READS)

        assert result.scale_needed
        assert result.consumed == 950
        assert result.provisioned == 1000

    def test_scale_needed_by_throttle(self):
        monitor = make_monitor(sums={"WriteThrottleEvents": 5})
        assert monitor.check(WRITES).scale_needed

    def test_direction_uses_own_capacity(self):
        monitor = make_monitor(
            sums={"ConsumedWriteCapacityUnits": 95},
            capacity=ProvisionedCapacity(read=1000, write=100),
        )
        assert monitor.check(WRITES).scale_needed
        assert not make_monitor(
            sums={"ConsumedReadCapacityUnits": 95},
            capacity=ProvisionedCapacity(read=1000, write=100),
        ).check(READS).scale_needed

    def test_no_data(self):
        """datapoint 없음(0) → 스케일 불필요"""
        assert not make_monitor().check(READS).scale_needed

    def test_non_contiguous_window_warns(self, caplog):
        caplog.set_level(logging.WARNING)
        make_monitor(config=make_config(lookback_minutes=10))
        assert "lookback" in caplog.text


class TestTick:
    """Evaluator.tick() 테스트"""

    def _evaluator(self, monitor, direction=READS):
        return monitor.evaluator(direction, threading.Event(), FatalSignal())

    def test_name(self):
        monitor = make_monitor()
        assert self._evaluator(monitor, READS).name == "checkReads"
        assert self._evaluator(monitor, WRITES).name == "checkWrites"

    def test_no_action(self, caplog):
        caplog.set_level(logging.INFO)
        evaluator = self._evaluator(make_monitor())

        outcome = evaluator.tick()

        assert outcome.state is EvaluatorState.NO_ACTION
        assert not outcome.needs_cooldown
        assert evaluator.state is EvaluatorState.NO_ACTION
        assert "checking reads: orders" in caplog.text

    def test_scale_flagged_logs_warning(self, caplog):
        caplog.set_level(logging.INFO)
        evaluator = self._evaluator(make_monitor(sums={"ConsumedReadCapacityUnits": 950}))

        outcome = evaluator.tick()

        assert outcome.state is EvaluatorState.SCALE_FLAGGED
        assert outcome.needs_cooldown
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert any("scale needed" in r.getMessage() for r in warnings)

    @pytest.mark.parametrize("failing", ["consumed", "describe", "throttled"])
    def test_any_fetch_failure(self, failing, caplog):
        """조회 하나라도 실패하면 FAILED, 판정/쿨다운 없음"""
        sums = {}
        monitor = make_monitor(sums=sums)
        error = api_error("DescribeTable" if failing == "describe" else "GetMetricStatistics")
        if failing == "consumed":
            sums["ConsumedReadCapacityUnits"] = error
        elif failing == "throttled":
            sums["ReadThrottleEvents"] = error
        else:
            monitor.capacity.describe.side_effect = error

        outcome = self._evaluator(monitor).tick()

        assert outcome.state is EvaluatorState.FAILED
        assert outcome.result is None
        assert outcome.error is error
        assert not outcome.needs_cooldown
        assert any(r.levelno == logging.ERROR and "checkReads" in r.getMessage() for r in caplog.records)

    def test_unexpected_error(self):
        """예상 밖 에러도 스레드를 죽이지 않고 FAILED"""
        monitor = make_monitor(sums={"ConsumedReadCapacityUnits": RuntimeError("bug")})
        outcome = self._evaluator(monitor).tick()

        assert outcome.state is EvaluatorState.FAILED
        assert isinstance(outcome.error, RuntimeError)

    def test_stuck_check_triggers_fatal(self):
        """2 × interval 안에 끝나지 않으면 FatalSignal"""
        fatal = FatalSignal()
        monitor = make_monitor(
            config=make_config(poll_interval=0.05),
            sums={"ConsumedReadCapacityUnits": lambda: fatal.wait(2.0) and 0.0},
        )
        evaluator = monitor.evaluator(READS, threading.Event(), fatal)

        evaluator.tick()

        assert fatal.count == 1
        assert fatal.error.check_name == "checkReads"
        assert fatal.error.timeout == 0.1


class TestRunSchedule:
    """Evaluator.run() 주기/쿨다운 테스트 (가짜 시계)"""

    def _run(self, sums, stop_after_waits, cooldown=60):
        clock = FakeClock()
        tick_times = []
        consumed = iter(sums)

        def next_consumed():
            tick_times.append(clock())
            return next(consumed, 0.0)

        monitor = make_monitor(
            config=make_config(poll_interval=5, cooldown=cooldown),
            sums={"ConsumedReadCapacityUnits": next_consumed},
        )
        shutdown = FakeShutdown(clock, stop_after_waits=stop_after_waits)
        evaluator = monitor.evaluator(READS, shutdown, FatalSignal(), clock=clock)
        evaluator.run()
        return tick_times, shutdown.waits, evaluator

    def test_no_action_then_scale_flagged(self):
        """틱1 NO_ACTION → +5s, 틱2 SCALE_FLAGGED → +60s"""
        tick_times, waits, evaluator = self._run([500, 950, 500], stop_after_waits=4)

        assert tick_times == [5, 10, 70]
        assert waits == [5, 5, 60, 5]
        assert evaluator.state is EvaluatorState.IDLE

    def test_fixed_frequency(self):
        """NO_ACTION만 계속되면 interval 간격"""
        tick_times, _, _ = self._run([], stop_after_waits=4)
        assert tick_times == [5, 10, 15]

    def test_failure_has_no_cooldown(self):
        """실패한 틱 다음은 interval 뒤"""
        clock = FakeClock()
        tick_times = []

        def failing():
            tick_times.append(clock())
            return api_error()

        monitor = make_monitor(sums={"ConsumedReadCapacityUnits": failing})
        shutdown = FakeShutdown(clock, stop_after_waits=3)
        monitor.evaluator(READS, shutdown, FatalSignal(), clock=clock).run()

        assert tick_times == [5, 10]
        assert shutdown.waits == [5, 5, 5]

    def test_shutdown_during_cooldown(self):
        """쿨다운 대기 중 shutdown이면 다음 틱 없이 종료"""
        tick_times, waits, _ = self._run([950], stop_after_waits=2)

        assert tick_times == [5]
        assert waits == [5, 60]

    def test_shutdown_before_first_tick(self):
        clock = FakeClock()
        monitor = make_monitor()
        shutdown = FakeShutdown(clock)
        shutdown.set()

        monitor.evaluator(READS, shutdown, FatalSignal(), clock=clock).run()

        monitor.metrics.sum.assert_not_called()

    def test_slow_check_skips_missed_ticks(self):
        """체크가 interval보다 길면 밀린 틱은 버림"""
        clock = FakeClock()
        tick_times = []

        def slow():
            tick_times.append(clock())
            if len(tick_times) == 1:
                clock.advance(12)
            return 0.0

        monitor = make_monitor(sums={"ConsumedReadCapacityUnits": slow})
        shutdown = FakeShutdown(clock, stop_after_waits=2)
        monitor.evaluator(READS, shutdown, FatalSignal(), clock=clock).run()

        # 5에 시작해 17에 끝남 → 10은 버리고 바로 다음 틱
        assert tick_times == [5, 17]

    def test_loop_error_is_logged(self, caplog):
        """루프를 벗어난 예외는 critical 로그 후 스레드 종료"""
        clock = MagicMock(side_effect=[0.0, OverflowError("timeout value is too large")])
        evaluator = make_monitor().evaluator(READS, threading.Event(), FatalSignal(), clock=clock)

        evaluator.run()

        assert evaluator.state is EvaluatorState.FAILED
        records = [r for r in caplog.records if r.levelno == logging.CRITICAL]
        assert records and "checkReads: evaluator died" in records[0].getMessage()
        assert records[0].exc_info[0] is OverflowError


class TestThreads:
    """실제 스레드 테스트"""

    def test_cooldown_is_per_direction(self):
        """reads 쿨다운 중에도 writes는 계속 틱"""
        monitor = make_monitor(
            config=make_config(poll_interval=0.05, cooldown=30),
            sums={"ConsumedReadCapacityUnits": 950, "ConsumedWriteCapacityUnits": 0},
        )
        shutdown = threading.Event()

        threads = monitor.start(shutdown, FatalSignal())
        time.sleep(0.5)
        shutdown.set()
        for thread in threads:
            thread.join(2.0)

        consumed_calls = [c.args[0] for c in monitor.metrics.sum.call_args_list]
        assert consumed_calls.count("ConsumedReadCapacityUnits") == 1
        assert consumed_calls.count("ConsumedWriteCapacityUnits") >= 3
        assert not any(thread.is_alive() for thread in threads)

    def test_thread_names(self):
        monitor = make_monitor()
        shutdown = threading.Event()
        shutdown.set()

        threads = monitor.start(shutdown, FatalSignal())
        for thread in threads:
            thread.join(1.0)

        assert [t.name for t in threads] == ["orders-reads", "orders-writes"]
        assert all(t.daemon for t in threads)


class TestFromConfig:
    """from_config 테스트"""

    def test_clients(self):
        config = make_config(region="eu-west-1", profile="prod", evaluation_minutes=10, lookback_minutes=10)
        with patch("autoscaler.table_monitor.create_session") as mock_session, patch(
            "autoscaler.table_monitor.get_client"
        ) as mock_get_client:
            monitor = TableMonitor.from_config(config)

        mock_session.assert_called_once_with("eu-west-1", "prod")
        services = [c.args[1] for c in mock_get_client.call_args_list]
        assert services == ["cloudwatch", "dynamodb"]
        assert monitor.metrics.evaluation_minutes == 10
        assert monitor.table_name == "orders"
