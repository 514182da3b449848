"""
autoscaler - DynamoDB 테이블 용량 모니터

테이블의 읽기/쓰기 소비 용량과 쓰로틀 이벤트를 주기적으로 조회하여
임계값을 넘으면 스케일 필요로 판정합니다 (판정만 하며 용량 변경은 하지 않음).

아키텍처:
    autoscaler/
    ├── types.py          # MonitorConfig, 임계값, Direction, 상태/결과 타입
    ├── decision.py       # 스케일 필요 판정 규칙
    ├── watchdog.py       # 체크 라이브니스 타이머, FatalSignal
    ├── table_monitor.py  # TableMonitor, 방향별 Evaluator
    └── runner.py         # 최상위 러너 (시그널, 종료 코드)

Usage:
    from autoscaler import MonitorConfig, MonitorRunner, TableMonitor

    config = MonitorConfig(table_name="orders", region="us-east-1")
    exit_code = MonitorRunner(TableMonitor.from_config(config)).run()
"""

from .decision import scale_needed
from .runner import EXIT_CHECK_FAILED, EXIT_CONFIG_ERROR, EXIT_INTERRUPTED, EXIT_LIVENESS, EXIT_OK, MonitorRunner
from .table_monitor import Evaluator, TableMonitor
from .types import (
    DIRECTIONS,
    READS,
    WRITES,
    CheckResult,
    Direction,
    DirectionThresholds,
    EvaluatorState,
    MonitorConfig,
    ThresholdConfig,
    TickOutcome,
)
from .watchdog import FatalSignal, Watchdog

__all__: list[str] = [
    # 설정/타입
    "MonitorConfig",
    "ThresholdConfig",
    "DirectionThresholds",
    "Direction",
    "READS",
    "WRITES",
    "DIRECTIONS",
    "EvaluatorState",
    "CheckResult",
    "TickOutcome",
    # 판정
    "scale_needed",
    # 실행
    "TableMonitor",
    "Evaluator",
    "Watchdog",
    "FatalSignal",
    "MonitorRunner",
    "EXIT_OK",
    "EXIT_CONFIG_ERROR",
    "EXIT_CHECK_FAILED",
    "EXIT_LIVENESS",
    "EXIT_INTERRUPTED",
]
