"""CloudWatch 메트릭 조회.

- table_metrics: DynamoDB 테이블 메트릭 합계 (GetMetricStatistics)
"""

from .table_metrics import (
    CONSUMED_READ_CAPACITY_UNITS,
    CONSUMED_WRITE_CAPACITY_UNITS,
    READ_THROTTLE_EVENTS,
    WRITE_THROTTLE_EVENTS,
    MetricWindow,
    TableMetrics,
)

__all__ = [
    "CONSUMED_READ_CAPACITY_UNITS",
    "CONSUMED_WRITE_CAPACITY_UNITS",
    "READ_THROTTLE_EVENTS",
    "WRITE_THROTTLE_EVENTS",
    "MetricWindow",
    "TableMetrics",
]
