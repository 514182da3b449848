"""
shared/aws/metrics/table_metrics.py - DynamoDB 테이블 CloudWatch 합계 조회

GetMetricStatistics API로 테이블 단위 메트릭의 Sum을 조회합니다.
평가 구간 [start, start + evaluation_minutes) 전체를 하나의 Period로 집계하므로
정상적인 응답은 datapoint 1개입니다.

datapoint가 없으면 에러가 아니라 0입니다 (데이터 부재가 아니라 활동 부재).
API 실패는 재시도하지 않고 APICallError로 감싸서 그대로 올립니다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.config import settings
from core.exceptions import APICallError

logger = logging.getLogger(__name__)

READ_THROTTLE_EVENTS = "ReadThrottleEvents"
WRITE_THROTTLE_EVENTS = "WriteThrottleEvents"
CONSUMED_READ_CAPACITY_UNITS = "ConsumedReadCapacityUnits"
CONSUMED_WRITE_CAPACITY_UNITS = "ConsumedWriteCapacityUnits"


@dataclass(frozen=True)
class MetricWindow:
    """메트릭 집계 구간

    Attributes:
        start: 구간 시작 (포함)
        end: 구간 끝 (미포함)
    """

    start: datetime
    end: datetime

    @property
    def period_seconds(self) -> int:
        return int((self.end - self.start).total_seconds())


class TableMetrics:
    """테이블 메트릭 합계 조회기

    두 평가기(reads/writes)가 동시에 사용해도 안전합니다.
    호출 간 공유되는 가변 상태가 없고, 연결 자원은 boto3 client가 소유합니다.

    Attributes:
        client: boto3 CloudWatch client
        evaluation_minutes: 평가 구간 길이 (분)
        namespace: CloudWatch 네임스페이스
    """

    def __init__(
        self,
        client: Any,
        evaluation_minutes: int = settings.EVALUATION_MINUTES,
        namespace: str = settings.CLOUDWATCH_NAMESPACE,
    ):
        if evaluation_minutes < 1:
            raise ValueError(f"evaluation_minutes must be >= 1, got {evaluation_minutes}")
        self.client = client
        self.evaluation_minutes = evaluation_minutes
        self.namespace = namespace

    def window(self, start_time: datetime) -> MetricWindow:
        """start_time에서 시작하는 평가 구간"""
        return MetricWindow(start=start_time, end=start_time + timedelta(minutes=self.evaluation_minutes))

    def sum(self, metric_name: str, table_name: str, start_time: datetime) -> float:
        """평가 구간의 메트릭 합계

        Args:
            metric_name: CloudWatch 메트릭 이름
            table_name: DynamoDB 테이블 이름
            start_time: 구간 시작 시각

        Returns:
            구간 합계. datapoint가 없으면 0.0

        Raises:
            APICallError: GetMetricStatistics 호출 실패
        """
        window = self.window(start_time)
        try:
            response = self.client.get_metric_statistics(
                Namespace=self.namespace,
                MetricName=metric_name,
                Dimensions=[{"Name": "TableName", "Value": table_name}],
                StartTime=window.start,
                EndTime=window.end,
                Period=window.period_seconds,
                Statistics=["Sum"],
            )
        except (ClientError, BotoCoreError) as e:
            raise APICallError.from_client_error("cloudwatch", "GetMetricStatistics", e, resource=metric_name) from e

        datapoints = response.get("Datapoints", [])
        if not datapoints:
            logger.debug("%s/%s: no datapoints in %s ~ %s", table_name, metric_name, window.start, window.end)
            return 0.0

        # Period가 구간 길이와 같으므로 보통 1개. 경계가 어긋나 2개가 오면 합산
        return float(sum(dp.get("Sum", 0.0) for dp in datapoints))

    def read_throttle_events(self, table_name: str, start_time: datetime) -> float:
        return self.sum(READ_THROTTLE_EVENTS, table_name, start_time)

    def write_throttle_events(self, table_name: str, start_time: datetime) -> float:
        return self.sum(WRITE_THROTTLE_EVENTS, table_name, start_time)

    def consumed_read_capacity_units(self, table_name: str, start_time: datetime) -> float:
        return self.sum(CONSUMED_READ_CAPACITY_UNITS, table_name, start_time)

    def consumed_write_capacity_units(self, table_name: str, start_time: datetime) -> float:
        return self.sum(CONSUMED_WRITE_CAPACITY_UNITS, table_name, start_time)
