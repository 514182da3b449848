"""
shared/aws/dynamodb/capacity.py - DynamoDB 프로비저닝 용량 조회

DescribeTable 한 번으로 현재 프로비저닝된 RCU/WCU를 조회합니다.
외부 스케일링으로 용량이 틱 사이에 바뀔 수 있으므로 캐시하지 않습니다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import APICallError

logger = logging.getLogger(__name__)

BILLING_MODE_PROVISIONED = "PROVISIONED"
BILLING_MODE_ON_DEMAND = "PAY_PER_REQUEST"


@dataclass(frozen=True)
class ProvisionedCapacity:
    """테이블 프로비저닝 용량

    Attributes:
        read: 프로비저닝된 읽기 용량 단위 (RCU)
        write: 프로비저닝된 쓰기 용량 단위 (WCU)
        billing_mode: 용량 모드 (PROVISIONED 또는 PAY_PER_REQUEST)
    """

    read: int
    write: int
    billing_mode: str = BILLING_MODE_PROVISIONED

    @property
    def is_on_demand(self) -> bool:
        return self.billing_mode == BILLING_MODE_ON_DEMAND


class TableCapacity:
    """DescribeTable 기반 용량 조회기 (스레드 안전, 상태 없음)"""

    def __init__(self, client: Any):
        self.client = client

    def describe(self, table_name: str) -> ProvisionedCapacity:
        """현재 프로비저닝 용량 조회

        Args:
            table_name: DynamoDB 테이블 이름

        Returns:
            ProvisionedCapacity

        Raises:
            APICallError: DescribeTable 호출 실패
        """
        try:
            response = self.client.describe_table(TableName=table_name)
        except (ClientError, BotoCoreError) as e:
            raise APICallError.from_client_error("dynamodb", "DescribeTable", e, resource=table_name) from e

        table = response.get("Table", {})
        throughput = table.get("ProvisionedThroughput", {})
        # 생성 당시부터 On-Demand인 테이블은 BillingModeSummary가 없을 수 있음
        billing_mode = table.get("BillingModeSummary", {}).get("BillingMode", BILLING_MODE_PROVISIONED)

        return ProvisionedCapacity(
            read=int(throughput.get("ReadCapacityUnits", 0)),
            write=int(throughput.get("WriteCapacityUnits", 0)),
            billing_mode=billing_mode,
        )
