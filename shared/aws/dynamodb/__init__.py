"""
shared/aws/dynamodb - DynamoDB 테이블 메타데이터 조회
"""

from .capacity import (
    BILLING_MODE_ON_DEMAND,
    BILLING_MODE_PROVISIONED,
    ProvisionedCapacity,
    TableCapacity,
)

__all__ = [
    "BILLING_MODE_ON_DEMAND",
    "BILLING_MODE_PROVISIONED",
    "ProvisionedCapacity",
    "TableCapacity",
]
