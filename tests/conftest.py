"""
tests/conftest.py - pytest 공통 픽스처

AWS API 모킹과 테스트 헬퍼를 제공합니다.

Usage:
    def test_something(mock_cloudwatch_client, mock_dynamodb_client):
        metrics = TableMetrics(mock_cloudwatch_client)
"""

import os
import sys
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


# =============================================================================
# 환경 설정
# =============================================================================


@pytest.fixture(autouse=True)
def setup_test_environment():
    """테스트 환경 설정"""
    os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

    yield


# =============================================================================
# AWS 모킹 픽스처
# =============================================================================


@pytest.fixture
def mock_cloudwatch_client():
    """CloudWatch 클라이언트 모킹 (기본: datapoint 없음)"""
    mock_client = MagicMock()
    mock_client.get_metric_statistics.return_value = {"Label": "Metric", "Datapoints": []}
    yield mock_client


@pytest.fixture
def mock_dynamodb_client():
    """DynamoDB 클라이언트 모킹 (기본: 1000 RCU / 500 WCU)"""
    mock_client = MagicMock()
    mock_client.describe_table.return_value = create_describe_table_response(read=1000, write=500)
    yield mock_client


# =============================================================================
# 테스트 더블
# =============================================================================


class FakeClock:
    """수동으로 진행하는 monotonic 시계"""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeShutdown(threading.Event):
    """wait()가 실제로 잠들지 않고 FakeClock을 진행시키는 shutdown 이벤트

    stop_after_waits회 대기 후 스스로 set됩니다.
    """

    def __init__(self, clock: FakeClock, stop_after_waits: int = 100):
        super().__init__()
        self.clock = clock
        self.waits: List[float] = []
        self._stop_after_waits = stop_after_waits

    def wait(self, timeout: Optional[float] = None) -> bool:
        if self.is_set():
            return True
        self.waits.append(timeout)
        self.clock.advance(timeout or 0.0)
        if len(self.waits) >= self._stop_after_waits:
            self.set()
        return self.is_set()


@pytest.fixture
def fake_clock():
    return FakeClock()


# =============================================================================
# 유틸리티 함수
# =============================================================================


def create_describe_table_response(
    read: int,
    write: int,
    table_name: str = "orders",
    billing_mode: Optional[str] = "PROVISIONED",
) -> Dict[str, Any]:
    """DescribeTable 응답 생성 헬퍼"""
    table: Dict[str, Any] = {
        "TableName": table_name,
        "TableStatus": "ACTIVE",
        "ProvisionedThroughput": {
            "NumberOfDecreasesToday": 0,
            "ReadCapacityUnits": read,
            "WriteCapacityUnits": write,
        },
    }
    if billing_mode:
        table["BillingModeSummary"] = {"BillingMode": billing_mode}
    return {"Table": table}


def create_metric_response(*sums: float) -> Dict[str, Any]:
    """GetMetricStatistics 응답 생성 헬퍼"""
    return {
        "Label": "Metric",
        "Datapoints": [{"Sum": value, "Unit": "Count"} for value in sums],
    }


def create_mock_client_error(
    error_code: str,
    error_message: str = "Test error",
    operation: str = "TestOperation",
) -> Exception:
    """ClientError 생성 헬퍼"""
    from botocore.exceptions import ClientError

    return ClientError(
        {
            "Error": {
                "Code": error_code,
                "Message": error_message,
            }
        },
        operation,
    )


# =============================================================================
# moto 통합
# =============================================================================


@pytest.fixture
def aws_credentials():
    """moto 사용 시 AWS 자격 증명 설정"""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture
def moto_dynamodb(aws_credentials):
    """moto를 사용한 DynamoDB 모킹 (provisioned 테이블 'orders' 생성)"""
    import boto3
    from moto import mock_aws

    with mock_aws():
        dynamodb = boto3.client("dynamodb", region_name="us-east-1")
        dynamodb.create_table(
            TableName="orders",
            KeySchema=[{"AttributeName": "pk", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "pk", "AttributeType": "S"}],
            ProvisionedThroughput={"ReadCapacityUnits": 25, "WriteCapacityUnits": 10},
        )
        yield dynamodb
