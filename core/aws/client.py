"""
core/aws/client.py - boto3 client 생성 헬퍼

Retry + 타임아웃 + 연결 풀이 설정된 boto3 client를 생성합니다.

기본값은 재시도 없음(max_attempts=1)입니다.
실패한 호출은 해당 틱을 건너뛰고 다음 틱에서 자연스럽게 다시 시도되므로
SDK 수준 재시도가 워치독 타임아웃을 잡아먹지 않도록 합니다.

Example:
    from core.aws.client import get_client

    cloudwatch = get_client(session, "cloudwatch", region_name="us-east-1")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from botocore.config import Config

from core.config import settings

if TYPE_CHECKING:
    import boto3

RetryMode = Literal["legacy", "standard", "adaptive"]

DEFAULT_RETRY_MODE: RetryMode = "standard"
# 평가기 2개가 클라이언트를 공유
DEFAULT_MAX_POOL_CONNECTIONS = 4


def get_client(
    session: boto3.Session,
    service_name: str,
    region_name: str | None = None,
    max_attempts: int = settings.API_MAX_ATTEMPTS,
    retry_mode: RetryMode = DEFAULT_RETRY_MODE,
    connect_timeout: int = settings.API_CONNECT_TIMEOUT,
    read_timeout: int = settings.API_READ_TIMEOUT,
    max_pool_connections: int = DEFAULT_MAX_POOL_CONNECTIONS,
    **kwargs: Any,
) -> Any:
    """Retry/타임아웃이 적용된 boto3 client 생성

    Args:
        session: boto3 Session
        service_name: AWS 서비스 이름 (cloudwatch, dynamodb)
        region_name: 리전 (None이면 세션 기본값)
        max_attempts: 최대 시도 횟수 (첫 호출 포함, 기본: 1)
        retry_mode: 재시도 모드
        connect_timeout: 연결 타임아웃 (초)
        read_timeout: 읽기 타임아웃 (초)
        max_pool_connections: HTTP 연결 풀 크기
        **kwargs: session.client()에 전달할 추가 인자

    Returns:
        boto3 client
    """
    config = Config(
        retries={"max_attempts": max_attempts, "mode": retry_mode},
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
        max_pool_connections=max_pool_connections,
    )

    if "config" in kwargs:
        config = config.merge(kwargs.pop("config"))

    return session.client(service_name, region_name=region_name, config=config, **kwargs)
