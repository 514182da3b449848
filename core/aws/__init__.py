"""
core/aws - boto3 세션/클라이언트 생성과 에러 분류

Usage:
    from core.aws import create_session, get_client

    session = create_session("us-east-1")
    dynamodb = get_client(session, "dynamodb")
"""

from .client import get_client
from .errors import ErrorCategory, categorize_error
from .session import create_session

__all__: list[str] = [
    "create_session",
    "get_client",
    "ErrorCategory",
    "categorize_error",
]
