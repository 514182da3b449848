"""
core/aws/errors.py - AWS API 에러 분류

모니터 루프가 실패한 틱을 로그로 남길 때 붙이는 분류 정보입니다.
분류는 로그 문맥용일 뿐이며, 어떤 카테고리든 해당 틱만 건너뜁니다.
"""

from enum import Enum

from core.exceptions import APICallError, is_access_denied, is_not_found, is_throttling


class ErrorCategory(Enum):
    """에러 카테고리"""

    THROTTLING = "throttling"
    ACCESS_DENIED = "access_denied"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    EXPIRED_TOKEN = "expired_token"
    NETWORK = "network"
    UNKNOWN = "unknown"


def _root_cause(error: Exception) -> Exception:
    if isinstance(error, APICallError) and isinstance(error.cause, Exception):
        return error.cause
    return error


def categorize_error(error: Exception) -> ErrorCategory:
    """예외 객체를 분석하여 ErrorCategory로 분류

    ClientError의 경우 response에서 에러 코드를 추출하고,
    네트워크/타임아웃 에러는 타입으로 분류합니다.

    Args:
        error: 분류할 예외 (APICallError면 원인 예외 기준)

    Returns:
        에러 카테고리
    """
    if is_throttling(error):
        return ErrorCategory.THROTTLING
    if is_access_denied(error):
        return ErrorCategory.ACCESS_DENIED
    if is_not_found(error):
        return ErrorCategory.NOT_FOUND

    cause = _root_cause(error)
    response = getattr(cause, "response", None)
    if response is not None:
        error_code = response.get("Error", {}).get("Code", "")

        if "Timeout" in error_code:
            return ErrorCategory.TIMEOUT

        if error_code in ("ExpiredToken", "ExpiredTokenException"):
            return ErrorCategory.EXPIRED_TOKEN

    # botocore 네트워크 예외 (EndpointConnectionError, ReadTimeoutError 등)
    from botocore.exceptions import ConnectionError as BotoConnectionError
    from botocore.exceptions import ConnectTimeoutError, ReadTimeoutError

    if isinstance(cause, (ReadTimeoutError, ConnectTimeoutError, TimeoutError)):
        return ErrorCategory.TIMEOUT
    if isinstance(cause, (BotoConnectionError, ConnectionError, OSError)):
        return ErrorCategory.NETWORK

    return ErrorCategory.UNKNOWN

