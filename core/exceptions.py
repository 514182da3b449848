"""
core/exceptions.py - 통합 예외 계층 구조

모니터 전체에서 사용되는 예외 클래스들을 정의합니다.
일관된 예외 처리와 에러 메시지를 제공합니다.

예외 계층 구조:
    AutoscalerError (베이스)
    ├── APICallError (CloudWatch/DynamoDB 호출 실패, 틱 단위로 복구)
    ├── ConfigError (설정 관련)
    ├── ValidationError (입력 검증)
    └── LivenessViolation (체크가 2 × interval 안에 끝나지 않음, 치명적)

Usage:
    from core.exceptions import APICallError

    try:
        out = dynamodb.describe_table(TableName=table_name)
    except ClientError as e:
        raise APICallError.from_client_error("dynamodb", "DescribeTable", e) from e
"""

from typing import Any, Dict, Optional

# =============================================================================
# 베이스 예외
# =============================================================================


class AutoscalerError(Exception):
    """모니터 기본 예외 클래스

    모든 커스텀 예외의 베이스 클래스입니다.

    Attributes:
        message: 에러 메시지
        cause: 원인 예외 (체이닝용)
        details: 추가 상세 정보
    """

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """예외 정보를 딕셔너리로 반환"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "cause": str(self.cause) if self.cause else None,
            "details": self.details,
        }


# =============================================================================
# AWS API 호출 관련 예외
# =============================================================================


class APICallError(AutoscalerError):
    """AWS API 호출 관련 예외

    boto3/botocore 예외를 래핑하여 어떤 작업에서 실패했는지 추적할 수 있게 합니다.
    모니터 루프에서는 로그만 남기고 해당 틱을 건너뜁니다.

    Attributes:
        resource: 호출 대상 (메트릭 이름, 테이블 이름 등). 메시지에 괄호로 표시
    """

    def __init__(
        self,
        service: str,
        operation: str,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
        cause: Optional[Exception] = None,
        resource: Optional[str] = None,
    ):
        message = f"{service}.{operation}"
        if resource:
            message = f"{message}({resource})"
        if error_code:
            message = f"{message} failed ({error_code})"
        if error_message:
            message = f"{message}: {error_message}"

        super().__init__(message, cause)
        self.service = service
        self.operation = operation
        self.resource = resource
        self.error_code = error_code
        self.error_message = error_message
        self.details.update(
            {
                "service": service,
                "operation": operation,
                "resource": resource,
                "error_code": error_code,
            }
        )

    def __str__(self) -> str:
        # error_message가 있으면 cause 문자열은 중복
        if self.error_message:
            return self.message
        return super().__str__()

    @classmethod
    def from_client_error(
        cls,
        service: str,
        operation: str,
        client_error: Exception,
        resource: Optional[str] = None,
    ) -> "APICallError":
        """botocore 예외로부터 생성

        ClientError는 response에서 코드/메시지를 추출하고,
        BotoCoreError(네트워크, 타임아웃 등)는 원인 예외만 보존합니다.

        Args:
            service: AWS 서비스 이름
            operation: API 작업 이름
            client_error: botocore 예외
            resource: 호출 대상 (선택)

        Returns:
            APICallError 인스턴스
        """
        error_code = None
        error_message = None

        if hasattr(client_error, "response"):
            error_info = client_error.response.get("Error", {})
            error_code = error_info.get("Code")
            error_message = error_info.get("Message")

        return cls(
            service=service,
            operation=operation,
            error_code=error_code,
            error_message=error_message,
            cause=client_error,
            resource=resource,
        )


# =============================================================================
# 설정 관련 예외
# =============================================================================


class ConfigError(AutoscalerError):
    """설정 관련 예외"""

    def __init__(
        self,
        key: str,
        message: str,
        cause: Optional[Exception] = None,
    ):
        full_message = f"config error [{key}]: {message}"
        super().__init__(full_message, cause)
        self.config_key = key
        self.details["config_key"] = key


class ValidationError(AutoscalerError):
    """입력 검증 오류"""

    def __init__(
        self,
        field: str,
        value: Any,
        expected: str,
        cause: Optional[Exception] = None,
    ):
        message = f"invalid {field}: expected {expected}, got {value!r}"
        super().__init__(message, cause)
        self.field = field
        self.value = value
        self.expected = expected
        self.details.update(
            {
                "field": field,
                "value": str(value),
                "expected": expected,
            }
        )


# =============================================================================
# 라이브니스 위반
# =============================================================================


class LivenessViolation(AutoscalerError):
    """체크가 제한 시간 안에 끝나지 않음

    복구하지 않습니다. FatalSignal에 실려 최상위 러너로 전달되고,
    러너는 로그를 flush한 뒤 비정상 종료 코드로 프로세스를 끝냅니다.
    """

    def __init__(self, check_name: str, timeout: float):
        super().__init__(f"{check_name} deadlock detected (no result after {timeout:g}s)")
        self.check_name = check_name
        self.timeout = timeout
        self.details.update({"check_name": check_name, "timeout": timeout})


# =============================================================================
# 예외 유틸리티 함수
# =============================================================================


def _error_code_of(error: Exception) -> Optional[str]:
    if isinstance(error, APICallError):
        return error.error_code
    if hasattr(error, "response"):
        return error.response.get("Error", {}).get("Code", "")
    return None


def is_access_denied(error: Exception) -> bool:
    """액세스 거부 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        액세스 거부 오류이면 True
    """
    return _error_code_of(error) in (
        "AccessDenied",
        "AccessDeniedException",
        "UnauthorizedAccess",
        "UnrecognizedClientException",
    )


def is_throttling(error: Exception) -> bool:
    """스로틀링 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        스로틀링 오류이면 True
    """
    return _error_code_of(error) in {
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "TooManyRequestsException",
        "RateExceeded",
        "LimitExceededException",
    }


def is_not_found(error: Exception) -> bool:
    """리소스를 찾을 수 없는 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        리소스 없음 오류이면 True
    """
    return _error_code_of(error) in {
        "ResourceNotFoundException",
        "NotFoundException",
        "TableNotFoundException",
    }


def format_error_for_user(error: Exception) -> str:
    """사용자에게 표시할 에러 메시지 포맷팅

    Args:
        error: 예외

    Returns:
        사용자 친화적인 에러 메시지
    """
    friendly_messages = {
        "AccessDeniedException": "Access denied. Check the IAM policy for dynamodb:DescribeTable "
        "and cloudwatch:GetMetricStatistics.",
        "AccessDenied": "Access denied. Check the IAM policy.",
        "ExpiredToken": "The security token has expired. Refresh your credentials.",
        "ExpiredTokenException": "The security token has expired. Refresh your credentials.",
        "UnrecognizedClientException": "Invalid credentials.",
        "ResourceNotFoundException": "Table not found in the selected region.",
    }

    code = _error_code_of(error)
    if code and code in friendly_messages:
        return friendly_messages[code]

    if isinstance(error, AutoscalerError):
        # 커스텀 예외는 이미 포맷팅됨
        return str(error)

    if hasattr(error, "response"):
        error_info = error.response.get("Error", {})
        return f"{error_info.get('Code', 'UnknownError')}: {error_info.get('Message', str(error))}"

    return str(error)
