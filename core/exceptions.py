"""
core/exceptions.py - 통합 예외 계층 구조

수집기 전체에서 사용되는 예외 클래스들을 정의합니다.
일관된 예외 처리와 에러 메시지를 제공합니다.

예외 계층 구조:
    CollectorError (베이스)
    ├── ConfigurationError (설정 관련)
    ├── RemoteQueryError (AWS API 호출 실패)
    └── CollectionError (수집 주기 집계 실패)

Usage:
    from core.exceptions import RemoteQueryError

    try:
        resp = cloudwatch.list_metrics(Namespace="AWS/ELB")
    except ClientError as e:
        raise RemoteQueryError.from_client_error("cloudwatch", "list_metrics", e) from e
"""

from __future__ import annotations

from typing import Any

# =============================================================================
# 베이스 예외
# =============================================================================


class CollectorError(Exception):
    """수집기 기본 예외 클래스

    모든 커스텀 예외의 베이스 클래스입니다.

    Attributes:
        message: 에러 메시지
        cause: 원인 예외 (체이닝용)
        details: 추가 상세 정보
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """예외 정보를 딕셔너리로 반환"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "cause": str(self.cause) if self.cause else None,
            "details": self.details,
        }


# =============================================================================
# 설정 관련 예외
# =============================================================================


class ConfigurationError(CollectorError):
    """설정 관련 예외"""

    def __init__(
        self,
        key: str,
        message: str,
        cause: Exception | None = None,
    ):
        full_message = f"설정 오류 [{key}]: {message}"
        super().__init__(full_message, cause)
        self.config_key = key
        self.details["config_key"] = key


# =============================================================================
# AWS API 호출 관련 예외
# =============================================================================


class RemoteQueryError(CollectorError):
    """AWS API 호출 관련 예외

    boto3/botocore의 ClientError를 래핑하여 일관된 예외 처리를 제공합니다.
    list_metrics, get_metric_statistics, describe_instances 실패 모두 이 예외로 전달됩니다.
    """

    def __init__(
        self,
        service: str,
        operation: str,
        error_code: str | None = None,
        error_message: str | None = None,
        cause: Exception | None = None,
    ):
        message = f"{service}.{operation}"
        if error_code:
            message = f"{message} 실패 ({error_code})"
        if error_message:
            message = f"{message}: {error_message}"

        super().__init__(message, cause)
        self.service = service
        self.operation = operation
        self.error_code = error_code
        self.error_message = error_message
        self.details.update(
            {
                "service": service,
                "operation": operation,
                "error_code": error_code,
            }
        )

    def __str__(self) -> str:
        return self.message

    @classmethod
    def from_client_error(
        cls,
        service: str,
        operation: str,
        client_error: Exception,
    ) -> RemoteQueryError:
        """botocore 예외로부터 생성

        Args:
            service: AWS 서비스 이름
            operation: API 작업 이름
            client_error: ClientError 또는 BotoCoreError 예외

        Returns:
            RemoteQueryError 인스턴스
        """
        error_code = None
        error_message = None

        # ClientError 형식 파싱
        response = getattr(client_error, "response", None)
        if response is not None:
            error_info = response.get("Error", {})
            error_code = error_info.get("Code")
            error_message = error_info.get("Message")
        else:
            error_code = client_error.__class__.__name__
            error_message = str(client_error)

        return cls(
            service=service,
            operation=operation,
            error_code=error_code,
            error_message=error_message,
            cause=client_error,
        )


# =============================================================================
# 수집 주기 관련 예외
# =============================================================================


class CollectionError(CollectorError):
    """수집 주기 집계 실패

    한 주기 동안 실패한 모든 메트릭 조회를 하나의 예외로 묶습니다.
    성공한 메트릭의 레코드는 이미 sink에 전달된 상태입니다.

    Attributes:
        errors: 실패한 작업의 TaskError 목록
        total: 전체 작업 수
    """

    def __init__(self, errors: list[Any], total: int):
        summary = "; ".join(str(e) for e in errors)
        message = f"메트릭 {total}개 중 {len(errors)}개 수집 실패: {summary}"
        super().__init__(message)
        self.errors = errors
        self.total = total
        self.details.update({"failed": len(errors), "total": total})


# =============================================================================
# 예외 유틸리티 함수
# =============================================================================


def _error_code_of(error: Exception) -> str | None:
    if isinstance(error, RemoteQueryError):
        return error.error_code

    # botocore ClientError 직접 확인
    response = getattr(error, "response", None)
    if response is not None:
        code: str = response.get("Error", {}).get("Code", "")
        return code

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
        "UnauthorizedOperation",
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
    }


def is_not_found(error: Exception) -> bool:
    """리소스를 찾을 수 없는 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        리소스 없음 오류이면 True
    """
    return _error_code_of(error) in {
        "ResourceNotFound",
        "ResourceNotFoundException",
        "NotFoundException",
        "InvalidInstanceID.NotFound",
    }
