"""
core/parallel/decorators.py - AWS API 에러 분류 유틸리티

AWS API 호출 에러를 ErrorCategory로 분류하고 에러 코드를 추출합니다.

주요 구성 요소:
- categorize_error: 예외를 ErrorCategory로 분류
- get_error_code: 예외에서 에러 코드 추출
"""

from core.exceptions import is_access_denied, is_not_found, is_throttling

from .types import ErrorCategory


def categorize_error(error: Exception) -> ErrorCategory:
    """예외 객체를 분석하여 ErrorCategory로 분류

    ClientError 또는 RemoteQueryError의 에러 코드를 우선 확인하고,
    네트워크/타임아웃 에러는 타입으로 분류합니다.

    Args:
        error: 분류할 예외

    Returns:
        에러 카테고리
    """
    if is_throttling(error):
        return ErrorCategory.THROTTLING
    if is_access_denied(error):
        return ErrorCategory.ACCESS_DENIED
    if is_not_found(error):
        return ErrorCategory.NOT_FOUND

    error_code = get_error_code(error)

    if "Timeout" in error_code:
        return ErrorCategory.TIMEOUT

    if error_code in ("ExpiredToken", "ExpiredTokenException"):
        return ErrorCategory.EXPIRED_TOKEN

    if error_code.startswith("Invalid") or error_code in ("ValidationError", "MissingParameter"):
        return ErrorCategory.INVALID_REQUEST

    if error_code in ("InternalFailure", "InternalServiceError", "ServiceUnavailable"):
        return ErrorCategory.SERVICE_ERROR

    # 네트워크 에러
    if isinstance(error, (ConnectionError, TimeoutError, OSError)):
        return ErrorCategory.NETWORK

    return ErrorCategory.UNKNOWN


def get_error_code(error: Exception) -> str:
    """예외 객체에서 에러 코드 문자열 추출

    RemoteQueryError는 error_code를, ClientError는 response의 Code를,
    그 외에는 예외 클래스명을 반환합니다.

    Args:
        error: 예외 객체

    Returns:
        에러 코드 문자열
    """
    code = getattr(error, "error_code", None)
    if isinstance(code, str) and code:
        return code

    response = getattr(error, "response", None)
    if response is not None:
        response_code: str = response.get("Error", {}).get("Code", "Unknown")
        return response_code
    return error.__class__.__name__
