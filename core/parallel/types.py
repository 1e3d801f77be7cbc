"""
core/parallel/types.py - 병렬 실행 결과 타입

메트릭별 작업 결과(TaskResult)와 수집 주기 전체 결과(CollectionOutcome)를 정의합니다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from core.exceptions import CollectionError

T = TypeVar("T")


class ErrorCategory(Enum):
    """에러 카테고리"""

    THROTTLING = "throttling"
    ACCESS_DENIED = "access_denied"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    EXPIRED_TOKEN = "expired_token"
    INVALID_REQUEST = "invalid_request"
    SERVICE_ERROR = "service_error"
    NETWORK = "network"
    UNKNOWN = "unknown"


@dataclass
class TaskError:
    """개별 작업 에러 정보

    Attributes:
        identifier: 작업 식별자 (메트릭 이름 + 차원)
        category: 에러 카테고리
        error_code: AWS 에러 코드 또는 예외 클래스명
        message: 에러 메시지
        original_exception: 원본 예외
    """

    identifier: str
    category: ErrorCategory
    error_code: str
    message: str
    original_exception: Exception | None = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return f"[{self.identifier}] {self.error_code}: {self.message}"


@dataclass
class TaskResult(Generic[T]):
    """개별 작업 결과

    Attributes:
        identifier: 작업 식별자
        success: 성공 여부
        data: 성공 시 반환 데이터
        error: 실패 시 에러 정보
        duration_ms: 실행 시간 (밀리초)
    """

    identifier: str
    success: bool
    data: T | None = None
    error: TaskError | None = None
    duration_ms: float = 0.0


@dataclass(frozen=True)
class CollectionOutcome(Generic[T]):
    """수집 주기 전체 결과

    메트릭별 수집은 best-effort이며 원자적이지 않습니다.
    실패가 하나라도 있으면 주기 전체가 실패로 보고되지만,
    성공한 메트릭의 레코드는 이미 전달된 상태입니다.
    """

    results: tuple[TaskResult[T], ...] = ()

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def successful(self) -> list[TaskResult[T]]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> list[TaskResult[T]]:
        return [r for r in self.results if not r.success]

    @property
    def success_count(self) -> int:
        return len(self.successful)

    @property
    def error_count(self) -> int:
        return len(self.failed)

    @property
    def ok(self) -> bool:
        return self.error_count == 0

    @property
    def errors(self) -> list[TaskError]:
        return [r.error for r in self.results if r.error is not None]

    def get_data(self) -> list[T]:
        """성공한 작업의 데이터 목록"""
        return [r.data for r in self.results if r.success and r.data is not None]

    def get_error_summary(self) -> str:
        """에러 카테고리별 요약 문자열"""
        if self.ok:
            return ""

        by_category: dict[ErrorCategory, int] = {}
        for error in self.errors:
            by_category[error.category] = by_category.get(error.category, 0) + 1

        parts = [f"{category.value}={count}" for category, count in sorted(by_category.items(), key=lambda x: x[0].value)]
        return f"실패 {self.error_count}/{self.total} ({', '.join(parts)})"

    def raise_for_errors(self) -> None:
        """실패가 있으면 CollectionError 발생

        Raises:
            CollectionError: 실패한 모든 작업의 에러를 담은 집계 예외
        """
        if not self.ok:
            raise CollectionError(self.errors, self.total)
