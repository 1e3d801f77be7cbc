"""
core/parallel - 병렬 처리 모듈

CloudWatch 메트릭 조회를 요청률 한도 안에서 병렬로 처리합니다.

주요 구성 요소:
- MetricFanoutExecutor: 메트릭당 작업 하나를 실행하는 fan-out 실행기
- TokenBucketRateLimiter: API 쓰로틀링 방지용 admission gate
- CollectionOutcome: 작업별 성공/실패 집계 결과

Example:
    from core.parallel import FanoutConfig, MetricFanoutExecutor

    executor = MetricFanoutExecutor(FanoutConfig(requests_per_second=10))
    outcome = executor.run(metrics, fetch_one)

    print(f"성공: {outcome.success_count}, 실패: {outcome.error_count}")
    outcome.raise_for_errors()
"""

from .client import get_client
from .decorators import categorize_error, get_error_code
from .executor import FanoutConfig, MetricFanoutExecutor
from .rate_limiter import RateLimiterConfig, TokenBucketRateLimiter
from .types import CollectionOutcome, ErrorCategory, TaskError, TaskResult

__all__: list[str] = [
    # Executor
    "MetricFanoutExecutor",
    "FanoutConfig",
    # Client (retry 적용)
    "get_client",
    # Error handling
    "categorize_error",
    "get_error_code",
    # Rate Limiter
    "TokenBucketRateLimiter",
    "RateLimiterConfig",
    # Types
    "ErrorCategory",
    "TaskError",
    "TaskResult",
    "CollectionOutcome",
]
