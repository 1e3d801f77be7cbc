"""
core/parallel/executor.py - 메트릭 fan-out 실행기

해석된 메트릭마다 작업 하나를 병렬로 실행하고 결과를 하나의 CollectionOutcome으로 집계합니다.
ThreadPoolExecutor 기반이며, 작업 시작은 토큰 버킷 admission gate로 제한합니다.

특징:
- 슬롯 수가 아닌 경과 시간으로 시작을 제한 (admission 이후에는 모든 작업이 동시에 실행 가능)
- 형제 작업 실패 시에도 취소하지 않음 (부분 성공이 정상)
- 모든 작업이 정확히 한 번 결과를 보고한 뒤 반환

Example:
    executor = MetricFanoutExecutor(FanoutConfig(requests_per_second=10))
    outcome = executor.run(metrics, lambda m: fetcher.fetch(m, now), identify=str)

    if not outcome.ok:
        print(outcome.get_error_summary())
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import TypeVar

from .decorators import categorize_error, get_error_code
from .rate_limiter import RateLimiterConfig, TokenBucketRateLimiter
from .types import CollectionOutcome, ErrorCategory, TaskError, TaskResult

logger = logging.getLogger(__name__)

M = TypeVar("M")
T = TypeVar("T")


def _clear_exception_chain(e: BaseException) -> None:
    """traceback + chained exception 메모리 누수 방지"""
    e.__traceback__ = None
    if e.__context__ is not None:
        e.__context__.__traceback__ = None
    if e.__cause__ is not None:
        e.__cause__.__traceback__ = None


@dataclass
class FanoutConfig:
    """fan-out 실행 설정

    Attributes:
        requests_per_second: 초당 최대 작업 시작 수
        max_workers: 최대 동시 스레드 수 (None이면 작업 수만큼)
    """

    requests_per_second: float = 10.0
    max_workers: int | None = None

    def __post_init__(self) -> None:
        if self.requests_per_second <= 0:
            raise ValueError(f"requests_per_second must be > 0, got {self.requests_per_second}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")


class MetricFanoutExecutor:
    """메트릭 fan-out 실행기

    작업 시작 전 admission 토큰을 획득하고, 획득한 순서대로 스레드 풀에 제출합니다.
    각 작업의 성공/실패는 TaskResult로 수집되어 CollectionOutcome으로 반환됩니다.
    """

    def __init__(
        self,
        config: FanoutConfig | None = None,
        rate_limiter: TokenBucketRateLimiter | None = None,
    ):
        """초기화

        Args:
            config: 실행 설정 (None이면 기본값)
            rate_limiter: admission gate (None이면 config 기준으로 burst 1짜리 limiter 생성)
        """
        self.config = config or FanoutConfig()
        self.rate_limiter = rate_limiter or TokenBucketRateLimiter(
            RateLimiterConfig(
                requests_per_second=self.config.requests_per_second,
                burst_size=1,
                wait_timeout=None,
            )
        )

    def run(
        self,
        items: Sequence[M],
        func: Callable[[M], T],
        identify: Callable[[M], str] = str,
    ) -> CollectionOutcome[T]:
        """모든 항목에 대해 func를 병렬 실행

        Args:
            items: 작업 대상 목록 (해석된 메트릭)
            func: 항목 하나를 처리하는 함수
            identify: 에러 보고용 식별자 생성 함수

        Returns:
            CollectionOutcome[T]: 전체 실행 결과
        """
        if not items:
            logger.debug("실행할 작업이 없습니다")
            return CollectionOutcome()

        max_workers = self.config.max_workers or len(items)
        logger.info(
            f"fan-out 시작: {len(items)}개 작업, rate={self.config.requests_per_second}/s, max_workers={max_workers}"
        )

        results: list[TaskResult[T]] = []
        start_time = time.monotonic()

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="cw-fetch") as executor:
            futures: dict[Future[TaskResult[T]], str] = {}
            for item in items:
                # admission: 토큰을 얻을 때까지 대기한 뒤 제출 (wait_timeout이 있는 limiter면 재시도)
                while not self.rate_limiter.acquire():
                    logger.debug("admission 대기 타임아웃, 토큰 재요청")
                identifier = identify(item)
                futures[executor.submit(self._execute_single, func, item, identifier)] = identifier

            for future in as_completed(futures):
                identifier = futures[future]
                try:
                    results.append(future.result())
                except Exception as e:
                    # 예상치 못한 executor 에러
                    logger.error(f"작업 실행 중 예외 [{identifier}]: {e}")
                    _clear_exception_chain(e)
                    results.append(
                        TaskResult(
                            identifier=identifier,
                            success=False,
                            error=TaskError(
                                identifier=identifier,
                                category=ErrorCategory.UNKNOWN,
                                error_code="ExecutorError",
                                message=str(e),
                                original_exception=e,
                            ),
                        )
                    )

        total_time = (time.monotonic() - start_time) * 1000
        outcome = CollectionOutcome(results=tuple(results))

        logger.info(f"fan-out 완료: 성공 {outcome.success_count}, 실패 {outcome.error_count}, 총 {total_time:.0f}ms")

        return outcome

    def _execute_single(
        self,
        func: Callable[[M], T],
        item: M,
        identifier: str,
    ) -> TaskResult[T]:
        """단일 작업 실행 (워커 스레드 내에서 호출)

        예외는 TaskResult 실패로 변환되며 형제 작업에 영향을 주지 않습니다.
        """
        start_time = time.monotonic()

        try:
            data = func(item)
            return TaskResult(
                identifier=identifier,
                success=True,
                data=data,
                duration_ms=(time.monotonic() - start_time) * 1000,
            )
        except Exception as e:
            logger.debug(f"[{identifier}] 작업 실패: {e}")
            _clear_exception_chain(e)
            return TaskResult(
                identifier=identifier,
                success=False,
                error=TaskError(
                    identifier=identifier,
                    category=categorize_error(e),
                    error_code=get_error_code(e),
                    message=str(e),
                    original_exception=e,
                ),
                duration_ms=(time.monotonic() - start_time) * 1000,
            )
