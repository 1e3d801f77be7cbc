"""
core/parallel/rate_limiter.py - 토큰 버킷 Rate Limiter

CloudWatch API는 계정 단위 요청률 한도가 있어서 동시에 몰리면 쓰로틀링이 발생합니다.
새 요청 시작을 초당 N개 이하로 제한하는 admission gate를 제공합니다.

burst_size=1로 설정하면 연속된 시작 사이 간격이 최소 1/N초가 되므로
어떤 1초 구간에서도 N개를 넘는 시작이 발생하지 않습니다.

Example:
    limiter = TokenBucketRateLimiter(RateLimiterConfig(requests_per_second=10, burst_size=1))

    for metric in metrics:
        limiter.acquire()  # 다음 슬롯까지 대기
        executor.submit(fetch, metric)
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_REQUESTS_PER_SECOND = 10.0


@dataclass
class RateLimiterConfig:
    """Rate limiter 설정

    Attributes:
        requests_per_second: 초당 토큰 충전 속도
        burst_size: 버킷 최대 토큰 수 (순간 허용량)
        wait_timeout: acquire 최대 대기 시간 (초, None이면 무제한)
    """

    requests_per_second: float = DEFAULT_REQUESTS_PER_SECOND
    burst_size: int = 20
    wait_timeout: float | None = 30.0

    def __post_init__(self) -> None:
        if self.requests_per_second <= 0:
            raise ValueError(f"requests_per_second must be > 0, got {self.requests_per_second}")
        if self.burst_size < 1:
            raise ValueError(f"burst_size must be >= 1, got {self.burst_size}")


class TokenBucketRateLimiter:
    """토큰 버킷 Rate Limiter (스레드 안전)

    초기 토큰은 burst_size 만큼 채워져 있으며, requests_per_second 속도로 충전됩니다.
    """

    def __init__(
        self,
        config: RateLimiterConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or RateLimiterConfig()
        self._clock = clock
        self._tokens = float(self.config.burst_size)
        self._last_refill = clock()
        self._lock = threading.Lock()

    def _refill(self) -> None:
        """경과 시간만큼 토큰 충전 (Lock 내부에서 호출)"""
        now = self._clock()
        elapsed = now - self._last_refill
        if elapsed > 0:
            self._tokens = min(
                float(self.config.burst_size),
                self._tokens + elapsed * self.config.requests_per_second,
            )
            self._last_refill = now

    @property
    def available_tokens(self) -> float:
        """현재 사용 가능한 토큰 수"""
        with self._lock:
            self._refill()
            return self._tokens

    def try_acquire(self, tokens: int = 1) -> bool:
        """대기 없이 토큰 획득 시도

        Args:
            tokens: 필요한 토큰 수

        Returns:
            획득 성공 시 True
        """
        with self._lock:
            self._refill()
            if self._tokens >= tokens:
                self._tokens -= tokens
                return True
            return False

    def acquire(self, tokens: int = 1) -> bool:
        """토큰을 획득할 때까지 대기

        Args:
            tokens: 필요한 토큰 수

        Returns:
            획득 성공 시 True, wait_timeout 초과 시 False
        """
        timeout = self.config.wait_timeout
        deadline = None if timeout is None else self._clock() + timeout

        while True:
            with self._lock:
                self._refill()
                if self._tokens >= tokens:
                    self._tokens -= tokens
                    return True
                wait = (tokens - self._tokens) / self.config.requests_per_second

            if deadline is not None:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    logger.debug("Rate limiter 대기 타임아웃")
                    return False
                wait = min(wait, remaining)

            time.sleep(wait)

