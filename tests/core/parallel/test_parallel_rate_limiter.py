"""
tests/core/parallel/test_parallel_rate_limiter.py - core/parallel/rate_limiter.py 테스트
"""

import threading

import pytest

from core.parallel.rate_limiter import RateLimiterConfig, TokenBucketRateLimiter


class FakeMonotonic:
    """time.sleep 호출만큼 진행하는 가짜 monotonic 시계"""

    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_time(monkeypatch):
    clock = FakeMonotonic()
    monkeypatch.setattr("core.parallel.rate_limiter.time.sleep", clock.sleep)
    return clock


class TestRateLimiterConfig:
    """RateLimiterConfig 테스트"""

    def test_default_values(self):
        """기본값 확인"""
        config = RateLimiterConfig()

        assert config.requests_per_second == 10.0
        assert config.burst_size == 20
        assert config.wait_timeout == 30.0

    def test_custom_values(self):
        config = RateLimiterConfig(requests_per_second=50.0, burst_size=100, wait_timeout=None)

        assert config.requests_per_second == 50.0
        assert config.burst_size == 100
        assert config.wait_timeout is None

    @pytest.mark.parametrize("kwargs", [{"requests_per_second": 0}, {"requests_per_second": -1}, {"burst_size": 0}])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            RateLimiterConfig(**kwargs)


class TestTokenBucketRateLimiter:
    """TokenBucketRateLimiter 테스트"""

    def test_initial_tokens_equals_burst_size(self):
        """초기 토큰 = 버스트 크기"""
        limiter = TokenBucketRateLimiter(RateLimiterConfig(burst_size=15))

        assert limiter.available_tokens == 15

    def test_try_acquire_until_empty(self, fake_time):
        """버스트를 모두 쓰면 try_acquire 실패"""
        limiter = TokenBucketRateLimiter(RateLimiterConfig(requests_per_second=4, burst_size=3), clock=fake_time)

        assert [limiter.try_acquire() for _ in range(4)] == [True, True, True, False]

    def test_refill_over_time(self, fake_time):
        """경과 시간만큼 토큰 충전, 버스트 크기를 넘지 않음"""
        limiter = TokenBucketRateLimiter(RateLimiterConfig(requests_per_second=4, burst_size=2), clock=fake_time)
        limiter.try_acquire(2)

        fake_time.now += 0.25
        assert limiter.available_tokens == pytest.approx(1.0)

        fake_time.now += 10
        assert limiter.available_tokens == 2

    def test_acquire_waits_for_token(self, fake_time):
        """토큰이 없으면 충전될 때까지 대기"""
        limiter = TokenBucketRateLimiter(
            RateLimiterConfig(requests_per_second=4, burst_size=1, wait_timeout=None), clock=fake_time
        )

        assert limiter.acquire() is True
        assert fake_time.now == 0.0

        assert limiter.acquire() is True
        assert fake_time.now == pytest.approx(0.25)

    def test_acquire_timeout(self, fake_time):
        """wait_timeout 안에 토큰이 생기지 않으면 False"""
        limiter = TokenBucketRateLimiter(
            RateLimiterConfig(requests_per_second=1, burst_size=1, wait_timeout=0.5), clock=fake_time
        )
        limiter.acquire()

        assert limiter.acquire() is False
        assert fake_time.now == pytest.approx(0.5)

    def test_admission_rate_per_window(self, fake_time):
        """burst 1이면 어떤 1초 구간에도 R개를 넘는 획득이 없음"""
        rate = 8
        limiter = TokenBucketRateLimiter(
            RateLimiterConfig(requests_per_second=rate, burst_size=1, wait_timeout=None), clock=fake_time
        )

        starts = []
        for _ in range(40):
            limiter.acquire()
            starts.append(fake_time.now)

        for t in starts:
            in_window = [s for s in starts if t <= s < t + 1.0]
            assert len(in_window) <= rate

        # 전체 소요 시간은 (n-1)/R
        assert starts[-1] == pytest.approx(39 / rate)

    def test_thread_safety(self):
        """여러 스레드가 동시에 획득해도 버스트를 초과하지 않음"""
        limiter = TokenBucketRateLimiter(RateLimiterConfig(requests_per_second=0.001, burst_size=50))
        acquired = []
        lock = threading.Lock()

        def worker():
            for _ in range(20):
                if limiter.try_acquire():
                    with lock:
                        acquired.append(1)

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(acquired) == 50
