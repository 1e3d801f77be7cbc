"""
shared/aws/metrics/collector.py - CloudWatch 수집기

한 번의 수집 주기(gather):
    1. 셀렉터 해석 (차원 필터 + 네임스페이스 카탈로그)
    2. 메트릭마다 통계 조회 작업을 rate-limit 안에서 병렬 실행
    3. datapoint를 sink로 전달하고 작업별 결과를 CollectionOutcome으로 집계

AWS/EC2 네임스페이스면 인스턴스 태그 캐시를 만들고, 첫 수집 전에 동기 조회 후
백그라운드 갱신 스레드를 시작합니다. close()로 갱신 스레드를 종료합니다.

Usage:
    with CloudWatchCollector.from_config(config) as collector:
        outcome = collector.gather(sink)
        outcome.raise_for_errors()
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from core.parallel import FanoutConfig, MetricFanoutExecutor
from core.parallel.types import CollectionOutcome
from shared.aws.ec2.instance_tags import EC2_NAMESPACE, EC2API, InstanceTagCache, InstanceTagRefresher

from .catalog import MetricCatalog
from .dimensions import resolve
from .statistics import StatisticsFetcher
from .types import CloudWatchAPI, MetricDescriptor, MetricSink

if TYPE_CHECKING:
    from core.config import CollectorConfig

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CloudWatchCollector:
    """CloudWatch 네임스페이스 수집기

    카탈로그 캐시와 태그 캐시는 수집기 인스턴스가 소유합니다.

    Args:
        config: 수집기 설정
        cloudwatch: CloudWatch 클라이언트
        ec2: EC2 클라이언트 (AWS/EC2 네임스페이스에서만 사용)
        executor: fan-out 실행기 (None이면 config.rate_limit 기준으로 생성)
        clock: 현재 시각 함수
    """

    def __init__(
        self,
        config: CollectorConfig,
        cloudwatch: CloudWatchAPI,
        ec2: EC2API | None = None,
        executor: MetricFanoutExecutor | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.config = config
        self._clock = clock
        self.catalog = MetricCatalog(cloudwatch, config.namespace, ttl=config.cache_ttl)
        self.executor = executor or MetricFanoutExecutor(FanoutConfig(requests_per_second=config.rate_limit))

        self.tag_cache: InstanceTagCache | None = None
        self.tag_refresher: InstanceTagRefresher | None = None
        if config.namespace == EC2_NAMESPACE and ec2 is not None:
            self.tag_cache = InstanceTagCache(ec2)
            self.tag_refresher = InstanceTagRefresher(self.tag_cache)

        self.fetcher = StatisticsFetcher(
            cloudwatch,
            namespace=config.namespace,
            region=config.region,
            period=config.period,
            delay=config.delay,
            tag_cache=self.tag_cache,
        )

        self._started = False
        self._start_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: CollectorConfig) -> CloudWatchCollector:
        """설정의 자격 증명으로 boto3 클라이언트를 만들어 수집기 생성"""
        from core.parallel.client import get_client
        from core.session import build_session

        session = build_session(config)
        rps = config.rate_limit
        cloudwatch = get_client(session, "cloudwatch", region_name=config.region, requests_per_second=rps)
        ec2 = None
        if config.namespace == EC2_NAMESPACE:
            ec2 = get_client(session, "ec2", region_name=config.region, requests_per_second=rps)
        return cls(config, cloudwatch, ec2)

    def __enter__(self) -> CloudWatchCollector:
        self.start()
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def start(self) -> None:
        """태그 캐시 초기 조회 + 백그라운드 갱신 시작 (최초 1회)"""
        with self._start_lock:
            if self._started:
                return
            self._started = True

        if self.tag_cache is not None and self.tag_refresher is not None:
            self.tag_cache.prime()
            self.tag_refresher.start()

    def close(self) -> None:
        """백그라운드 갱신 종료"""
        if self.tag_refresher is not None:
            self.tag_refresher.stop()
        with self._start_lock:
            self._started = False

    def resolve_metrics(self) -> list[MetricDescriptor]:
        """이번 주기에 조회할 메트릭 목록

        Raises:
            RemoteQueryError: 카탈로그 조회 실패
        """
        return resolve(self.config.metrics, self.catalog.fetch_namespace_metrics, self.config.namespace)

    def gather(self, sink: MetricSink, now: datetime | None = None) -> CollectionOutcome[int]:
        """수집 주기 1회 실행

        Args:
            sink: datapoint를 받을 accumulator
            now: 조회 기준 시각 (None이면 현재 시각)

        Returns:
            작업별 결과 집계 (성공 작업의 data = 전달한 레코드 수)

        Raises:
            RemoteQueryError: 메트릭 목록 해석 단계의 카탈로그 조회 실패
        """
        self.start()

        metrics = self.resolve_metrics()
        as_of = now or self._clock()

        def fetch_one(metric: MetricDescriptor) -> int:
            records = self.fetcher.fetch(metric, as_of)
            for record in records:
                sink.add_fields(record.measurement, record.fields, record.tags, record.timestamp)
            return len(records)

        outcome = self.executor.run(metrics, fetch_one, identify=str)

        if not outcome.ok:
            logger.warning(f"{self.config.namespace} 수집 일부 실패: {outcome.get_error_summary()}")

        return outcome
