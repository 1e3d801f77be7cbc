"""
shared/aws/metrics/catalog.py - 네임스페이스 메트릭 카탈로그

list_metrics 결과를 TTL 동안 캐시합니다.
수집기 하나는 네임스페이스 하나만 다루므로 캐시 항목도 하나입니다.

캐시 정책:
- 유효한 항목이 있으면 API 호출 없이 반환
- 만료/없음이면 NextToken이 없을 때까지 페이지 조회 후 항목 전체 교체
- 페이지 조회 중 하나라도 실패하면 기존 항목을 그대로 두고 RemoteQueryError 전파
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import RemoteQueryError

from .types import CloudWatchAPI, MetricCacheEntry, MetricDescriptor

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = timedelta(hours=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MetricCatalog:
    """네임스페이스 메트릭 목록 캐시

    Example:
        catalog = MetricCatalog(cloudwatch, "AWS/ELB", ttl=timedelta(minutes=10))
        descriptors = catalog.fetch_namespace_metrics()
    """

    def __init__(
        self,
        client: CloudWatchAPI,
        namespace: str,
        ttl: timedelta | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._client = client
        self.namespace = namespace
        self.ttl = ttl or DEFAULT_CACHE_TTL
        self._clock = clock
        self._entry: MetricCacheEntry | None = None
        self._lock = threading.Lock()

    @property
    def entry(self) -> MetricCacheEntry | None:
        """현재 캐시 항목 (없으면 None)"""
        return self._entry

    def invalidate(self) -> None:
        """캐시 항목 제거 (다음 호출 시 강제 갱신)"""
        with self._lock:
            self._entry = None

    def fetch_namespace_metrics(self) -> list[MetricDescriptor]:
        """네임스페이스의 전체 메트릭 디스크립터 반환

        Returns:
            MetricDescriptor 목록

        Raises:
            RemoteQueryError: list_metrics 페이지 조회 실패
        """
        with self._lock:
            entry = self._entry
            if entry is not None and entry.is_valid(self._clock()):
                return list(entry.descriptors)

            descriptors = self._list_all()
            self._entry = MetricCacheEntry(
                descriptors=tuple(descriptors),
                fetched_at=self._clock(),
                ttl=self.ttl,
            )
            logger.info(f"{self.namespace} 메트릭 {len(descriptors)}개 조회 (ttl={self.ttl})")
            return descriptors

    def _list_all(self) -> list[MetricDescriptor]:
        """list_metrics 전체 페이지 조회"""
        descriptors: list[MetricDescriptor] = []
        next_token: str | None = None

        while True:
            params: dict[str, Any] = {"Namespace": self.namespace}
            if next_token:
                params["NextToken"] = next_token

            try:
                response = self._client.list_metrics(**params)
            except (ClientError, BotoCoreError) as e:
                logger.warning(f"CloudWatch list_metrics 오류 ({self.namespace}): {e}")
                raise RemoteQueryError.from_client_error("cloudwatch", "list_metrics", e) from e

            descriptors.extend(MetricDescriptor.from_api(m) for m in response.get("Metrics", []))

            next_token = response.get("NextToken")
            if not next_token:
                break

        return descriptors
