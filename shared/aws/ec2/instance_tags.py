"""
shared/aws/ec2/instance_tags.py - EC2 인스턴스 태그 캐시

AWS/EC2 네임스페이스 수집 시 instance_id 차원을 인스턴스 태그로 보강하기 위한 캐시입니다.

구성:
- InstanceTagCache: instance_id -> 태그 목록 (항목별 절대 만료 24시간, Lock 기반 스레드 안전)
- InstanceTagRefresher: 5분 주기로 전체 인스턴스를 다시 조회하는 백그라운드 스레드

읽기 경로(수집 작업)는 항목 단위로 통째 교체된 불변 객체만 보므로
갱신 중에도 이전 값 또는 새 값만 반환합니다.

"Name" 태그 값에 "_"가 있으면 마지막 "_" 앞부분을 "pool" 태그로 추가 저장합니다.
    Name=web_01 -> pool=web, Name=web_01

Usage:
    cache = InstanceTagCache(ec2)
    cache.prime()                      # 첫 수집 전 동기 조회

    refresher = InstanceTagRefresher(cache)
    refresher.start()
    ...
    tags = cache.lookup("i-0123456789abcdef0")
    ...
    refresher.stop()
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol

from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import RemoteQueryError

logger = logging.getLogger(__name__)

EC2_NAMESPACE = "AWS/EC2"

DEFAULT_TAG_TTL = timedelta(hours=24)
DEFAULT_REFRESH_INTERVAL = timedelta(minutes=5)

NAME_TAG = "Name"
POOL_TAG = "pool"
POOL_SEPARATOR = "_"

TagPairs = tuple[tuple[str, str], ...]


class EC2API(Protocol):
    """EC2 클라이언트 인터페이스 (describe_instances paginator 제공)"""

    def get_paginator(self, operation_name: str) -> Any: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def derive_tags(tags: Iterable[dict[str, str]]) -> TagPairs:
    """EC2 태그 목록을 (키, 값) 튜플로 변환하고 pool 태그를 파생

    Args:
        tags: describe_instances의 Tags 항목 ([{"Key": ..., "Value": ...}])

    Returns:
        (키, 값) 튜플. Name 값에 "_"가 있으면 ("pool", 마지막 "_" 앞부분)이 Name 앞에 추가됨
    """
    pairs: list[tuple[str, str]] = []
    for tag in tags:
        key = tag.get("Key", "")
        value = tag.get("Value", "")
        if key == NAME_TAG:
            idx = value.rfind(POOL_SEPARATOR)
            if idx >= 0:
                pairs.append((POOL_TAG, value[:idx]))
        pairs.append((key, value))
    return tuple(pairs)


@dataclass(frozen=True)
class TagCacheEntry:
    """인스턴스 태그 캐시 항목 (불변, 통째 교체)"""

    tags: TagPairs
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class InstanceTagCache:
    """instance_id -> 태그 캐시 (스레드 안전)

    항목마다 갱신 주기와 무관한 절대 만료 시간을 가집니다.
    만료된 항목은 lookup에서 보이지 않으며 purge_expired로 정리됩니다.
    """

    def __init__(
        self,
        client: EC2API,
        ttl: timedelta = DEFAULT_TAG_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._client = client
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, TagCacheEntry] = {}
        self._lock = threading.Lock()

    def lookup(self, instance_id: str) -> TagPairs | None:
        """인스턴스 태그 조회

        Returns:
            (키, 값) 튜플 또는 None (없거나 만료)
        """
        with self._lock:
            entry = self._entries.get(instance_id)
        if entry is None or entry.is_expired(self._clock()):
            return None
        return entry.tags

    def set(self, instance_id: str, tags: TagPairs) -> None:
        """항목 하나를 새 만료 시간으로 교체"""
        entry = TagCacheEntry(tags=tags, expires_at=self._clock() + self.ttl)
        with self._lock:
            self._entries[instance_id] = entry

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def purge_expired(self) -> int:
        """만료된 항목 제거

        Returns:
            제거된 항목 수
        """
        now = self._clock()
        with self._lock:
            expired = [k for k, v in self._entries.items() if v.is_expired(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug(f"만료된 인스턴스 태그 {len(expired)}개 정리")
        return len(expired)

    def refresh(self) -> int:
        """전체 인스턴스 태그를 다시 조회하여 항목 교체

        조회가 끝난 뒤에만 캐시에 반영하므로 실패 시 기존 내용이 유지됩니다.

        Returns:
            갱신된 인스턴스 수

        Raises:
            RemoteQueryError: describe_instances 실패
        """
        fetched = self._describe_all()

        expires_at = self._clock() + self.ttl
        with self._lock:
            for instance_id, tags in fetched.items():
                self._entries[instance_id] = TagCacheEntry(tags=tags, expires_at=expires_at)
            total = len(self._entries)

        logger.info(f"인스턴스 태그 {len(fetched)}개 조회 (캐시 전체 {total}개)")
        return len(fetched)

    def prime(self) -> bool:
        """첫 수집 전 동기 조회

        실패해도 수집을 막지 않도록 빈 캐시로 진행합니다.

        Returns:
            조회 성공 여부
        """
        try:
            self.refresh()
            return True
        except RemoteQueryError as e:
            logger.warning(f"초기 인스턴스 태그 조회 실패, 빈 캐시로 진행: {e}")
            return False

    def _describe_all(self) -> dict[str, TagPairs]:
        """describe_instances 전체 페이지 조회"""
        result: dict[str, TagPairs] = {}
        try:
            paginator = self._client.get_paginator("describe_instances")
            for page in paginator.paginate():
                for reservation in page.get("Reservations", []):
                    for instance in reservation.get("Instances", []):
                        instance_id = instance.get("InstanceId")
                        if instance_id:
                            result[instance_id] = derive_tags(instance.get("Tags", []))
        except (ClientError, BotoCoreError) as e:
            raise RemoteQueryError.from_client_error("ec2", "describe_instances", e) from e
        return result


class InstanceTagRefresher:
    """인스턴스 태그 백그라운드 갱신 스레드

    고정 주기로 cache.refresh()를 호출합니다. 실패는 로그만 남기고 다음 주기에 다시 시도합니다.
    stop()으로 종료 신호를 보내고 스레드 종료를 기다립니다.
    """

    def __init__(
        self,
        cache: InstanceTagCache,
        interval: timedelta = DEFAULT_REFRESH_INTERVAL,
    ):
        self.cache = cache
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """백그라운드 갱신 시작 (이미 실행 중이면 무시)"""
        if self.is_running:
            return
        # 스레드마다 자신의 종료 Event를 가짐
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(self._stop_event,), name="ec2-tag-refresher", daemon=True
        )
        self._thread.start()
        logger.info(f"인스턴스 태그 백그라운드 갱신 시작 (interval={self.interval})")

    def stop(self, timeout: float | None = 5.0) -> None:
        """종료 신호를 보내고 스레드 종료 대기"""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning(f"인스턴스 태그 갱신 스레드가 {timeout}초 안에 종료되지 않음, 진행 중인 갱신 후 종료")
            self._thread = None
        logger.debug("인스턴스 태그 백그라운드 갱신 종료")

    def refresh_once(self) -> bool:
        """갱신 1회 실행 (예외를 밖으로 내보내지 않음)

        Returns:
            갱신 성공 여부
        """
        try:
            self.cache.refresh()
            return True
        except RemoteQueryError as e:
            logger.warning(f"인스턴스 태그 갱신 실패, 기존 캐시 유지: {e}")
            return False
        except Exception:
            logger.exception("인스턴스 태그 갱신 중 예상치 못한 오류, 기존 캐시 유지")
            return False
        finally:
            self.cache.purge_expired()

    def _run(self, stop_event: threading.Event) -> None:
        seconds = self.interval.total_seconds()
        while not stop_event.wait(seconds):
            self.refresh_once()
