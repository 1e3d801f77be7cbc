"""
shared/aws/metrics/dimensions.py - 차원 필터 해석

설정된 셀렉터를 실제로 조회할 메트릭 목록으로 해석합니다.

- 와일드카드가 없는 셀렉터: 설정 값을 그대로 사용 (카탈로그 조회 없음)
- 와일드카드가 있는 셀렉터: 카탈로그의 디스크립터 중 필터와 일치하는 것의 실제 차원 값을 사용

카탈로그는 resolve 호출당 최대 한 번만 조회합니다.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence

from .types import Dimension, DimensionFilter, MetricDescriptor, MetricSelector

logger = logging.getLogger(__name__)

CatalogFetcher = Callable[[], Sequence[MetricDescriptor]]


def has_wildcard(filters: Iterable[DimensionFilter]) -> bool:
    """필터 중 와일드카드("" 또는 "*")가 하나라도 있으면 True"""
    return any(f.is_wildcard for f in filters)


def is_selected(descriptor: MetricDescriptor, filters: Sequence[DimensionFilter]) -> bool:
    """디스크립터가 차원 필터와 일치하는지 확인

    차원 개수가 같고, 모든 필터 항목에 대해 이름이 같고 값이 같거나(또는 와일드카드)인
    디스크립터 차원이 존재해야 합니다. 순서는 무관합니다.
    """
    if len(descriptor.dimensions) != len(filters):
        return False

    for f in filters:
        if not any(d.name == f.name and (f.is_wildcard or f.value == d.value) for d in descriptor.dimensions):
            return False
    return True


def resolve(
    selectors: Sequence[MetricSelector],
    catalog: CatalogFetcher,
    namespace: str,
) -> list[MetricDescriptor]:
    """셀렉터 목록을 조회 대상 메트릭 목록으로 해석

    Args:
        selectors: 설정된 셀렉터 목록 (비어 있으면 네임스페이스 전체)
        catalog: 네임스페이스 디스크립터를 반환하는 함수 (RemoteQueryError 전파)
        namespace: 대상 네임스페이스

    Returns:
        중복 없는 MetricDescriptor 목록 (입력 순서 유지)
    """
    if not selectors:
        return list(catalog())

    descriptors: Sequence[MetricDescriptor] | None = None
    resolved: list[MetricDescriptor] = []
    seen: set[MetricDescriptor] = set()

    def add(metric: MetricDescriptor) -> None:
        if metric not in seen:
            seen.add(metric)
            resolved.append(metric)

    for selector in selectors:
        if not has_wildcard(selector.dimensions):
            dimensions = tuple(Dimension(f.name, f.value) for f in selector.dimensions)
            for name in selector.names:
                add(MetricDescriptor(namespace, name, dimensions))
            continue

        if descriptors is None:
            descriptors = catalog()

        for name in selector.names:
            for descriptor in descriptors:
                if is_selected(descriptor, selector.dimensions):
                    add(MetricDescriptor(namespace, name, descriptor.dimensions))

    logger.debug(f"셀렉터 {len(selectors)}개 -> 메트릭 {len(resolved)}개 해석")
    return resolved
