"""
shared/aws/metrics - CloudWatch 네임스페이스 메트릭 수집

네임스페이스 메트릭 목록 캐시, 차원 필터 해석, 통계 조회, 이름 변환을 제공합니다.

Usage:
    from shared.aws.metrics import CloudWatchCollector, ListSink

    collector = CloudWatchCollector(config, cloudwatch_client)
    sink = ListSink()
    outcome = collector.gather(sink)
"""

from .catalog import DEFAULT_CACHE_TTL, MetricCatalog
from .collector import CloudWatchCollector
from .dimensions import has_wildcard, is_selected, resolve
from .naming import format_field, format_measurement, format_tag_key, snake_case
from .sink import LineProtocolSink, ListSink, to_line_protocol
from .statistics import STATISTICS, StatisticsFetcher
from .types import (
    WILDCARD,
    Dimension,
    DimensionFilter,
    MetricCacheEntry,
    MetricDescriptor,
    MetricRecord,
    MetricSelector,
)

__all__ = [
    # catalog
    "DEFAULT_CACHE_TTL",
    "MetricCatalog",
    # collector
    "CloudWatchCollector",
    # dimensions
    "has_wildcard",
    "is_selected",
    "resolve",
    # naming
    "format_field",
    "format_measurement",
    "format_tag_key",
    "snake_case",
    # sink
    "LineProtocolSink",
    "ListSink",
    "to_line_protocol",
    # statistics
    "STATISTICS",
    "StatisticsFetcher",
    # types
    "WILDCARD",
    "Dimension",
    "DimensionFilter",
    "MetricCacheEntry",
    "MetricDescriptor",
    "MetricRecord",
    "MetricSelector",
]
