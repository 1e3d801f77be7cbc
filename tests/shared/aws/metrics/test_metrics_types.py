"""
tests/shared/aws/metrics/test_metrics_types.py - 수집 데이터 타입 테스트
"""

from datetime import timedelta

from conftest import BASE_TIME, api_metric
from shared.aws.metrics.types import Dimension, DimensionFilter, MetricCacheEntry, MetricDescriptor


class TestMetricDescriptor:
    """MetricDescriptor 테스트"""

    def test_from_api(self):
        descriptor = MetricDescriptor.from_api(
            api_metric("Latency", ("LoadBalancerName", "p"), ("AvailabilityZone", "us-east-1a"))
        )

        assert descriptor.namespace == "AWS/ELB"
        assert descriptor.metric_name == "Latency"
        assert descriptor.dimensions == (Dimension("LoadBalancerName", "p"), Dimension("AvailabilityZone", "us-east-1a"))

    def test_dimensions_to_api_keeps_order(self):
        descriptor = MetricDescriptor("AWS/ELB", "Latency", (Dimension("B", "2"), Dimension("A", "1")))

        assert descriptor.dimensions_to_api() == [{"Name": "B", "Value": "2"}, {"Name": "A", "Value": "1"}]

    def test_str(self):
        assert str(MetricDescriptor("AWS/ELB", "Latency", (Dimension("LoadBalancerName", "p"),))) == (
            "Latency[LoadBalancerName=p]"
        )
        assert str(MetricDescriptor("AWS/ELB", "Latency")) == "Latency"

    def test_hashable(self):
        a = MetricDescriptor("AWS/ELB", "Latency", (Dimension("LoadBalancerName", "p"),))
        b = MetricDescriptor("AWS/ELB", "Latency", (Dimension("LoadBalancerName", "p"),))

        assert len({a, b}) == 1


class TestDimensionFilter:
    """DimensionFilter 테스트"""

    def test_wildcard(self):
        assert DimensionFilter("A").is_wildcard
        assert DimensionFilter("A", "*").is_wildcard
        assert not DimensionFilter("A", "x").is_wildcard


class TestMetricCacheEntry:
    """MetricCacheEntry 테스트"""

    def test_valid_within_ttl(self):
        entry = MetricCacheEntry((MetricDescriptor("AWS/ELB", "Latency"),), BASE_TIME, timedelta(hours=1))

        assert entry.is_valid(BASE_TIME + timedelta(minutes=59))
        assert not entry.is_valid(BASE_TIME + timedelta(hours=1))

    def test_empty_entry_is_invalid(self):
        entry = MetricCacheEntry((), BASE_TIME, timedelta(hours=1))

        assert not entry.is_valid(BASE_TIME)
