"""
tests/shared/aws/metrics/test_metrics_statistics.py - StatisticsFetcher 테스트
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from conftest import BASE_TIME, create_mock_client_error
from core.exceptions import RemoteQueryError
from shared.aws.metrics.statistics import STATISTICS, StatisticsFetcher
from shared.aws.metrics.types import Dimension, MetricDescriptor

LATENCY = MetricDescriptor("AWS/ELB", "Latency", (Dimension("LoadBalancerName", "p-example"),))


def _fetcher(client, namespace="AWS/ELB", tag_cache=None) -> StatisticsFetcher:
    return StatisticsFetcher(
        client,
        namespace=namespace,
        region="us-east-1",
        period=timedelta(minutes=1),
        delay=timedelta(minutes=2),
        tag_cache=tag_cache,
    )


class TestStatisticsWindow:
    """조회 구간 테스트"""

    def test_window(self, mock_cloudwatch_client):
        """end = now - delay, start = end - period"""
        window = _fetcher(mock_cloudwatch_client).window(BASE_TIME)

        assert window.end == BASE_TIME - timedelta(minutes=2)
        assert window.start == BASE_TIME - timedelta(minutes=3)
        assert window.period_seconds == 60

    def test_build_request(self, mock_cloudwatch_client):
        request = _fetcher(mock_cloudwatch_client).build_request(LATENCY, BASE_TIME)

        assert request == {
            "Namespace": "AWS/ELB",
            "MetricName": "Latency",
            "Dimensions": [{"Name": "LoadBalancerName", "Value": "p-example"}],
            "StartTime": BASE_TIME - timedelta(minutes=3),
            "EndTime": BASE_TIME - timedelta(minutes=2),
            "Period": 60,
            "Statistics": ["Average", "Maximum", "Minimum", "Sum", "SampleCount"],
        }
        assert tuple(request["Statistics"]) == STATISTICS


class TestStatisticsFetcher:
    """StatisticsFetcher.fetch 테스트"""

    def test_fetch_record(self, mock_cloudwatch_client):
        records = _fetcher(mock_cloudwatch_client).fetch(LATENCY, BASE_TIME)

        assert len(records) == 1
        record = records[0]
        assert record.measurement == "cloudwatch_aws_elb"
        assert record.fields == {
            "latency_average": 0.5,
            "latency_maximum": 1.5,
            "latency_minimum": 0.1,
            "latency_sum": 10.0,
            "latency_sample_count": 20.0,
        }
        assert record.tags == {
            "region": "us-east-1",
            "unit": "seconds",
            "load_balancer_name": "p-example",
        }
        assert record.timestamp == BASE_TIME - timedelta(minutes=2)

    def test_only_present_statistics(self, mock_cloudwatch_client):
        """datapoint에 없는 통계는 field로 출력하지 않음"""
        mock_cloudwatch_client.get_metric_statistics.return_value = {
            "Datapoints": [{"Timestamp": BASE_TIME, "Average": 3.0, "Unit": "Percent"}]
        }

        record = _fetcher(mock_cloudwatch_client).fetch(LATENCY, BASE_TIME)[0]

        assert record.fields == {"latency_average": 3.0}
        assert record.tags["unit"] == "percent"

    def test_zero_value_is_kept(self, mock_cloudwatch_client):
        mock_cloudwatch_client.get_metric_statistics.return_value = {
            "Datapoints": [{"Timestamp": BASE_TIME, "Sum": 0.0, "Unit": "Count"}]
        }

        record = _fetcher(mock_cloudwatch_client).fetch(LATENCY, BASE_TIME)[0]

        assert record.fields == {"latency_sum": 0.0}

    def test_multiple_datapoints(self, mock_cloudwatch_client):
        mock_cloudwatch_client.get_metric_statistics.return_value = {
            "Datapoints": [
                {"Timestamp": BASE_TIME, "Average": 1.0, "Unit": "Seconds"},
                {"Timestamp": BASE_TIME + timedelta(minutes=1), "Average": 2.0, "Unit": "Seconds"},
            ]
        }

        records = _fetcher(mock_cloudwatch_client).fetch(LATENCY, BASE_TIME)

        assert [r.fields["latency_average"] for r in records] == [1.0, 2.0]

    def test_no_datapoints(self, mock_cloudwatch_client):
        mock_cloudwatch_client.get_metric_statistics.return_value = {"Datapoints": []}

        assert _fetcher(mock_cloudwatch_client).fetch(LATENCY, BASE_TIME) == []

    def test_api_error(self, mock_cloudwatch_client):
        mock_cloudwatch_client.get_metric_statistics.side_effect = create_mock_client_error(
            "Throttling", "Rate exceeded", "GetMetricStatistics"
        )

        with pytest.raises(RemoteQueryError) as exc_info:
            _fetcher(mock_cloudwatch_client).fetch(LATENCY, BASE_TIME)

        assert exc_info.value.operation == "get_metric_statistics"
        assert exc_info.value.error_code == "Throttling"


class TestEc2Enrichment:
    """AWS/EC2 인스턴스 태그 보강 테스트"""

    CPU = MetricDescriptor("AWS/EC2", "CPUUtilization", (Dimension("InstanceId", "i-1"),))

    def test_tags_merged(self, mock_cloudwatch_client):
        tag_cache = MagicMock()
        tag_cache.lookup.return_value = (("pool", "web"), ("Name", "web_01"))

        record = _fetcher(mock_cloudwatch_client, "AWS/EC2", tag_cache).fetch(self.CPU, BASE_TIME)[0]

        tag_cache.lookup.assert_called_once_with("i-1")
        assert record.measurement == "cloudwatch_aws_ec2"
        assert record.tags["instance_id"] == "i-1"
        assert record.tags["pool"] == "web"
        assert record.tags["Name"] == "web_01"
        assert "cpu_utilization_average" in record.fields

    def test_cache_miss(self, mock_cloudwatch_client):
        tag_cache = MagicMock()
        tag_cache.lookup.return_value = None

        record = _fetcher(mock_cloudwatch_client, "AWS/EC2", tag_cache).fetch(self.CPU, BASE_TIME)[0]

        assert set(record.tags) == {"region", "unit", "instance_id"}

    def test_other_namespace_not_enriched(self, mock_cloudwatch_client):
        tag_cache = MagicMock()

        _fetcher(mock_cloudwatch_client, "AWS/ELB", tag_cache).fetch(LATENCY, BASE_TIME)

        tag_cache.lookup.assert_not_called()

    def test_without_instance_dimension(self, mock_cloudwatch_client):
        tag_cache = MagicMock()
        metric = MetricDescriptor("AWS/EC2", "CPUUtilization", (Dimension("AutoScalingGroupName", "asg"),))

        record = _fetcher(mock_cloudwatch_client, "AWS/EC2", tag_cache).fetch(metric, BASE_TIME)[0]

        tag_cache.lookup.assert_not_called()
        assert record.tags["auto_scaling_group_name"] == "asg"
