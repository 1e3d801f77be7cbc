"""
shared/aws/metrics/statistics.py - 메트릭 통계 조회

메트릭 하나에 대해 GetMetricStatistics를 호출하고 datapoint를 MetricRecord로 변환합니다.

조회 구간:
    end   = as_of - delay
    start = end - period

다섯 가지 통계(Average, Maximum, Minimum, Sum, SampleCount)를 항상 요청하며,
datapoint에 실제로 포함된 통계만 field로 출력합니다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import RemoteQueryError
from shared.aws.ec2.instance_tags import EC2_NAMESPACE

from .naming import format_field, format_measurement, format_tag_key, snake_case
from .types import CloudWatchAPI, MetricDescriptor, MetricRecord

if TYPE_CHECKING:
    from shared.aws.ec2.instance_tags import InstanceTagCache

logger = logging.getLogger(__name__)

# GetMetricStatistics 응답 키 순서 = field 출력 순서
STATISTICS: tuple[str, ...] = ("Average", "Maximum", "Minimum", "Sum", "SampleCount")

INSTANCE_ID_TAG = format_tag_key("InstanceId")


@dataclass(frozen=True)
class StatisticsWindow:
    """조회 구간"""

    start: datetime
    end: datetime
    period_seconds: int


class StatisticsFetcher:
    """메트릭 통계 조회기

    Args:
        client: CloudWatch 클라이언트
        namespace: 네임스페이스
        region: region 태그 값
        period: 집계 주기 (60초 배수 권장)
        delay: 수집 지연 (CloudWatch 반영 지연 보정)
        tag_cache: AWS/EC2 네임스페이스일 때 사용할 인스턴스 태그 캐시
    """

    def __init__(
        self,
        client: CloudWatchAPI,
        namespace: str,
        region: str,
        period: timedelta,
        delay: timedelta,
        tag_cache: InstanceTagCache | None = None,
    ):
        self._client = client
        self.namespace = namespace
        self.region = region
        self.period = period
        self.delay = delay
        self.tag_cache = tag_cache
        self.measurement = format_measurement(namespace)

    def window(self, as_of: datetime) -> StatisticsWindow:
        """as_of 기준 조회 구간 계산"""
        end = as_of - self.delay
        return StatisticsWindow(
            start=end - self.period,
            end=end,
            period_seconds=int(self.period.total_seconds()),
        )

    def build_request(self, metric: MetricDescriptor, as_of: datetime) -> dict[str, Any]:
        """GetMetricStatistics 요청 파라미터 생성"""
        window = self.window(as_of)
        return {
            "Namespace": metric.namespace or self.namespace,
            "MetricName": metric.metric_name,
            "Dimensions": metric.dimensions_to_api(),
            "StartTime": window.start,
            "EndTime": window.end,
            "Period": window.period_seconds,
            "Statistics": list(STATISTICS),
        }

    def fetch(self, metric: MetricDescriptor, as_of: datetime) -> list[MetricRecord]:
        """메트릭 하나의 통계 조회

        Returns:
            datapoint별 MetricRecord 목록 (API 반환 순서 그대로)

        Raises:
            RemoteQueryError: get_metric_statistics 실패
        """
        params = self.build_request(metric, as_of)
        try:
            response = self._client.get_metric_statistics(**params)
        except (ClientError, BotoCoreError) as e:
            raise RemoteQueryError.from_client_error("cloudwatch", "get_metric_statistics", e) from e

        return [self.to_record(metric, point) for point in response.get("Datapoints", [])]

    def to_record(self, metric: MetricDescriptor, point: dict[str, Any]) -> MetricRecord:
        """datapoint 하나를 MetricRecord로 변환"""
        tags = self._build_tags(metric, point.get("Unit", ""))

        fields: dict[str, float] = {}
        for statistic in STATISTICS:
            value = point.get(statistic)
            if value is not None:
                fields[format_field(metric.metric_name, statistic)] = value

        return MetricRecord(
            measurement=self.measurement,
            fields=fields,
            tags=tags,
            timestamp=point["Timestamp"],
        )

    def _build_tags(self, metric: MetricDescriptor, unit: str) -> dict[str, str]:
        tags = {
            "region": self.region,
            "unit": snake_case(unit),
        }
        for dimension in metric.dimensions:
            tags[format_tag_key(dimension.name)] = dimension.value

        if self.namespace == EC2_NAMESPACE and self.tag_cache is not None:
            instance_id = tags.get(INSTANCE_ID_TAG)
            if instance_id:
                instance_tags = self.tag_cache.lookup(instance_id)
                if instance_tags:
                    tags.update(instance_tags)

        return tags
