"""
shared/aws/metrics/types.py - CloudWatch 수집 데이터 타입

메트릭 디스크립터, 차원 필터, 셀렉터, 출력 레코드와
원격 API 클라이언트 인터페이스(Protocol)를 정의합니다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Protocol

WILDCARD = "*"


@dataclass(frozen=True)
class Dimension:
    """CloudWatch 차원 (이름/값 쌍)"""

    name: str
    value: str

    def to_api(self) -> dict[str, str]:
        return {"Name": self.name, "Value": self.value}


@dataclass(frozen=True)
class MetricDescriptor:
    """메트릭 디스크립터

    list_metrics가 반환하는 메트릭 선언이거나, 셀렉터 해석 결과입니다.

    Attributes:
        namespace: 네임스페이스 (예: "AWS/EC2")
        metric_name: 메트릭 이름 (예: "CPUUtilization")
        dimensions: API가 보고한 순서의 차원 목록
    """

    namespace: str
    metric_name: str
    dimensions: tuple[Dimension, ...] = ()

    @classmethod
    def from_api(cls, metric: dict[str, Any]) -> MetricDescriptor:
        """list_metrics 응답의 Metric 항목에서 생성"""
        return cls(
            namespace=metric.get("Namespace", ""),
            metric_name=metric.get("MetricName", ""),
            dimensions=tuple(Dimension(d["Name"], d["Value"]) for d in metric.get("Dimensions", [])),
        )

    def dimensions_to_api(self) -> list[dict[str, str]]:
        return [d.to_api() for d in self.dimensions]

    def __str__(self) -> str:
        dims = ",".join(f"{d.name}={d.value}" for d in self.dimensions)
        return f"{self.metric_name}[{dims}]" if dims else self.metric_name


@dataclass(frozen=True)
class DimensionFilter:
    """설정된 차원 필터

    value가 빈 문자열이거나 "*"이면 해당 이름의 모든 값과 일치합니다.
    """

    name: str
    value: str = ""

    @property
    def is_wildcard(self) -> bool:
        return self.value in ("", WILDCARD)


@dataclass
class MetricSelector:
    """수집 대상 셀렉터 (메트릭 이름 목록 + 차원 필터)"""

    names: list[str] = field(default_factory=list)
    dimensions: list[DimensionFilter] = field(default_factory=list)


@dataclass(frozen=True)
class MetricCacheEntry:
    """네임스페이스 메트릭 목록 캐시 항목

    교체만 가능하며 내부를 수정하지 않습니다.
    """

    descriptors: tuple[MetricDescriptor, ...]
    fetched_at: datetime
    ttl: timedelta

    def is_valid(self, now: datetime) -> bool:
        return bool(self.descriptors) and now - self.fetched_at < self.ttl


@dataclass(frozen=True)
class MetricRecord:
    """sink로 전달되는 datapoint 하나"""

    measurement: str
    fields: dict[str, float]
    tags: dict[str, str]
    timestamp: datetime


class CloudWatchAPI(Protocol):
    """CloudWatch 클라이언트 인터페이스 (boto3 client 또는 테스트 fake)"""

    def list_metrics(self, **kwargs: Any) -> dict[str, Any]: ...

    def get_metric_statistics(self, **kwargs: Any) -> dict[str, Any]: ...


class MetricSink(Protocol):
    """수집 결과를 받는 외부 accumulator"""

    def add_fields(
        self,
        measurement: str,
        fields: dict[str, float],
        tags: dict[str, str],
        timestamp: datetime,
    ) -> None: ...
