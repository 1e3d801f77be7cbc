"""
core/config.py - 수집기 설정

YAML 설정 파일을 CollectorConfig로 로드합니다.

Usage:
    from core.config import load_config

    config = load_config("cloudwatch.yaml")
    print(config.namespace, config.period)

기간 값은 Go duration 형식 문자열("1m", "90s", "1h30m", "500ms") 또는 초 단위 숫자를 받습니다.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from core.exceptions import ConfigurationError
from shared.aws.metrics.types import DimensionFilter, MetricSelector

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"
DEFAULT_CACHE_TTL = timedelta(hours=1)
DEFAULT_RATE_LIMIT = 10.0

_DURATION_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)")
_DURATION_FULL = re.compile(r"^(?:\d+(?:\.\d+)?(?:ns|us|µs|ms|s|m|h))+$")

SAMPLE_CONFIG = """\
## Amazon Region
region: us-east-1

## Amazon Credentials
## Credentials are loaded in the following order
## 1) Assumed credentials via STS if role_arn is specified
## 2) explicit credentials from 'access_key' and 'secret_key'
## 3) shared profile from 'profile'
## 4) default boto3 chain (environment variables, instance profile, ...)
#access_key: ""
#secret_key: ""
#token: ""
#role_arn: ""
#profile: ""
#shared_credential_file: ""

## Requested CloudWatch aggregation period (required - must be a multiple of 60s)
period: 1m

## Collection delay (required - must account for metrics availability via CloudWatch API)
delay: 1m

## Collection interval; use a multiple of 'period' to avoid gaps or overlap
interval: 1m

## TTL for the internal cache of namespace metrics (default 1h)
#cache_ttl: 10m

## Maximum GetMetricStatistics requests started per second (default 10)
#rate_limit: 10

## Metric statistic namespace (required)
namespace: AWS/ELB

## Metrics to pull (optional)
## Defaults to all metrics in namespace if nothing is provided
#metrics:
#  - names: [Latency, RequestCount]
#    ## Dimension filters for metric (optional); "*" or "" matches any value
#    dimensions:
#      - name: LoadBalancerName
#        value: p-example
"""


def parse_duration(value: Any, key: str) -> timedelta:
    """기간 설정 값을 timedelta로 변환

    Args:
        value: "1m", "1h30m" 같은 문자열, 초 단위 숫자, 또는 timedelta
        key: 에러 메시지용 설정 키

    Raises:
        ConfigurationError: 해석할 수 없는 값
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ConfigurationError(key, f"기간 값이 올바르지 않습니다: {value!r}")
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)
    if isinstance(value, str):
        text = value.strip()
        if text in ("0", ""):
            return timedelta(0)
        if _DURATION_FULL.match(text):
            seconds = sum(float(num) * _DURATION_UNITS[unit] for num, unit in _DURATION_PART.findall(text))
            return timedelta(seconds=seconds)
    raise ConfigurationError(key, f"기간 값이 올바르지 않습니다: {value!r}")


def _parse_selectors(raw: Any) -> list[MetricSelector]:
    """metrics 설정을 MetricSelector 목록으로 변환

    셀렉터 형태는 엄격히 검증하지 않습니다. 잘못된 값은 일치 항목 없음으로 드러납니다.
    """
    selectors: list[MetricSelector] = []
    for item in raw or []:
        if not isinstance(item, dict):
            continue
        names = [str(n) for n in item.get("names") or []]
        dimensions = [
            DimensionFilter(name=str(d.get("name", "")), value=str(d.get("value") or ""))
            for d in item.get("dimensions") or []
            if isinstance(d, dict)
        ]
        selectors.append(MetricSelector(names=names, dimensions=dimensions))
    return selectors


@dataclass
class CollectorConfig:
    """CloudWatch 수집기 설정

    Attributes:
        namespace: 수집 대상 네임스페이스 (필수)
        period: 집계 주기 (필수, 0 불가)
        delay: 수집 지연 (필수, 0 불가)
        region: AWS 리전
        interval: 수집 주기 (None이면 period와 동일)
        cache_ttl: 네임스페이스 메트릭 목록 캐시 TTL
        rate_limit: 초당 최대 통계 조회 시작 수
        metrics: 수집 셀렉터 목록 (비어 있으면 네임스페이스 전체)
        access_key, secret_key, token, role_arn, profile, shared_credential_file: 자격 증명
    """

    namespace: str
    period: timedelta
    delay: timedelta
    region: str = DEFAULT_REGION
    interval: timedelta | None = None
    cache_ttl: timedelta = DEFAULT_CACHE_TTL
    rate_limit: float = DEFAULT_RATE_LIMIT
    metrics: list[MetricSelector] = field(default_factory=list)

    access_key: str = ""
    secret_key: str = ""
    token: str = ""
    role_arn: str = ""
    profile: str = ""
    shared_credential_file: str = ""

    def __post_init__(self) -> None:
        if not self.namespace:
            raise ConfigurationError("namespace", "네임스페이스는 필수입니다")
        if self.period <= timedelta(0):
            raise ConfigurationError("period", "period는 0보다 커야 합니다")
        if self.delay <= timedelta(0):
            raise ConfigurationError("delay", "delay는 0보다 커야 합니다")
        if self.rate_limit <= 0:
            raise ConfigurationError("rate_limit", "rate_limit는 0보다 커야 합니다")
        if self.cache_ttl <= timedelta(0):
            self.cache_ttl = DEFAULT_CACHE_TTL
        if self.interval is None or self.interval <= timedelta(0):
            self.interval = self.period

        if self.period.total_seconds() % 60 != 0:
            logger.warning(f"period({self.period})가 60초의 배수가 아닙니다. CloudWatch 집계 단위와 맞지 않을 수 있습니다")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CollectorConfig:
        """딕셔너리(YAML 로드 결과)에서 생성

        Raises:
            ConfigurationError: 필수 값 누락 또는 잘못된 값
        """
        if not isinstance(data, dict):
            raise ConfigurationError("<root>", "설정은 매핑이어야 합니다")

        for key in ("period", "delay"):
            if data.get(key) in (None, ""):
                raise ConfigurationError(key, f"{key}는 필수입니다")

        try:
            rate_limit = float(data.get("rate_limit", DEFAULT_RATE_LIMIT))
        except (TypeError, ValueError) as e:
            raise ConfigurationError("rate_limit", f"숫자가 아닙니다: {data.get('rate_limit')!r}", e) from e

        interval = data.get("interval")
        cache_ttl = data.get("cache_ttl")

        return cls(
            namespace=str(data.get("namespace") or ""),
            period=parse_duration(data["period"], "period"),
            delay=parse_duration(data["delay"], "delay"),
            region=str(data.get("region") or DEFAULT_REGION),
            interval=parse_duration(interval, "interval") if interval not in (None, "") else None,
            cache_ttl=parse_duration(cache_ttl, "cache_ttl") if cache_ttl not in (None, "") else DEFAULT_CACHE_TTL,
            rate_limit=rate_limit,
            metrics=_parse_selectors(data.get("metrics")),
            access_key=str(data.get("access_key") or ""),
            secret_key=str(data.get("secret_key") or ""),
            token=str(data.get("token") or ""),
            role_arn=str(data.get("role_arn") or ""),
            profile=str(data.get("profile") or ""),
            shared_credential_file=str(data.get("shared_credential_file") or ""),
        )


def load_config(path: str | Path) -> CollectorConfig:
    """YAML 설정 파일 로드

    Args:
        path: 설정 파일 경로

    Raises:
        ConfigurationError: 파일 없음, YAML 파싱 실패, 잘못된 값
    """
    config_file = Path(path)
    if not config_file.exists():
        raise ConfigurationError("path", f"설정 파일이 없습니다: {config_file}")

    try:
        with config_file.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError("path", f"YAML 파싱 실패: {config_file}", e) from e

    return CollectorConfig.from_dict(data)
