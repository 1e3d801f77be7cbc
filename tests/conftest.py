"""
tests/conftest.py - pytest 공통 픽스처

AWS API 모킹과 테스트 헬퍼를 제공합니다.

Usage:
    def test_something(mock_cloudwatch_client, fake_clock):
        # mock_cloudwatch_client: list_metrics/get_metric_statistics 모킹
        # fake_clock: 수동으로 진행시키는 시계
        pass
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


# =============================================================================
# 환경 설정
# =============================================================================


@pytest.fixture(autouse=True)
def setup_test_environment():
    """테스트 환경 설정"""
    os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

    yield


# =============================================================================
# 헬퍼
# =============================================================================


BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """수동으로 진행시키는 시계 (datetime 반환)"""

    def __init__(self, start: datetime = BASE_TIME):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


def create_mock_client_error(
    error_code: str,
    error_message: str = "Test error",
    operation_name: str = "TestOperation",
) -> Exception:
    """ClientError 생성 헬퍼"""
    from botocore.exceptions import ClientError

    return ClientError(
        {
            "Error": {
                "Code": error_code,
                "Message": error_message,
            }
        },
        operation_name,
    )


def api_metric(name: str, *dims: tuple[str, str], namespace: str = "AWS/ELB") -> dict:
    """list_metrics 응답의 Metric 항목 생성"""
    return {
        "Namespace": namespace,
        "MetricName": name,
        "Dimensions": [{"Name": k, "Value": v} for k, v in dims],
    }


def ec2_instance(instance_id: str, **tags: str) -> dict:
    """describe_instances 응답의 Instance 항목 생성"""
    return {
        "InstanceId": instance_id,
        "State": {"Name": "running"},
        "Tags": [{"Key": k, "Value": v} for k, v in tags.items()],
    }


@pytest.fixture
def fake_clock():
    """datetime 기반 가짜 시계"""
    return FakeClock()


@pytest.fixture
def client_error():
    """ClientError 생성 함수"""
    return create_mock_client_error


# =============================================================================
# AWS 모킹 픽스처
# =============================================================================


@pytest.fixture
def mock_cloudwatch_client():
    """CloudWatch 클라이언트 모킹"""
    mock_client = MagicMock()

    # list_metrics 기본 응답 (단일 페이지)
    mock_client.list_metrics.return_value = {
        "Metrics": [
            api_metric("Latency", ("LoadBalancerName", "p-example")),
            api_metric("Latency", ("LoadBalancerName", "q-example")),
            api_metric("RequestCount", ("LoadBalancerName", "p-example")),
        ]
    }

    # get_metric_statistics 기본 응답
    mock_client.get_metric_statistics.return_value = {
        "Label": "Latency",
        "Datapoints": [
            {
                "Timestamp": BASE_TIME - timedelta(minutes=2),
                "Average": 0.5,
                "Maximum": 1.5,
                "Minimum": 0.1,
                "Sum": 10.0,
                "SampleCount": 20.0,
                "Unit": "Seconds",
            }
        ],
    }

    yield mock_client


@pytest.fixture
def mock_ec2_client():
    """EC2 클라이언트 모킹"""
    mock_client = MagicMock()

    # describe_instances 기본 응답
    mock_client.describe_instances.return_value = {
        "Reservations": [
            {
                "Instances": [
                    ec2_instance("i-1234567890abcdef0", Name="web_01", env="prod"),
                ]
            }
        ]
    }

    # 페이지네이터 모킹
    mock_paginator = MagicMock()
    mock_paginator.paginate.return_value = [mock_client.describe_instances.return_value]
    mock_client.get_paginator.return_value = mock_paginator

    yield mock_client
