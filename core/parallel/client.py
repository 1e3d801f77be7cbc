"""
core/parallel/client.py - boto3 client 생성 헬퍼

수집기가 쓰는 CloudWatch/EC2 client는 모두 여기서 만듭니다.
재시도는 executor가 아닌 botocore adaptive 모드에 맡기고,
수집 주기에는 별도 타임아웃이 없으므로 응답 없는 호출은 read_timeout이 끊어줍니다.

Example:
    from core.parallel.client import get_client

    cloudwatch = get_client(session, "cloudwatch", region_name="us-east-1", requests_per_second=25)
    cloudwatch.list_metrics(Namespace="AWS/ELB")
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Literal, cast

from botocore.config import Config

if TYPE_CHECKING:
    import boto3

RetryMode = Literal["legacy", "standard", "adaptive"]

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_RETRY_MODE: RetryMode = "adaptive"
DEFAULT_CONNECT_TIMEOUT = 10  # 초
DEFAULT_READ_TIMEOUT = 30  # 초
MIN_POOL_CONNECTIONS = 10
# 초당 시작 수 대비 동시에 열려 있을 연결 수 (평균 응답 ~2초 가정)
POOL_CONNECTIONS_PER_RPS = 2


def pool_size_for(requests_per_second: float) -> int:
    """admission 속도로 HTTP 연결 풀 크기 산정

    admission 이후에는 작업이 모두 동시에 실행되므로, 풀이 작으면
    토큰을 받은 요청이 연결 대기로 밀립니다.
    """
    return max(MIN_POOL_CONNECTIONS, math.ceil(requests_per_second * POOL_CONNECTIONS_PER_RPS))


def client_config(
    requests_per_second: float,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    retry_mode: RetryMode = DEFAULT_RETRY_MODE,
) -> Config:
    """수집용 botocore Config 생성"""
    return Config(
        retries={"max_attempts": max_attempts, "mode": retry_mode},  # pyright: ignore[reportArgumentType]
        connect_timeout=DEFAULT_CONNECT_TIMEOUT,
        read_timeout=DEFAULT_READ_TIMEOUT,
        max_pool_connections=pool_size_for(requests_per_second),
    )


def get_client(
    session: boto3.Session,
    service_name: str,
    region_name: str | None = None,
    requests_per_second: float = 10.0,
    **kwargs: Any,
) -> Any:
    """수집용 boto3 client 생성

    Args:
        session: boto3 Session
        service_name: AWS 서비스 이름 (cloudwatch, ec2)
        region_name: 리전 (None이면 세션 기본값)
        requests_per_second: 초당 admission 수 (연결 풀 크기 산정에 사용)
        **kwargs: client_config()에 전달할 재시도 설정 (max_attempts, retry_mode)

    Returns:
        boto3 client
    """
    # cast: boto3-stubs는 서비스명에 Literal 타입을 요구
    return session.client(  # pyright: ignore[reportCallIssue]
        cast(Any, service_name),
        region_name=region_name,
        config=client_config(requests_per_second, **kwargs),
    )
