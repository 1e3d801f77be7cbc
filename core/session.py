"""
core/session.py - boto3 Session 생성

설정의 자격 증명 필드로 boto3 Session을 만듭니다. 우선순위:
    1) role_arn이 있으면 STS AssumeRole로 임시 자격 증명
    2) access_key / secret_key (+ token)
    3) profile (+ shared_credential_file)
    4) boto3 기본 체인 (환경 변수, 인스턴스 프로파일 등)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import boto3
import botocore.session
from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import RemoteQueryError

if TYPE_CHECKING:
    from core.config import CollectorConfig

logger = logging.getLogger(__name__)

ROLE_SESSION_NAME = "cloudwatch-collector"


def _base_session(config: CollectorConfig) -> boto3.Session:
    """role_arn을 제외한 자격 증명으로 Session 생성"""
    if config.access_key and config.secret_key:
        return boto3.Session(
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
            aws_session_token=config.token or None,
            region_name=config.region,
        )

    if config.profile:
        if config.shared_credential_file:
            # 자격 증명 파일 경로는 이 세션에만 적용
            core_session = botocore.session.Session()
            core_session.set_config_variable("credentials_file", config.shared_credential_file)
            return boto3.Session(
                botocore_session=core_session, profile_name=config.profile, region_name=config.region
            )
        return boto3.Session(profile_name=config.profile, region_name=config.region)

    return boto3.Session(region_name=config.region)


def build_session(config: CollectorConfig) -> boto3.Session:
    """설정으로 boto3 Session 생성

    Raises:
        RemoteQueryError: AssumeRole 실패
    """
    session = _base_session(config)
    if not config.role_arn:
        return session

    try:
        sts = session.client("sts", region_name=config.region)
        credentials = sts.assume_role(RoleArn=config.role_arn, RoleSessionName=ROLE_SESSION_NAME)["Credentials"]
    except (ClientError, BotoCoreError) as e:
        raise RemoteQueryError.from_client_error("sts", "assume_role", e) from e

    logger.info(f"AssumeRole 완료: {config.role_arn}")
    return boto3.Session(
        aws_access_key_id=credentials["AccessKeyId"],
        aws_secret_access_key=credentials["SecretAccessKey"],
        aws_session_token=credentials["SessionToken"],
        region_name=config.region,
    )
