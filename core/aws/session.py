"""
core/aws/session.py - boto3 Session 생성

리전/프로파일만으로 세션을 만듭니다. 자격 증명 해석은 boto3 기본 체인
(환경변수, 공유 설정 파일, 인스턴스 프로파일 등)에 맡깁니다.
"""

from __future__ import annotations

import logging

import boto3
from botocore.exceptions import BotoCoreError

from core.exceptions import ConfigError

logger = logging.getLogger(__name__)


def create_session(region: str, profile: str | None = None) -> boto3.Session:
    """boto3 Session 생성

    Args:
        region: AWS 리전
        profile: 공유 설정 파일의 프로파일 이름 (None이면 기본 체인)

    Returns:
        boto3.Session

    Raises:
        ConfigError: 프로파일이 존재하지 않는 경우
    """
    try:
        session = boto3.Session(region_name=region, profile_name=profile)
    except BotoCoreError as e:
        raise ConfigError("profile", f"cannot create session for profile {profile!r}", cause=e) from e

    logger.debug("session created: region=%s profile=%s", region, profile or "<default>")
    return session
