"""
core/config.py - 중앙 설정 관리

기본값은 불변 Settings 데이터클래스 하나에 모여 있고,
환경변수 헬퍼가 CLI 기본값과 로그 설정을 보완합니다.
테이블별 설정(MonitorConfig)은 autoscaler.types에 있으며 생성 시점에 주입됩니다.

Usage:
    from core.config import settings, get_default_region

    region = get_default_region()  # "us-east-1"
    interval = settings.POLL_INTERVAL_SECONDS
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

# =============================================================================
# 기본 설정
# =============================================================================


@dataclass(frozen=True)
class Settings:
    """전역 기본값 (불변)"""

    # AWS
    DEFAULT_REGION: str = "us-east-1"
    CLOUDWATCH_NAMESPACE: str = "AWS/DynamoDB"
    API_CONNECT_TIMEOUT: int = 10  # 초
    API_READ_TIMEOUT: int = 30  # 초
    # 재시도는 다음 틱이 담당
    API_MAX_ATTEMPTS: int = 1

    # 모니터 루프
    POLL_INTERVAL_SECONDS: float = 5.0
    COOLDOWN_SECONDS: float = 300.0
    EVALUATION_MINUTES: int = 5
    LOOKBACK_MINUTES: int = 5
    SHUTDOWN_DRAIN_SECONDS: float = 10.0

    # 임계값
    HEADROOM: float = 0.2
    THROTTLE_CEILING: float = 0.0


settings = Settings()


@dataclass(frozen=True)
class LogConfig:
    """로그 설정

    Attributes:
        level: 로그 레벨 이름 (AUTOSCALER_LOG_LEVEL 환경변수로 재정의)
        format: 로그 포맷
        datefmt: 날짜 포맷
    """

    level: str = "INFO"
    format: str = "%(name)s: %(message)s"
    datefmt: str = "[%X]"

    @classmethod
    def from_env(cls) -> LogConfig:
        level = os.environ.get("AUTOSCALER_LOG_LEVEL", cls.level).upper()
        if not isinstance(logging.getLevelName(level), int):
            level = cls.level
        return cls(level=level)


# =============================================================================
# 프로젝트 경로
# =============================================================================


def get_project_root() -> Path:
    """프로젝트 루트 디렉토리 반환"""
    return Path(__file__).resolve().parent.parent


def get_version() -> str:
    """version.txt에서 버전 문자열 반환

    파일이 없으면 "0.0.0"
    """
    version_file = get_project_root() / "version.txt"
    try:
        return version_file.read_text(encoding="utf-8").strip()
    except OSError:
        return "0.0.0"


# =============================================================================
# 환경변수 헬퍼
# =============================================================================


def get_default_profile() -> str | None:
    """AWS_PROFILE → AWS_DEFAULT_PROFILE 순으로 프로파일 반환"""
    return os.environ.get("AWS_PROFILE") or os.environ.get("AWS_DEFAULT_PROFILE")


def get_default_region() -> str:
    """AWS_REGION → AWS_DEFAULT_REGION → settings.DEFAULT_REGION"""
    return os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION") or settings.DEFAULT_REGION

