# core/__init__.py
"""
core - 모니터 인프라

설정, 예외 계층, boto3 세션/클라이언트 생성을 담당합니다.

아키텍처:
    core/
    ├── aws/            # boto3 세션, 클라이언트, 에러 분류
    ├── config.py       # 중앙 설정 관리
    └── exceptions.py   # 통합 예외 계층

Usage:
    # 설정 사용
    from core.config import settings, get_default_region
    region = get_default_region()  # "us-east-1"

    # 예외 처리
    from core.exceptions import APICallError, is_not_found
    try:
        capacity = TableCapacity(dynamodb).describe("orders")
    except APICallError as e:
        if is_not_found(e):
            print("테이블이 없습니다")
"""

from core import aws, config, exceptions

__all__: list[str] = [
    # 서브패키지
    "aws",
    # 모듈
    "config",
    "exceptions",
]
