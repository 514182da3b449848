"""공유 유틸리티 - autoscaler에서 사용하는 AWS 조회기.

- aws: CloudWatch 메트릭 합계, DynamoDB 용량 조회

의존성 구조:
    core (인프라)
       ↑
    shared (공유 유틸리티)
       ↑
    autoscaler
"""

from . import aws

__all__ = ["aws"]
