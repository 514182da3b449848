"""AWS 관련 공유 유틸리티.

하위 모듈:
- metrics: DynamoDB 테이블 CloudWatch 메트릭 합계 (GetMetricStatistics API)
- dynamodb: 테이블 프로비저닝 용량 (DescribeTable API)
"""

from . import dynamodb, metrics

__all__ = ["metrics", "dynamodb"]
