"""
autoscaler/decision.py - 스케일 필요 판정

두 조건 중 하나만 만족해도 스케일이 필요합니다 (가중 점수가 아닌 OR).

- 소비량 > provisioned * (1 - headroom): 쓰로틀 전에 지속적인 고사용률 감지
- 쓰로틀 이벤트 > ceiling: 평균 사용률은 괜찮아 보여도 실제로 쓰로틀된 경우 (버스트)
"""

from .types import DirectionThresholds


def scale_needed(consumed: float, provisioned: float, throttled: float, thresholds: DirectionThresholds) -> bool:
    """스케일 필요 여부

    Args:
        consumed: 평가 구간 소비 용량 합계
        provisioned: 프로비저닝 용량
        throttled: 평가 구간 쓰로틀 이벤트 합계
        thresholds: 방향 임계값

    Returns:
        스케일이 필요하면 True. 0/0/0은 False
    """
    if consumed > thresholds.utilization_limit(provisioned):
        return True
    return throttled > thresholds.throttle_ceiling
