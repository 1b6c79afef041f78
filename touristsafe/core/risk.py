"""
Risk classification functions for TouristSafe.

This module is the single source of truth for the score-to-tier
thresholds and the display treatment of each tier.
"""

import math
from typing import Union
from pydantic import BaseModel
from .models import RiskTier

# 등급 경계값 (score >= LOW_RISK_MIN -> low, score >= MEDIUM_RISK_MIN -> medium)
LOW_RISK_MIN = 80
MEDIUM_RISK_MIN = 60

SCORE_MIN = 0
SCORE_MAX = 100

class TierDisplay(BaseModel):
    """등급 표시 정보 모델"""
    tier: RiskTier | None
    label: str
    color: str
    badge: str

# 등급별 표시 정보
TIER_DISPLAY = {
    "low": TierDisplay(tier="low", label="Safe", color="#10b981", badge="default"),
    "medium": TierDisplay(tier="medium", label="Moderate", color="#f59e0b", badge="secondary"),
    "high": TierDisplay(tier="high", label="High Risk", color="#ef4444", badge="destructive"),
}

UNCLASSIFIED_DISPLAY = TierDisplay(tier=None, label="No data", color="#6b7280", badge="outline")
UNAVAILABLE_DISPLAY = TierDisplay(tier=None, label="Data unavailable", color="#6b7280", badge="outline")

def clamp_score(score: Union[int, float]) -> Union[int, float]:
    """점수를 [0, 100] 범위로 제한합니다. 유한하지 않은 값은 최저 점수로 처리"""
    if not math.isfinite(score):
        return SCORE_MIN
    return max(SCORE_MIN, min(SCORE_MAX, score))

def classify(score: Union[int, float]) -> RiskTier:
    """
    안전 점수를 위험 등급으로 분류합니다.

    Args:
        score: 안전 점수 (범위 밖이면 clamp 후 분류)

    Returns:
        위험 등급 ("low", "medium", "high")
    """
    s = clamp_score(score)
    if s >= LOW_RISK_MIN:
        return "low"
    if s >= MEDIUM_RISK_MIN:
        return "medium"
    return "high"

def tier_display(score: Union[int, float]) -> TierDisplay:
    """점수에 해당하는 등급 표시 정보를 반환합니다."""
    return TIER_DISPLAY[classify(score)]

def unclassified_display() -> TierDisplay:
    """데이터 없음 상태의 표시 정보 ("low risk"와 구분됨)"""
    return UNCLASSIFIED_DISPLAY

def unavailable_display() -> TierDisplay:
    """데이터 조회 실패 상태의 표시 정보"""
    return UNAVAILABLE_DISPLAY
