"""
Safety dashboard feature for TouristSafe.

This module builds the tourist's score card: rounded live metrics,
the overall tier badge, the incident count and a short trend.
"""

from typing import Dict, Literal, Optional
from pydantic import BaseModel
from touristsafe.core.alerting import AlertSnapshot
from touristsafe.core.models import SafetyMetrics, TouristProfile
from touristsafe.core.risk import TierDisplay, classify, tier_display
from touristsafe.core.zones import PointAssessment, ZonePicture

Trend = Literal["up", "down", "stable"]

# overall 변화가 이 값 미만이면 stable
TREND_THRESHOLD = 1.0

class ScoreCard(BaseModel):
    """안전 점수 카드"""
    overall: int
    sub_scores: Dict[str, int]
    tier: str
    display: TierDisplay
    trend: Trend
    incident_count: int
    data_status: str
    assessment: Optional[PointAssessment] = None

class Dashboard(BaseModel):
    """대시보드 응답"""
    profile: TouristProfile
    scores: ScoreCard
    alert: AlertSnapshot

def score_trend(current: SafetyMetrics, previous: Optional[SafetyMetrics]) -> Trend:
    """직전 overall 값 대비 추세를 계산합니다."""
    if previous is None:
        return "stable"
    diff = current.overall - previous.overall
    if diff >= TREND_THRESHOLD:
        return "up"
    if diff <= -TREND_THRESHOLD:
        return "down"
    return "stable"

def build_score_card(metrics: SafetyMetrics,
                     previous: Optional[SafetyMetrics],
                     picture: ZonePicture) -> ScoreCard:
    """
    점수 카드를 생성합니다.

    Args:
        metrics: 현재 지표
        previous: 직전 지표 (추세 계산용)
        picture: 위험 지도 집계 결과 (사건 수, 현재 위치 평가)

    Returns:
        점수 카드 (표시 값은 정수로 반올림)
    """
    rounded = metrics.rounded()
    overall = rounded.pop("overall")
    return ScoreCard(
        overall=overall,
        sub_scores=rounded,
        tier=classify(overall),
        display=tier_display(overall),
        trend=score_trend(metrics, previous),
        incident_count=picture.incident_count,
        data_status=picture.status,
        assessment=picture.assessment,
    )
