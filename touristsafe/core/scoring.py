"""
Safety score simulation for TouristSafe.

This module implements the bounded random walk that stands in for a
live telemetry feed (signal strength, GPS confidence, heartbeat).
Any replacement feed must keep the same contract: bounded, smoothly
varying and clamped to each metric's band.
"""

import random
from typing import Dict, Optional, Protocol
from pydantic import BaseModel
from .models import SafetyMetrics

class MetricBand(BaseModel):
    """지표별 하한/상한/변동폭"""
    floor: float
    ceiling: float
    delta: float

# 지표별 밴드 (floor, ceiling, tick당 최대 변동폭)
METRIC_BANDS: Dict[str, MetricBand] = {
    "overall": MetricBand(floor=60, ceiling=100, delta=10),
    "location": MetricBand(floor=70, ceiling=100, delta=8),
    "connectivity": MetricBand(floor=80, ceiling=100, delta=5),
    "emergency_readiness": MetricBand(floor=60, ceiling=100, delta=12),
}

SUB_METRICS = ("location", "connectivity", "emergency_readiness")

def clamp(value: float, floor: float, ceiling: float) -> float:
    """값을 [floor, ceiling] 범위로 제한합니다."""
    return max(floor, min(ceiling, value))

def random_walk_step(prev: float, band: MetricBand, rng: random.Random) -> float:
    """
    한 번의 제한된 랜덤 워크를 수행합니다.

    next = clamp(prev + uniform(-delta/2, +delta/2), floor, ceiling)

    Args:
        prev: 이전 값
        band: 지표 밴드
        rng: 난수 생성기

    Returns:
        다음 값 (반올림하지 않음)
    """
    step = rng.uniform(-band.delta / 2, band.delta / 2)
    return clamp(prev + step, band.floor, band.ceiling)

def clamp_metrics(metrics: SafetyMetrics) -> SafetyMetrics:
    """모든 지표를 각자의 밴드로 제한합니다."""
    return SafetyMetrics(**{
        name: clamp(getattr(metrics, name), band.floor, band.ceiling)
        for name, band in METRIC_BANDS.items()
    })

def derive_overall(metrics: SafetyMetrics) -> float:
    """세부 지표의 균등 평균으로 overall을 계산합니다 (overall 밴드로 제한)."""
    mean = sum(getattr(metrics, name) for name in SUB_METRICS) / len(SUB_METRICS)
    band = METRIC_BANDS["overall"]
    return clamp(mean, band.floor, band.ceiling)

class TelemetrySource(Protocol):
    """안전 지표 공급원 인터페이스 (실제 센서 피드로 교체 가능)"""

    def next_metrics(self, prev: SafetyMetrics) -> SafetyMetrics:
        """
        다음 지표를 계산합니다.

        Args:
            prev: 이전 지표

        Returns:
            다음 지표
        """
        ...

class RandomWalkTelemetry:
    """제한된 랜덤 워크 기반 지표 시뮬레이터"""

    def __init__(self, rng: Optional[random.Random] = None, *, derive_overall: bool = False):
        """
        초기화합니다.

        Args:
            rng: 난수 생성기 (테스트 시 시드 고정)
            derive_overall: True면 overall을 세부 지표 평균으로 계산
        """
        self.rng = rng or random.Random()
        self.derive_overall = derive_overall

    def next_metrics(self, prev: SafetyMetrics) -> SafetyMetrics:
        values = {
            name: random_walk_step(getattr(prev, name), band, self.rng)
            for name, band in METRIC_BANDS.items()
        }
        nxt = SafetyMetrics(**values)
        if self.derive_overall:
            nxt = nxt.model_copy(update={"overall": derive_overall(nxt)})
        return nxt
