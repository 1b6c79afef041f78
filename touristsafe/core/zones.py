"""
Zone aggregation functions for TouristSafe.

This module contains pure functions that merge safety zones and
incidents into a provider-neutral risk picture: render descriptors,
overlap precedence and the governing zone of a query point.
"""

from collections import Counter
from datetime import datetime
from itertools import combinations
from typing import Dict, List, Literal, Optional, Sequence, Tuple
from pydantic import BaseModel, Field
from .models import LatLng, RiskTier, SafetyIncident, SafetyZone, Severity
from .risk import TierDisplay, classify, tier_display, unavailable_display, unclassified_display
from touristsafe.common.geo import circle_bounding_box, circles_intersect, point_in_circle, wrap_longitude

# 사건 심각도별 마커 색상
SEVERITY_COLORS = {
    "low": "#10b981",
    "medium": "#f59e0b",
    "high": "#ef4444",
}
DEFAULT_SEVERITY_COLOR = "#6b7280"

ZONE_FILL_OPACITY = 0.2
ZONE_STROKE_WEIGHT = 2

PictureStatus = Literal["ok", "partial", "unavailable"]
AssessmentStatus = Literal["classified", "unclassified", "unavailable"]

class Viewport(BaseModel):
    """지도 표시 영역 (경계 상자)"""
    south: float = Field(ge=-90, le=90)
    west: float = Field(ge=-180, le=180)
    north: float = Field(ge=-90, le=90)
    east: float = Field(ge=-180, le=180)

    def _lng_spans(self) -> List[Tuple[float, float]]:
        if self.west <= self.east:
            return [(self.west, self.east)]
        # 날짜변경선을 가로지르는 영역은 두 구간으로 분할
        return [(self.west, 180.0), (-180.0, self.east)]

    def _lng_in_range(self, lng: float) -> bool:
        lng = wrap_longitude(lng)
        return any(lo <= lng <= hi for lo, hi in self._lng_spans())

    def contains(self, point: LatLng) -> bool:
        """점이 영역 안에 있는지 확인합니다."""
        return self.south <= point.lat <= self.north and self._lng_in_range(point.lng)

    def intersects_circle(self, center: LatLng, radius_m: float) -> bool:
        """원이 영역과 겹치는지 (경계 상자 기준으로) 확인합니다."""
        s, w, n, e = circle_bounding_box(center.lat, center.lng, radius_m)
        if n < self.south or s > self.north:
            return False
        if e - w >= 360.0:
            return True
        # 원의 경도 구간은 ±180을 넘을 수 있으므로 한 바퀴 이동한 영역과도 비교
        for lo, hi in self._lng_spans():
            for shift in (-360.0, 0.0, 360.0):
                if w <= hi + shift and e >= lo + shift:
                    return True
        return False

class ZoneRender(BaseModel):
    """구역 렌더링 디스크립터 (지도 제공자 중립)"""
    zone_id: str
    name: str
    center: LatLng
    radius_meters: float
    radius_label: str
    safety_score: int
    tier: RiskTier
    label: str
    display: TierDisplay
    fill_color: str
    stroke_color: str
    fill_opacity: float = ZONE_FILL_OPACITY
    stroke_weight: int = ZONE_STROKE_WEIGHT
    description: Optional[str] = None

class IncidentMarker(BaseModel):
    """사건 마커 디스크립터"""
    incident_id: str
    type: str
    severity: Severity
    position: LatLng
    color: str
    location_name: Optional[str] = None
    created_at: Optional[datetime] = None

class ZoneOverlap(BaseModel):
    """겹치는 두 구역과 우선 구역"""
    zone_ids: Tuple[str, str]
    distance_m: float
    precedence_zone_id: str

class PointAssessment(BaseModel):
    """질의 지점의 위험 평가 결과"""
    status: AssessmentStatus
    point: LatLng
    governing_zone_id: Optional[str] = None
    safety_score: Optional[int] = None
    tier: Optional[RiskTier] = None
    display: TierDisplay
    containing_zone_ids: List[str] = Field(default_factory=list)

class ZonePicture(BaseModel):
    """구역/사건 집계 결과"""
    status: PictureStatus = "ok"
    failure_reason: Optional[str] = None
    zones: List[ZoneRender] = Field(default_factory=list)
    incidents: List[IncidentMarker] = Field(default_factory=list)
    overlaps: List[ZoneOverlap] = Field(default_factory=list)
    incident_count: int = 0
    unlocated_incident_count: int = 0
    severity_counts: Dict[str, int] = Field(default_factory=dict)
    assessment: Optional[PointAssessment] = None
    fetched_at: Optional[datetime] = None

    @property
    def stale(self) -> bool:
        """저장소 조회가 완전히 성공하지 않았으면 True"""
        return self.status != "ok"

def _precedence_key(zone: SafetyZone) -> tuple:
    # 가장 낮은 점수 우선, 동점이면 더 좁은 구역, 그다음 id
    return (zone.safety_score, zone.radius_meters, zone.id)

def render_zone(zone: SafetyZone) -> ZoneRender:
    """구역을 렌더링 디스크립터로 변환합니다."""
    display = tier_display(zone.safety_score)
    return ZoneRender(
        zone_id=zone.id,
        name=zone.name,
        center=zone.center,
        radius_meters=zone.radius_meters,
        radius_label=f"{zone.radius_meters / 1000:.1f}km radius",
        safety_score=zone.safety_score,
        tier=classify(zone.safety_score),
        label=f"{zone.safety_score}/100",
        display=display,
        fill_color=display.color,
        stroke_color=display.color,
        description=zone.description,
    )

def render_incident(incident: SafetyIncident) -> Optional[IncidentMarker]:
    """사건을 마커로 변환합니다. 좌표가 없으면 None"""
    if incident.location is None:
        return None
    return IncidentMarker(
        incident_id=incident.id,
        type=incident.type,
        severity=incident.severity,
        position=incident.location,
        color=SEVERITY_COLORS.get(incident.severity, DEFAULT_SEVERITY_COLOR),
        location_name=incident.location_name,
        created_at=incident.created_at,
    )

def containing_zones(zones: Sequence[SafetyZone], point: LatLng) -> List[SafetyZone]:
    """점을 포함하는 모든 구역을 반환합니다."""
    return [
        z for z in zones
        if point_in_circle(point.lat, point.lng, z.center.lat, z.center.lng, z.radius_meters)
    ]

def governing_zone(zones: Sequence[SafetyZone], point: LatLng) -> Optional[SafetyZone]:
    """
    질의 지점을 지배하는 구역을 찾습니다.

    여러 구역이 겹치면 안전 점수가 가장 낮은 구역이 우선합니다.

    Args:
        zones: 안전 구역 목록
        point: 질의 지점

    Returns:
        지배 구역 또는 None (어느 구역에도 속하지 않음)
    """
    candidates = containing_zones(zones, point)
    if not candidates:
        return None
    return min(candidates, key=_precedence_key)

def assess_point(zones: Sequence[SafetyZone], point: LatLng) -> PointAssessment:
    """질의 지점의 위험 평가를 수행합니다."""
    candidates = containing_zones(zones, point)
    if not candidates:
        return PointAssessment(
            status="unclassified",
            point=point,
            display=unclassified_display(),
        )

    gov = min(candidates, key=_precedence_key)
    return PointAssessment(
        status="classified",
        point=point,
        governing_zone_id=gov.id,
        safety_score=gov.safety_score,
        tier=classify(gov.safety_score),
        display=tier_display(gov.safety_score),
        containing_zone_ids=[z.id for z in sorted(candidates, key=_precedence_key)],
    )

def find_overlaps(zones: Sequence[SafetyZone]) -> List[ZoneOverlap]:
    """겹치는 구역 쌍과 우선 구역을 계산합니다."""
    overlaps: List[ZoneOverlap] = []
    for a, b in combinations(zones, 2):
        hit, distance = circles_intersect(
            a.center.lat, a.center.lng, a.radius_meters,
            b.center.lat, b.center.lng, b.radius_meters,
        )
        if hit:
            winner = min((a, b), key=_precedence_key)
            overlaps.append(ZoneOverlap(
                zone_ids=(a.id, b.id),
                distance_m=distance,
                precedence_zone_id=winner.id,
            ))
    return overlaps

def aggregate(
    zones: Sequence[SafetyZone],
    incidents: Sequence[SafetyIncident],
    *,
    point: Optional[LatLng] = None,
    viewport: Optional[Viewport] = None,
    status: PictureStatus = "ok",
    failure_reason: Optional[str] = None,
    fetched_at: Optional[datetime] = None,
) -> ZonePicture:
    """
    구역과 사건을 위험 지도로 집계합니다.

    Args:
        zones: 안전 구역 목록
        incidents: 사건 목록
        point: 질의 지점 (예: 현재 기기 위치)
        viewport: 표시 영역 (렌더링 대상만 제한)
        status: 조회 상태 ("ok" 또는 "partial")
        failure_reason: 부분 실패 사유
        fetched_at: 조회 시각

    Returns:
        집계 결과
    """
    visible_zones = [
        z for z in zones
        if viewport is None or viewport.intersects_circle(z.center, z.radius_meters)
    ]

    markers: List[IncidentMarker] = []
    for incident in incidents:
        marker = render_incident(incident)
        if marker is None:
            continue
        if viewport is not None and not viewport.contains(marker.position):
            continue
        markers.append(marker)

    severity_counts = Counter(i.severity for i in incidents)

    return ZonePicture(
        status=status,
        failure_reason=failure_reason,
        zones=[render_zone(z) for z in visible_zones],
        incidents=markers,
        overlaps=find_overlaps(visible_zones),
        incident_count=len(incidents),
        unlocated_incident_count=sum(1 for i in incidents if i.location is None),
        severity_counts=dict(severity_counts),
        # 지배 구역은 표시 영역과 무관하게 전체 구역에서 결정
        assessment=assess_point(zones, point) if point is not None else None,
        fetched_at=fetched_at,
    )

def unavailable_picture(
    reason: str,
    *,
    point: Optional[LatLng] = None,
    fetched_at: Optional[datetime] = None,
) -> ZonePicture:
    """저장소 조회 실패 시의 집계 결과 (빈 목록과 구분됨)"""
    assessment = None
    if point is not None:
        assessment = PointAssessment(
            status="unavailable",
            point=point,
            display=unavailable_display(),
        )
    return ZonePicture(
        status="unavailable",
        failure_reason=reason,
        assessment=assessment,
        fetched_at=fetched_at,
    )
