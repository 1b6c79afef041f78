"""
Normalization functions for TouristSafe.

This module contains pure functions for converting raw store rows
into internal domain models.
"""

import math
from typing import Any, Dict, Iterable, List, Optional
from pydantic import ValidationError
from .models import LatLng, SafetyIncident, SafetyZone, Severity
from .risk import clamp_score
from touristsafe.common.geo import validate_coordinates
from touristsafe.observability.logging_setup import get_logger

log = get_logger("touristsafe.normalize")

# 저장소 심각도 값 매핑
SEVERITY_MAP: Dict[str, Severity] = {
    "low": "low",
    "minor": "low",
    "medium": "medium",
    "moderate": "medium",
    "high": "high",
    "severe": "high",
    "critical": "high",
}

# 반지름이 없는 구역의 기본 반지름 (미터)
DEFAULT_ZONE_RADIUS_M = 1000.0

def _to_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    # NaN/inf는 값 없음으로 처리
    return number if math.isfinite(number) else None

def to_severity(raw: Any) -> Severity:
    """심각도 문자열을 정규화합니다. 알 수 없는 값은 medium"""
    key = str(raw or "").strip().lower()
    severity = SEVERITY_MAP.get(key)
    if severity is None:
        log.warning("알 수 없는 심각도, medium으로 처리", severity=raw)
        return "medium"
    return severity

def to_zone(row: Dict[str, Any]) -> SafetyZone:
    """
    저장소 행을 SafetyZone으로 변환합니다.

    Args:
        row: safety_zones 테이블 행

    Returns:
        SafetyZone 모델

    Raises:
        ValueError: 좌표/반지름/점수가 유효하지 않은 경우 (반지름이 없으면 기본값 사용)
    """
    lat = _to_float(row.get("location_lat"))
    lng = _to_float(row.get("location_lng"))
    if lat is None or lng is None or not validate_coordinates(lat, lng):
        raise ValueError(f"유효하지 않은 구역 좌표: lat={row.get('location_lat')} lng={row.get('location_lng')}")

    raw_radius = row.get("radius_meters")
    if raw_radius is None or raw_radius == "":
        log.warning("구역 반지름 없음, 기본값 사용", zone_id=row.get("id"), radius=DEFAULT_ZONE_RADIUS_M)
        raw_radius = DEFAULT_ZONE_RADIUS_M
    radius = _to_float(raw_radius)
    if radius is None or not radius > 0:
        raise ValueError(f"유효하지 않은 구역 반지름: {row.get('radius_meters')}")

    raw_score = _to_float(row.get("safety_score"))
    if raw_score is None:
        raise ValueError(f"유효하지 않은 안전 점수: {row.get('safety_score')}")
    score = int(round(clamp_score(raw_score)))
    if score != raw_score:
        log.warning("안전 점수 보정됨", zone_id=row.get("id"), raw=raw_score, score=score)

    return SafetyZone(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        center=LatLng(lat=lat, lng=lng),
        radius_meters=radius,
        safety_score=score,
        description=row.get("description"),
        created_at=row.get("created_at"),
    )

def to_incident(row: Dict[str, Any]) -> SafetyIncident:
    """
    저장소 행을 SafetyIncident로 변환합니다.

    좌표가 없거나 유효하지 않으면 location 없이 생성합니다 (건수 집계에만 사용).
    """
    lat = _to_float(row.get("location_lat"))
    lng = _to_float(row.get("location_lng"))
    location = None
    if lat is not None and lng is not None:
        if validate_coordinates(lat, lng):
            location = LatLng(lat=lat, lng=lng)
        else:
            log.warning("사건 좌표가 유효하지 않음", incident_id=row.get("id"), lat=lat, lng=lng)

    return SafetyIncident(
        id=str(row["id"]),
        type=str(row.get("incident_type") or row.get("type") or "unknown"),
        severity=to_severity(row.get("severity")),
        location=location,
        location_name=row.get("location_name"),
        description=row.get("description"),
        created_at=row.get("created_at"),
    )

def normalize_zones(rows: Iterable[Dict[str, Any]]) -> List[SafetyZone]:
    """구역 행 목록을 변환합니다. 잘못된 행은 건너뜁니다."""
    zones: List[SafetyZone] = []
    for row in rows:
        try:
            zones.append(to_zone(row))
        except (KeyError, ValueError, ValidationError) as e:
            log.warning("구역 행 변환 실패, 건너뜀", zone_id=row.get("id"), error=str(e))
    return zones

def normalize_incidents(rows: Iterable[Dict[str, Any]]) -> List[SafetyIncident]:
    """사건 행 목록을 변환합니다. 잘못된 행은 건너뜁니다."""
    incidents: List[SafetyIncident] = []
    for row in rows:
        try:
            incidents.append(to_incident(row))
        except (KeyError, ValueError, ValidationError) as e:
            log.warning("사건 행 변환 실패, 건너뜀", incident_id=row.get("id"), error=str(e))
    return incidents
