"""
GeoJSON export of the risk picture.

Zones become Point features carrying their radius (GeoJSON has no
circle geometry), incidents become Point features. Style hints follow
the zone render descriptor so any map provider can draw them.
"""

from typing import Any, Dict, List
from touristsafe.core.zones import IncidentMarker, ZonePicture, ZoneRender

def zone_feature(zone: ZoneRender) -> Dict[str, Any]:
    """구역을 GeoJSON Feature로 변환합니다."""
    return {
        "type": "Feature",
        "id": zone.zone_id,
        # GeoJSON 좌표 순서는 [경도, 위도]
        "geometry": {"type": "Point", "coordinates": [zone.center.lng, zone.center.lat]},
        "properties": {
            "kind": "zone",
            "name": zone.name,
            "radius_meters": zone.radius_meters,
            "radius_label": zone.radius_label,
            "safety_score": zone.safety_score,
            "tier": zone.tier,
            "label": zone.label,
            "badge": zone.display.badge,
            "tier_label": zone.display.label,
            "fill_color": zone.fill_color,
            "stroke_color": zone.stroke_color,
            "fill_opacity": zone.fill_opacity,
            "stroke_weight": zone.stroke_weight,
            "description": zone.description,
        },
    }

def incident_feature(marker: IncidentMarker) -> Dict[str, Any]:
    """사건 마커를 GeoJSON Feature로 변환합니다."""
    return {
        "type": "Feature",
        "id": marker.incident_id,
        "geometry": {"type": "Point", "coordinates": [marker.position.lng, marker.position.lat]},
        "properties": {
            "kind": "incident",
            "type": marker.type,
            "severity": marker.severity,
            "color": marker.color,
            "location_name": marker.location_name,
            "created_at": marker.created_at.isoformat() if marker.created_at else None,
        },
    }

def to_feature_collection(picture: ZonePicture) -> Dict[str, Any]:
    """
    위험 지도를 GeoJSON FeatureCollection으로 변환합니다.

    Args:
        picture: 집계 결과

    Returns:
        FeatureCollection (조회 상태는 최상위 "status"/"failure_reason"에 기록)
    """
    features: List[Dict[str, Any]] = [zone_feature(z) for z in picture.zones]
    features.extend(incident_feature(m) for m in picture.incidents)
    return {
        "type": "FeatureCollection",
        "features": features,
        "status": picture.status,
        "failure_reason": picture.failure_reason,
    }
