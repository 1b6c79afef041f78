"""
Geographic utilities for TouristSafe.

This module provides geographic calculations including
great-circle distance, circle containment and circle
intersection tests used by zone aggregation.
"""

import math
from typing import Tuple

# 지구 평균 반지름 (미터)
EARTH_RADIUS_M = 6371000.0

# 위도 1도당 거리 (미터)
METERS_PER_DEGREE_LAT = 111320.0

def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    두 지점 간의 Haversine 거리를 계산합니다 (미터).

    Args:
        lat1: 첫 번째 지점의 위도
        lon1: 첫 번째 지점의 경도
        lat2: 두 번째 지점의 위도
        lon2: 두 번째 지점의 경도

    Returns:
        두 지점 간의 거리 (미터)
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = lat2_rad - lat1_rad
    dlon = math.radians(lon2 - lon1)

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2)
    # 부동소수 오차로 1을 살짝 넘는 경우 방지
    c = 2 * math.asin(math.sqrt(min(1.0, a)))

    return c * EARTH_RADIUS_M

def point_in_circle(lat: float, lon: float,
                    center_lat: float, center_lon: float,
                    radius_m: float) -> bool:
    """점이 원(중심, 반지름) 내부 또는 경계에 있는지 확인합니다."""
    return haversine_m(lat, lon, center_lat, center_lon) <= radius_m

def circles_intersect(lat1: float, lon1: float, r1_m: float,
                      lat2: float, lon2: float, r2_m: float) -> Tuple[bool, float]:
    """
    두 원이 겹치는지 확인합니다.

    Returns:
        (겹침 여부, 중심 간 거리(미터))
    """
    distance = haversine_m(lat1, lon1, lat2, lon2)
    return distance < r1_m + r2_m, distance

def wrap_longitude(lon: float) -> float:
    """
    경도를 [-180, 180] 범위로 정규화합니다.

    Args:
        lon: 경도

    Returns:
        정규화된 경도 (180은 180으로 유지)
    """
    if -180.0 <= lon <= 180.0:
        return lon
    return ((lon + 180.0) % 360.0) - 180.0

def circle_bounding_box(lat: float, lon: float, radius_m: float) -> Tuple[float, float, float, float]:
    """
    원의 경계 상자를 근사 계산합니다.

    west/east는 날짜변경선 근처에서 ±180을 넘을 수 있습니다 (정규화하지 않음).

    Returns:
        (south, west, north, east)
    """
    dlat = radius_m / METERS_PER_DEGREE_LAT
    cos_lat = max(math.cos(math.radians(lat)), 1e-6)
    dlon = min(180.0, radius_m / (METERS_PER_DEGREE_LAT * cos_lat))

    return (max(-90.0, lat - dlat), lon - dlon, min(90.0, lat + dlat), lon + dlon)

def validate_coordinates(lat: float, lon: float) -> bool:
    """
    좌표가 유효한지 확인합니다.

    Args:
        lat: 위도
        lon: 경도

    Returns:
        좌표가 유효하면 True
    """
    try:
        return -90 <= lat <= 90 and -180 <= lon <= 180
    except TypeError:
        return False
