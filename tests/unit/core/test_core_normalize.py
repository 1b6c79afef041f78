"""
normalize 모듈 단위 테스트

이 모듈은 저장소 행을 도메인 모델로 변환하는 함수를 테스트합니다.
"""

import pytest
from hypothesis import given, strategies as st

from touristsafe.core.normalize import (
    DEFAULT_ZONE_RADIUS_M,
    normalize_incidents, normalize_zones, to_incident, to_severity, to_zone,
)


def zone_row(**overrides):
    row = {
        "id": "z-1",
        "name": "Old Town",
        "location_lat": 37.5665,
        "location_lng": 126.978,
        "radius_meters": 800,
        "safety_score": 72,
        "description": "busy market",
        "created_at": "2025-01-01T00:00:00Z",
    }
    row.update(overrides)
    return row


def incident_row(**overrides):
    row = {
        "id": "i-1",
        "incident_type": "theft",
        "severity": "medium",
        "location_lat": "37.57",
        "location_lng": "126.98",
        "location_name": "Market",
    }
    row.update(overrides)
    return row


class TestToZone:
    """구역 변환 테스트"""

    def test_basic(self):
        """정상 행 변환"""
        zone = to_zone(zone_row())
        assert zone.id == "z-1"
        assert zone.center.lat == pytest.approx(37.5665)
        assert zone.radius_meters == 800
        assert zone.safety_score == 72
        assert zone.created_at is not None

    @pytest.mark.parametrize("raw,expected", [(120, 100), (-3, 0), (72.6, 73)])
    def test_score_is_clamped(self, raw, expected):
        """범위 밖/실수 점수 보정"""
        assert to_zone(zone_row(safety_score=raw)).safety_score == expected

    @pytest.mark.parametrize("overrides", [
        {"location_lat": None},
        {"location_lat": 91},
        {"location_lng": "abc"},
        {"radius_meters": 0},
        {"radius_meters": -5},
        {"radius_meters": "abc"},
        {"safety_score": None},
        {"location_lat": float("nan")},
    ])
    def test_invalid_rows_raise(self, overrides):
        """잘못된 행은 ValueError"""
        with pytest.raises(ValueError):
            to_zone(zone_row(**overrides))

    @pytest.mark.parametrize("overrides", [
        {"radius_meters": None},
        {"radius_meters": ""},
    ])
    def test_missing_radius_uses_default(self, overrides):
        """반지름이 없으면 기본 반지름으로 변환"""
        zone = to_zone(zone_row(**overrides))
        assert zone.radius_meters == DEFAULT_ZONE_RADIUS_M == 1000

    def test_missing_radius_keeps_high_risk_zone(self):
        """반지름이 없는 위험 구역도 유지"""
        row = zone_row(safety_score=20)
        del row["radius_meters"]
        zones = normalize_zones([row])
        assert [(z.id, z.safety_score, z.radius_meters) for z in zones] == [("z-1", 20, 1000)]

    def test_normalize_skips_bad_rows(self):
        """잘못된 행은 건너뛰고 나머지 변환"""
        rows = [zone_row(), zone_row(id="z-2", radius_meters=0), {"name": "no id"}]
        zones = normalize_zones(rows)
        assert [z.id for z in zones] == ["z-1"]

    @given(st.floats(min_value=-1e6, max_value=1e6, allow_nan=False))
    def test_any_finite_score_lands_in_range(self, score):
        """유한한 점수는 항상 [0, 100]으로 변환"""
        assert 0 <= to_zone(zone_row(safety_score=score)).safety_score <= 100


class TestToIncident:
    """사건 변환 테스트"""

    def test_basic(self):
        """정상 행 변환 (문자열 좌표 허용)"""
        incident = to_incident(incident_row())
        assert incident.type == "theft"
        assert incident.severity == "medium"
        assert incident.location.lat == pytest.approx(37.57)

    @pytest.mark.parametrize("overrides", [
        {"location_lat": None, "location_lng": None},
        {"location_lat": 200},
        {"location_lng": ""},
    ])
    def test_invalid_location_is_count_only(self, overrides):
        """좌표가 없거나 잘못되면 location 없이 유지"""
        incident = to_incident(incident_row(**overrides))
        assert incident.location is None

    @pytest.mark.parametrize("raw,expected", [
        ("minor", "low"), ("HIGH", "high"), ("critical", "high"),
        ("moderate", "medium"), ("weird", "medium"), (None, "medium"),
    ])
    def test_severity_mapping(self, raw, expected):
        """심각도 매핑"""
        assert to_severity(raw) == expected

    def test_normalize_incidents_skips_rows_without_id(self):
        """id 없는 행은 건너뜀"""
        incidents = normalize_incidents([incident_row(), {"incident_type": "x"}])
        assert len(incidents) == 1
