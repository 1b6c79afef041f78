"""
hypothesis를 활용한 zones 모듈 테스트

이 모듈은 구역 집계, 지배 구역 선택, 겹침 보고,
표시 영역 필터링을 검증합니다.
"""

import pytest
from hypothesis import given, strategies as st

from touristsafe.core.models import LatLng, SafetyIncident, SafetyZone
from touristsafe.core.zones import (
    Viewport, aggregate, assess_point, find_overlaps, governing_zone,
    render_incident, render_zone, unavailable_picture,
)


@st.composite
def zones_at_origin(draw):
    """원점을 포함하는 구역 목록 생성"""
    count = draw(st.integers(min_value=1, max_value=6))
    return [
        SafetyZone(
            id=f"Z{i}",
            name=f"zone {i}",
            center=LatLng(lat=0.0, lng=0.0),
            radius_meters=draw(st.floats(min_value=10, max_value=50000)),
            safety_score=draw(st.integers(min_value=0, max_value=100)),
        )
        for i in range(count)
    ]


class TestGoverningZone:
    """지배 구역 선택 테스트"""

    def test_lowest_score_wins(self, sample_zones):
        """겹친 구역 중 점수가 가장 낮은 구역이 지배"""
        gov = governing_zone(sample_zones, LatLng(lat=0.0, lng=0.0))
        assert gov.id == "Z1"

    def test_outside_every_zone(self, sample_zones):
        """어느 구역에도 속하지 않으면 None"""
        assert governing_zone(sample_zones, LatLng(lat=45.0, lng=45.0)) is None

    def test_tie_prefers_smaller_radius(self):
        """동점이면 더 좁은 구역이 지배"""
        zones = [
            SafetyZone(id="B", name="b", center=LatLng(lat=0, lng=0), radius_meters=2000, safety_score=50),
            SafetyZone(id="A", name="a", center=LatLng(lat=0, lng=0), radius_meters=800, safety_score=50),
        ]
        assert governing_zone(zones, LatLng(lat=0, lng=0)).id == "A"

    @given(zones_at_origin())
    def test_governing_is_minimum(self, zones):
        """지배 구역 점수는 포함 구역 점수의 최솟값"""
        gov = governing_zone(zones, LatLng(lat=0.0, lng=0.0))
        assert gov is not None
        assert gov.safety_score == min(z.safety_score for z in zones)

    @given(zones_at_origin())
    def test_order_independent(self, zones):
        """입력 순서와 무관하게 같은 구역 선택"""
        point = LatLng(lat=0.0, lng=0.0)
        assert governing_zone(zones, point).id == governing_zone(list(reversed(zones)), point).id


class TestAssessPoint:
    """지점 평가 테스트"""

    def test_classified(self, sample_zones):
        """구역 안 지점은 지배 구역 기준으로 분류"""
        result = assess_point(sample_zones, LatLng(lat=0.0, lng=0.0))
        assert result.status == "classified"
        assert result.governing_zone_id == "Z1"
        assert result.tier == "high"
        assert result.containing_zone_ids == ["Z1", "Z2"]

    def test_outer_ring_uses_outer_zone(self, sample_zones):
        """안쪽 구역 밖, 바깥 구역 안의 지점"""
        # 약 2.2km 북쪽
        result = assess_point(sample_zones, LatLng(lat=0.02, lng=0.0))
        assert result.governing_zone_id == "Z2"
        assert result.tier == "low"

    def test_unclassified_is_not_low(self, sample_zones):
        """구역 밖 지점은 'low'가 아닌 데이터 없음"""
        result = assess_point(sample_zones, LatLng(lat=45.0, lng=45.0))
        assert result.status == "unclassified"
        assert result.tier is None
        assert result.display.label == "No data"


class TestRender:
    """렌더링 디스크립터 테스트"""

    def test_render_zone(self, sample_zones):
        """구역 렌더링 테스트"""
        render = render_zone(sample_zones[1])
        assert render.label == "90/100"
        assert render.radius_label == "5.0km radius"
        assert render.fill_color == "#10b981"
        assert render.fill_opacity == 0.2
        assert render.stroke_weight == 2

    def test_render_incident_without_location(self, sample_incidents):
        """좌표 없는 사건은 마커 없음"""
        assert render_incident(sample_incidents[2]) is None

    def test_render_incident_color(self, sample_incidents):
        """심각도별 마커 색상"""
        assert render_incident(sample_incidents[1]).color == "#ef4444"


class TestOverlaps:
    """구역 겹침 테스트"""

    def test_nested_zones_overlap(self, sample_zones):
        """겹친 구역 쌍과 우선 구역 보고"""
        overlaps = find_overlaps(sample_zones)
        assert len(overlaps) == 1
        assert set(overlaps[0].zone_ids) == {"Z1", "Z2"}
        assert overlaps[0].precedence_zone_id == "Z1"

    def test_disjoint_zones(self):
        """떨어진 구역은 겹침 없음"""
        zones = [
            SafetyZone(id="A", name="a", center=LatLng(lat=0, lng=0), radius_meters=100, safety_score=50),
            SafetyZone(id="B", name="b", center=LatLng(lat=1, lng=1), radius_meters=100, safety_score=60),
        ]
        assert find_overlaps(zones) == []


class TestViewport:
    """표시 영역 테스트"""

    def test_contains(self):
        """영역 안 지점 확인"""
        vp = Viewport(south=-1, west=-1, north=1, east=1)
        assert vp.contains(LatLng(lat=0, lng=0))
        assert not vp.contains(LatLng(lat=2, lng=0))

    def test_antimeridian(self):
        """날짜변경선을 가로지르는 영역"""
        vp = Viewport(south=-10, west=170, north=10, east=-170)
        assert vp.contains(LatLng(lat=0, lng=179))
        assert vp.contains(LatLng(lat=0, lng=-175))
        assert not vp.contains(LatLng(lat=0, lng=0))

    def test_circle_crossing_edge(self):
        """중심이 밖이어도 원이 걸치면 포함"""
        vp = Viewport(south=-1, west=-1, north=1, east=1)
        # 경계에서 약 1.1km 떨어진 중심, 반지름 5km
        assert vp.intersects_circle(LatLng(lat=0, lng=1.01), 5000)
        assert not vp.intersects_circle(LatLng(lat=0, lng=5), 5000)

    def test_circle_crossing_antimeridian(self):
        """날짜변경선을 넘는 원은 반대편 영역에도 포함"""
        east_edge = Viewport(south=-10, west=-180, north=10, east=-170)
        assert east_edge.intersects_circle(LatLng(lat=0, lng=179.9), 50_000)
        west_edge = Viewport(south=-10, west=170, north=10, east=180)
        assert west_edge.intersects_circle(LatLng(lat=0, lng=-179.9), 50_000)
        # 넘지 않는 원은 제외
        assert not east_edge.intersects_circle(LatLng(lat=0, lng=179.0), 50_000)

    def test_aggregate_keeps_zone_across_antimeridian(self):
        """표시 영역 필터가 날짜변경선 너머 구역을 유지"""
        zone = SafetyZone(id="Z", name="dateline", center=LatLng(lat=0, lng=179.9),
                          radius_meters=50_000, safety_score=30)
        vp = Viewport(south=-10, west=-180, north=10, east=-170)
        picture = aggregate([zone], [], viewport=vp)
        assert [z.zone_id for z in picture.zones] == ["Z"]

    @given(
        lng=st.floats(min_value=-180, max_value=180),
        radius=st.floats(min_value=10, max_value=200_000),
    )
    def test_center_inside_always_intersects(self, lng, radius):
        """중심을 포함하는 영역은 항상 원과 겹침"""
        vp = Viewport(south=-1, west=lng, north=1, east=lng)
        assert vp.intersects_circle(LatLng(lat=0, lng=lng), radius)


class TestAggregate:
    """집계 테스트"""

    def test_counts_include_unlocated(self, sample_zones, sample_incidents):
        """좌표 없는 사건도 건수에 포함"""
        picture = aggregate(sample_zones, sample_incidents)
        assert picture.status == "ok"
        assert picture.incident_count == 3
        assert picture.unlocated_incident_count == 1
        assert len(picture.incidents) == 2
        assert picture.severity_counts == {"medium": 1, "high": 1, "low": 1}

    def test_viewport_filters_render_not_assessment(self, sample_zones, sample_incidents):
        """표시 영역은 렌더링만 제한하고 평가는 전체 구역 사용"""
        vp = Viewport(south=9, west=9, north=11, east=11)
        picture = aggregate(sample_zones, sample_incidents,
                            point=LatLng(lat=0.0, lng=0.0), viewport=vp)
        assert [z.zone_id for z in picture.zones] == ["Z3"]
        assert [m.incident_id for m in picture.incidents] == ["I2"]
        assert picture.assessment.governing_zone_id == "Z1"
        assert picture.incident_count == 3

    def test_empty_store_is_ok_not_unavailable(self):
        """빈 저장소는 조회 실패와 구분됨"""
        picture = aggregate([], [], point=LatLng(lat=0, lng=0))
        assert picture.status == "ok"
        assert not picture.stale
        assert picture.assessment.status == "unclassified"

    def test_unavailable_picture(self):
        """조회 실패 결과 테스트"""
        picture = unavailable_picture("zones: timeout", point=LatLng(lat=0, lng=0))
        assert picture.status == "unavailable"
        assert picture.stale
        assert picture.failure_reason == "zones: timeout"
        assert picture.assessment.status == "unavailable"
        assert picture.zones == []
