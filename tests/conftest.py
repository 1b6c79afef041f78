"""
테스트 설정 및 픽스처

이 모듈은 pytest 설정과 공통 픽스처를 제공합니다.
"""

import pytest
from datetime import datetime, timezone
from touristsafe.settings import Settings
from touristsafe.core.models import LatLng, SafetyIncident, SafetyZone
from touristsafe.adapters.clock import ManualClock
from touristsafe.adapters.store.memory import InMemoryStore
from touristsafe.adapters.geolocation.reported import ReportedPositionProvider
from touristsafe.adapters.notify.feed import NoticeFeed


@pytest.fixture
def sample_settings():
    """테스트용 설정"""
    settings = Settings()
    settings.observability.service_name = "test-service"
    settings.observability.build_version = "1.0.0"
    settings.observability.log_level = "INFO"
    settings.observability.http_port = 8080
    settings.scores.seed = 42
    return settings


@pytest.fixture
def manual_clock():
    """테스트용 가상 시계"""
    return ManualClock(datetime(2025, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def sample_zones():
    """테스트용 안전 구역 (Z1은 Z2 안쪽에 겹침)"""
    return [
        SafetyZone(id="Z1", name="Old Town", center=LatLng(lat=0.0, lng=0.0),
                   radius_meters=1000, safety_score=40),
        SafetyZone(id="Z2", name="Harbour", center=LatLng(lat=0.0, lng=0.0),
                   radius_meters=5000, safety_score=90),
        SafetyZone(id="Z3", name="Museum Quarter", center=LatLng(lat=10.0, lng=10.0),
                   radius_meters=500, safety_score=70),
    ]


@pytest.fixture
def sample_incidents():
    """테스트용 사건 (하나는 좌표 없음)"""
    return [
        SafetyIncident(id="I1", type="theft", severity="medium",
                       location=LatLng(lat=0.001, lng=0.001), location_name="Market"),
        SafetyIncident(id="I2", type="assault", severity="high",
                       location=LatLng(lat=10.0, lng=10.0)),
        SafetyIncident(id="I3", type="scam", severity="low"),
    ]


@pytest.fixture
def memory_store(sample_zones, sample_incidents):
    """테스트용 메모리 저장소"""
    return InMemoryStore(sample_zones, sample_incidents)


@pytest.fixture
def notice_feed():
    """테스트용 알림 피드"""
    return NoticeFeed()


@pytest.fixture
def reported_position(manual_clock):
    """테스트용 기기 보고 위치 제공자"""
    return ReportedPositionProvider(manual_clock)


# pytest 설정
def pytest_configure(config):
    """pytest 설정"""
    config.addinivalue_line(
        "markers", "slow: 느린 테스트 마커"
    )
    config.addinivalue_line(
        "markers", "integration: 통합 테스트 마커"
    )


def pytest_collection_modifyitems(config, items):
    """테스트 아이템 수정"""
    for item in items:
        # 느린 테스트 마커 추가
        if "performance" in item.name or "stress" in item.name:
            item.add_marker(pytest.mark.slow)

        # 통합 테스트 마커 추가
        if "integration" in item.name:
            item.add_marker(pytest.mark.integration)
