"""
Zone aggregation orchestrator for TouristSafe.

This module loads zones and incidents from the store collaborator and
turns them into a risk picture. Store failures are recovered into a
tagged result, never a silent empty list.
"""

import asyncio
import time
from typing import Optional
from touristsafe.core.errors import DataUnavailableError
from touristsafe.core.models import LatLng
from touristsafe.core.zones import Viewport, ZonePicture, aggregate, unavailable_picture
from touristsafe.ports.clock import ClockPort
from touristsafe.ports.store import SafetyStorePort
from touristsafe.observability import metrics
from touristsafe.observability.logging_setup import get_logger

log = get_logger("touristsafe.zones")

# 사건 조회 기본 페이지 크기
DEFAULT_INCIDENT_LIMIT = 50

def _describe(exc: BaseException) -> str:
    if isinstance(exc, DataUnavailableError):
        return exc.reason
    return str(exc) or type(exc).__name__

class ZoneAggregator:
    """저장소 조회 + 위험 지도 집계"""

    def __init__(self,
                 store: SafetyStorePort,
                 clock: ClockPort,
                 *,
                 incident_limit: int = DEFAULT_INCIDENT_LIMIT,
                 include_zones: bool = True,
                 include_incidents: bool = True):
        """
        초기화합니다.

        Args:
            store: 안전 데이터 저장소 포트
            clock: 시계
            incident_limit: 사건 조회 최대 건수
            include_zones: 구역 조회 여부
            include_incidents: 사건 조회 여부
        """
        self.store = store
        self.clock = clock
        self.incident_limit = incident_limit
        self.include_zones = include_zones
        self.include_incidents = include_incidents

    async def _zones(self):
        if not self.include_zones:
            return []
        return await self.store.list_safety_zones()

    async def _incidents(self):
        if not self.include_incidents:
            return []
        return await self.store.list_incidents(self.incident_limit)

    async def load(self,
                   *,
                   point: Optional[LatLng] = None,
                   viewport: Optional[Viewport] = None) -> ZonePicture:
        """
        구역과 사건을 조회하여 위험 지도를 만듭니다.

        Args:
            point: 질의 지점 (지배 구역 판정)
            viewport: 표시 영역

        Returns:
            집계 결과 (구역 조회 실패 시 "unavailable", 사건만 실패 시 "partial")
        """
        fetched_at = self.clock.now()
        t0 = time.perf_counter()

        zones, incidents = await asyncio.gather(
            self._zones(), self._incidents(), return_exceptions=True
        )
        metrics.zone_fetch_seconds.observe(time.perf_counter() - t0)

        # 취소는 그대로 전파
        for result in (zones, incidents):
            if isinstance(result, asyncio.CancelledError):
                raise result

        if isinstance(zones, BaseException):
            metrics.zone_fetch_failures.labels(source="zones").inc()
            reason = f"zones: {_describe(zones)}"
            log.warning("구역 조회 실패, 데이터 없음 상태로 반환", reason=reason)
            return unavailable_picture(reason, point=point, fetched_at=fetched_at)

        status = "ok"
        failure_reason = None
        if isinstance(incidents, BaseException):
            metrics.zone_fetch_failures.labels(source="incidents").inc()
            status = "partial"
            failure_reason = f"incidents: {_describe(incidents)}"
            log.warning("사건 조회 실패, 구역만 집계", reason=failure_reason)
            incidents = []

        picture = aggregate(
            zones,
            incidents,
            point=point,
            viewport=viewport,
            status=status,
            failure_reason=failure_reason,
            fetched_at=fetched_at,
        )
        log.debug("위험 지도 집계 완료",
                  zones=len(picture.zones),
                  incidents=len(picture.incidents),
                  status=picture.status)
        return picture
