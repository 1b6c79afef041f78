"""
Device-reported geolocation provider for TouristSafe.

The device pushes position fixes (or a permission denial) to the
service; this adapter answers single-shot position requests from the
freshest fix, waiting for the next report when none is fresh.
"""

import asyncio
from datetime import datetime
from typing import List, Optional, Tuple
from touristsafe.core.errors import GeolocationPermissionError, PositionUnavailableError
from touristsafe.core.models import LatLng
from touristsafe.ports.clock import ClockPort
from touristsafe.observability.logging_setup import get_logger

log = get_logger("touristsafe.geolocation")

class ReportedPositionProvider:
    """기기가 보고한 위치 기반 위치 제공자"""

    def __init__(self, clock: ClockPort, *, max_fix_age_sec: float = 30.0):
        """
        초기화합니다.

        Args:
            clock: 시계
            max_fix_age_sec: 최신 위치로 인정하는 최대 경과 시간 (초)
        """
        self.clock = clock
        self.max_fix_age_sec = max_fix_age_sec
        self.permission_denied = False
        self._last_fix: Optional[Tuple[LatLng, datetime]] = None
        self._waiters: List[asyncio.Future] = []

    @property
    def last_fix(self) -> Optional[LatLng]:
        """마지막으로 보고된 위치"""
        return self._last_fix[0] if self._last_fix else None

    def _wake(self, result) -> None:
        waiters, self._waiters = self._waiters, []
        for fut in waiters:
            if fut.done():
                continue
            if isinstance(result, BaseException):
                fut.set_exception(result)
            else:
                fut.set_result(result)

    def report(self, lat: float, lng: float) -> LatLng:
        """
        기기 위치를 보고합니다.

        Args:
            lat: 위도
            lng: 경도

        Returns:
            저장된 좌표

        Raises:
            ValidationError: 좌표 범위가 유효하지 않은 경우
        """
        position = LatLng(lat=lat, lng=lng)
        self.permission_denied = False
        self._last_fix = (position, self.clock.now())
        log.debug("기기 위치 보고됨", lat=lat, lng=lng)
        self._wake(position)
        return position

    def deny(self) -> None:
        """위치 권한 거부를 보고합니다."""
        self.permission_denied = True
        self._last_fix = None
        log.warning("위치 권한 거부됨")
        self._wake(GeolocationPermissionError("permission denied"))

    def fail(self, reason: str = "position unavailable") -> None:
        """대기 중인 요청을 위치 확인 불가로 종료합니다."""
        log.warning("위치 확인 불가", reason=reason)
        self._wake(PositionUnavailableError(reason))

    def _fresh_fix(self) -> Optional[LatLng]:
        if self._last_fix is None:
            return None
        position, at = self._last_fix
        age = (self.clock.now() - at).total_seconds()
        return position if age <= self.max_fix_age_sec else None

    async def get_current_position(self) -> LatLng:
        """
        현재 위치를 조회합니다.

        최신 위치가 없으면 다음 보고를 기다립니다 (시간 제한은 호출자가 적용).

        Returns:
            현재 좌표

        Raises:
            GeolocationError: 권한 거부 또는 위치 확인 불가
        """
        if self.permission_denied:
            raise GeolocationPermissionError("permission denied")

        fresh = self._fresh_fix()
        if fresh is not None:
            return fresh

        fut = asyncio.get_running_loop().create_future()
        self._waiters.append(fut)
        try:
            return await fut
        finally:
            if fut in self._waiters:
                self._waiters.remove(fut)
