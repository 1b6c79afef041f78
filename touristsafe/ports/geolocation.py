"""
Geolocation provider port interface.

This module defines the protocol for single-shot device positioning.
"""

from typing import Protocol
from touristsafe.core.models import LatLng

class GeolocationPort(Protocol):
    """위치 제공자 포트 인터페이스"""

    async def get_current_position(self) -> LatLng:
        """
        현재 위치를 한 번 조회합니다.

        Returns:
            현재 좌표

        Raises:
            GeolocationError: 권한 거부, 위치 확인 불가, 시간 초과
        """
        ...
