"""
Safety data store port interface.

This module defines the protocol for reading zones and incidents
from the external data service.
"""

from typing import List, Protocol
from touristsafe.core.models import SafetyIncident, SafetyZone

class SafetyStorePort(Protocol):
    """안전 데이터 저장소 포트 인터페이스"""

    async def list_safety_zones(self) -> List[SafetyZone]:
        """
        모든 안전 구역을 조회합니다 (safety_score 내림차순).

        Returns:
            안전 구역 목록

        Raises:
            DataUnavailableError: 저장소 조회 실패
        """
        ...

    async def list_incidents(self, limit: int) -> List[SafetyIncident]:
        """
        사건 목록을 조회합니다.

        Args:
            limit: 최대 조회 건수

        Returns:
            사건 목록

        Raises:
            DataUnavailableError: 저장소 조회 실패
        """
        ...
