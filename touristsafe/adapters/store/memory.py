"""
In-memory safety data store for TouristSafe.

This module implements the store port over process memory. It is
used for offline sessions and as a controllable stand-in in tests.
"""

from typing import Iterable, List, Optional
from touristsafe.core.errors import DataUnavailableError
from touristsafe.core.models import SafetyIncident, SafetyZone
from touristsafe.observability.logging_setup import get_logger

log = get_logger("touristsafe.store.memory")

class InMemoryStore:
    """메모리 기반 안전 데이터 저장소"""

    def __init__(self,
                 zones: Optional[Iterable[SafetyZone]] = None,
                 incidents: Optional[Iterable[SafetyIncident]] = None):
        """
        초기화합니다.

        Args:
            zones: 초기 안전 구역
            incidents: 초기 사건
        """
        self.zones: List[SafetyZone] = list(zones or [])
        self.incidents: List[SafetyIncident] = list(incidents or [])
        # 장애 주입용 사유 (None이면 정상)
        self.zones_failure: Optional[str] = None
        self.incidents_failure: Optional[str] = None

    def fail(self, reason: str = "store offline", *, zones: bool = True, incidents: bool = True) -> None:
        """저장소 장애를 설정합니다."""
        if zones:
            self.zones_failure = reason
        if incidents:
            self.incidents_failure = reason

    def recover(self) -> None:
        """저장소 장애를 해제합니다."""
        self.zones_failure = None
        self.incidents_failure = None

    def upsert_zone(self, zone: SafetyZone) -> None:
        """구역을 추가하거나 교체합니다."""
        self.zones = [z for z in self.zones if z.id != zone.id] + [zone]

    def add_incident(self, incident: SafetyIncident) -> None:
        """사건을 추가합니다."""
        self.incidents.append(incident)

    async def list_safety_zones(self) -> List[SafetyZone]:
        if self.zones_failure:
            raise DataUnavailableError("zones", self.zones_failure)
        return sorted(self.zones, key=lambda z: z.safety_score, reverse=True)

    async def list_incidents(self, limit: int) -> List[SafetyIncident]:
        if self.incidents_failure:
            raise DataUnavailableError("incidents", self.incidents_failure)
        return self.incidents[:limit]
