"""
Clock port interface.

This module defines the time source shared by the alert countdown
and the score refresher. Tests substitute a virtual clock.
"""

from datetime import datetime
from typing import Protocol

class ClockPort(Protocol):
    """시계 포트 인터페이스"""

    def now(self) -> datetime:
        """현재 시각 (UTC)을 반환합니다."""
        ...

    async def sleep(self, seconds: float) -> None:
        """
        지정한 시간만큼 대기합니다.

        Args:
            seconds: 대기 시간 (초)
        """
        ...
