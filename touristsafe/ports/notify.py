"""
Alert notification port interface.

This module defines the protocol for the notification collaborator.
Delivery is fire-and-forget; the core assumes no acknowledgment.
"""

from typing import Protocol
from touristsafe.core.models import EmergencyAlertPayload
from touristsafe.core.alerting import StatusNotice

class AlertNotifyPort(Protocol):
    """경보 알림 포트 인터페이스"""

    async def notify(self, payload: EmergencyAlertPayload) -> None:
        """
        긴급 경보 페이로드를 전달합니다.

        Args:
            payload: 경보 페이로드
        """
        ...

    async def announce(self, notice: StatusNotice) -> None:
        """
        사용자에게 보여줄 상태 알림을 전달합니다.

        Args:
            notice: 상태 알림
        """
        ...
