"""
Emergency alert domain for TouristSafe.

This module contains the alert machine states and the pure functions
that build the alert payload and the human-readable status notices.
"""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional
from pydantic import BaseModel
from .models import EmergencyAlertPayload, LatLng

class AlertState(str, Enum):
    """패닉 버튼 상태"""
    IDLE = "idle"
    ARMED = "armed"
    FIRED = "fired"
    COOLDOWN = "cooldown"

NoticeVariant = Literal["default", "destructive"]

class StatusNotice(BaseModel):
    """사용자에게 보여줄 상태 알림 (표시 방식은 알림 협력자가 결정)"""
    title: str
    description: str
    variant: NoticeVariant = "default"
    timestamp: Optional[datetime] = None

class AlertReport(BaseModel):
    """발송된 경보 보고 ("경보 발송"과 "위치 첨부"는 독립된 사실)"""
    cycle: int
    fired: bool = True
    location_attached: bool
    location_error: Optional[str] = None
    payload: EmergencyAlertPayload
    notice: StatusNotice

class AlertSnapshot(BaseModel):
    """경보 머신 상태 스냅샷"""
    state: AlertState
    countdown: int
    cycle: int
    last_report: Optional[AlertReport] = None

FIRED_TITLE = "EMERGENCY ALERT TRIGGERED"
CANCELLED_TITLE = "Emergency Cancelled"

def build_payload(timestamp: datetime, location: Optional[LatLng]) -> EmergencyAlertPayload:
    """경보 페이로드를 생성합니다. 위치 실패 시 location은 비어 있음"""
    return EmergencyAlertPayload(timestamp=timestamp, location=location)

def fired_notice(payload: EmergencyAlertPayload) -> StatusNotice:
    """
    경보 발송 알림을 생성합니다.

    Args:
        payload: 발송된 경보 페이로드

    Returns:
        위치 첨부 여부를 명시한 상태 알림
    """
    if payload.location is not None:
        description = (f"Location: {payload.location.lat:.4f}, {payload.location.lng:.4f}"
                       f" - Authorities notified!")
    else:
        description = "Location unavailable - Authorities notified!"

    return StatusNotice(
        title=FIRED_TITLE,
        description=description,
        variant="destructive",
        timestamp=payload.timestamp,
    )

def cancelled_notice(timestamp: Optional[datetime] = None) -> StatusNotice:
    """경보 취소 알림을 생성합니다."""
    return StatusNotice(
        title=CANCELLED_TITLE,
        description="Alert has been cancelled.",
        timestamp=timestamp,
    )
