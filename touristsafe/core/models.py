"""
Core domain models for TouristSafe.

This module defines the zone, incident, metrics, profile and alert
models using Pydantic v2 for type safety and validation.
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

# 위험 등급 / 심각도 / 프로필 상태 타입 정의
RiskTier = Literal["low", "medium", "high"]
Severity = Literal["low", "medium", "high"]
ProfileStatus = Literal["active", "checking-out", "emergency"]

class LatLng(BaseModel):
    """위경도 좌표 모델"""
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)

class SafetyZone(BaseModel):
    """원형 안전 구역 모델"""
    id: str
    name: str
    center: LatLng
    radius_meters: float = Field(gt=0)
    safety_score: int = Field(ge=0, le=100)
    description: Optional[str] = None
    created_at: Optional[datetime] = None

class SafetyIncident(BaseModel):
    """신고된 사건 모델 (좌표가 없으면 집계 건수에만 반영)"""
    id: str
    type: str
    severity: Severity
    location: Optional[LatLng] = None
    location_name: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

class SafetyMetrics(BaseModel):
    """세션별 안전 지표 (내부는 실수, 표시 시에만 반올림)"""
    overall: float = 85.0
    location: float = 90.0
    connectivity: float = 95.0
    emergency_readiness: float = 75.0

    def rounded(self) -> dict:
        """표시용 정수 값을 반환합니다."""
        return {
            "overall": round(self.overall),
            "location": round(self.location),
            "connectivity": round(self.connectivity),
            "emergency_readiness": round(self.emergency_readiness),
        }

class TouristProfile(BaseModel):
    """관광객 프로필 모델"""
    id: str
    name: str = ""
    role: Optional[str] = None
    status: ProfileStatus = "active"

class EmergencyAlertPayload(BaseModel):
    """긴급 경보 페이로드 (코어는 생성만 하고 저장하지 않음)"""
    timestamp: datetime
    location: Optional[LatLng] = None
    type: Literal["panic_button"] = "panic_button"
    status: Literal["active"] = "active"
