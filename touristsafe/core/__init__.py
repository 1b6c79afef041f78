"""
Core domain models and pure functions for TouristSafe.

This module contains the domain models and pure business logic
that are independent of external I/O and infrastructure concerns.
"""

from .models import (
    LatLng, SafetyZone, SafetyIncident, SafetyMetrics, TouristProfile,
    EmergencyAlertPayload, RiskTier, Severity, ProfileStatus,
)
from .risk import classify, clamp_score, tier_display
from .zones import aggregate, governing_zone, Viewport, ZonePicture
from .alerting import AlertState, AlertSnapshot, AlertReport, StatusNotice

__all__ = [
    "LatLng", "SafetyZone", "SafetyIncident", "SafetyMetrics", "TouristProfile",
    "EmergencyAlertPayload", "RiskTier", "Severity", "ProfileStatus",
    "classify", "clamp_score", "tier_display",
    "aggregate", "governing_zone", "Viewport", "ZonePicture",
    "AlertState", "AlertSnapshot", "AlertReport", "StatusNotice",
]
