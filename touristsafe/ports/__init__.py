"""
Port interfaces for TouristSafe hexagonal architecture.

This module defines the port interfaces (Protocols) that define
the contracts between the core domain and external collaborators.
"""

from .store import SafetyStorePort
from .geolocation import GeolocationPort
from .notify import AlertNotifyPort
from .clock import ClockPort

__all__ = ["SafetyStorePort", "GeolocationPort", "AlertNotifyPort", "ClockPort"]
