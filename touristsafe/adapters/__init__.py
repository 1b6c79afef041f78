"""
Adapters for TouristSafe hexagonal architecture.

This module contains the concrete implementations of port interfaces
that handle external I/O and infrastructure concerns.
"""

from .clock import SystemClock, ManualClock
from .store import InMemoryStore
from .supabase import SupabaseStore
from .geolocation import ReportedPositionProvider
from .notify import NoticeFeed

__all__ = ["SystemClock", "ManualClock", "InMemoryStore", "SupabaseStore",
           "ReportedPositionProvider", "NoticeFeed"]
