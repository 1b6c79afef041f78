"""
Orchestrators for TouristSafe.

This module contains the orchestrators that coordinate
the flow between ports and adapters.
"""
from .zone_aggregator import ZoneAggregator
from .score_updater import ScoreUpdater
from .alert_machine import EmergencyAlertMachine
from .session import SafetySession, SessionContext

__all__ = ["ZoneAggregator", "ScoreUpdater", "EmergencyAlertMachine",
           "SafetySession", "SessionContext"]
