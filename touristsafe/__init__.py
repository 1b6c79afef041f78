"""
TouristSafe: safety risk aggregation and emergency alert engine.
"""

__version__ = "0.1.0"
