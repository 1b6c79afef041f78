"""
Metrics definitions for TouristSafe.

This module defines Prometheus metrics for monitoring zone
aggregation, the live safety score and the panic alert cycle.
"""

from prometheus_client import Counter, Histogram, Gauge

# 카운터 메트릭
panic_presses = Counter(
    "panic_presses_total",
    "Panic button presses by outcome",
    ["outcome"]
)

alerts_cancelled = Counter(
    "alerts_cancelled_total",
    "Alerts cancelled during countdown"
)

alerts_fired = Counter(
    "alerts_fired_total",
    "Emergency alerts fired",
    ["location"]
)

notify_failures = Counter(
    "alert_notify_failures_total",
    "Notification collaborator failures",
    ["kind"]
)

zone_fetch_failures = Counter(
    "zone_fetch_failures_total",
    "Store fetch failures during zone aggregation",
    ["source"]
)

score_ticks = Counter(
    "score_ticks_total",
    "Safety score refresh ticks"
)

# 히스토그램 메트릭
geolocation_seconds = Histogram(
    "geolocation_duration_seconds",
    "Time spent resolving the alert location",
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0]
)

zone_fetch_seconds = Histogram(
    "zone_fetch_duration_seconds",
    "Time spent loading zones and incidents",
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0]
)

# 게이지 메트릭
safety_score = Gauge(
    "safety_score",
    "Current safety sub-score",
    ["metric"]
)

uptime_seconds = Gauge(
    "uptime_seconds",
    "Service uptime in seconds"
)
