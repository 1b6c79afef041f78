"""
Live safety score updater for TouristSafe.

This module owns the session's SafetyMetrics and refreshes them on a
fixed cadence from a telemetry source. The refresh task is scoped to
the updater's async context and is cancelled on teardown.
"""

import asyncio
from typing import Optional
from touristsafe.core.models import SafetyMetrics
from touristsafe.core.scoring import METRIC_BANDS, RandomWalkTelemetry, TelemetrySource, clamp_metrics
from touristsafe.ports.clock import ClockPort
from touristsafe.observability import metrics
from touristsafe.observability.logging_setup import get_logger

log = get_logger("touristsafe.scores")

DEFAULT_REFRESH_INTERVAL_SEC = 5.0

class ScoreUpdater:
    """안전 지표 주기 갱신기 (지표의 유일한 writer)"""

    def __init__(self,
                 clock: ClockPort,
                 telemetry: Optional[TelemetrySource] = None,
                 *,
                 interval_sec: float = DEFAULT_REFRESH_INTERVAL_SEC,
                 initial: Optional[SafetyMetrics] = None):
        """
        초기화합니다.

        Args:
            clock: 시계
            telemetry: 지표 공급원 (기본: 랜덤 워크)
            interval_sec: 갱신 주기 (초)
            initial: 초기 지표
        """
        if interval_sec <= 0:
            raise ValueError("interval_sec must be positive")
        self.clock = clock
        self.telemetry = telemetry or RandomWalkTelemetry()
        self.interval_sec = interval_sec
        self._metrics = clamp_metrics(initial or SafetyMetrics())
        self._previous: Optional[SafetyMetrics] = None
        self.ticks = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def metrics(self) -> SafetyMetrics:
        """현재 지표"""
        return self._metrics

    @property
    def previous(self) -> Optional[SafetyMetrics]:
        """직전 tick의 지표"""
        return self._previous

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self) -> SafetyMetrics:
        """
        지표를 한 번 갱신합니다.

        공급원이 실패하면 이전 값을 유지하고, 결과는 항상 밴드로 제한합니다.

        Returns:
            갱신된 지표
        """
        try:
            nxt = self.telemetry.next_metrics(self._metrics)
        except Exception as e:
            log.error("지표 공급원 오류, 이전 값 유지", error=str(e))
            nxt = self._metrics

        self._previous = self._metrics
        self._metrics = clamp_metrics(nxt)
        self.ticks += 1

        metrics.score_ticks.inc()
        for name in METRIC_BANDS:
            metrics.safety_score.labels(metric=name).set(getattr(self._metrics, name))

        return self._metrics

    async def _run(self) -> None:
        while True:
            await self.clock.sleep(self.interval_sec)
            self.tick()

    async def start(self) -> None:
        """주기 갱신 태스크를 시작합니다."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        log.info("안전 지표 갱신 시작", interval_sec=self.interval_sec)

    async def stop(self) -> None:
        """주기 갱신 태스크를 중지합니다."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        log.info("안전 지표 갱신 중지", ticks=self.ticks)

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
