"""
Clock adapters for TouristSafe.

This module provides the wall-clock implementation backed by asyncio
and a deterministic virtual clock for tests and simulations.
"""

import asyncio
import heapq
import itertools
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

class SystemClock:
    """asyncio 기반 실제 시계"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(0.0, seconds))

class ManualClock:
    """
    수동으로 진행시키는 가상 시계.

    sleep()은 advance()로 가상 시간이 마감 시각에 도달할 때까지 대기합니다.
    """

    def __init__(self, start: Optional[datetime] = None, *, settle_rounds: int = 50):
        """
        초기화합니다.

        Args:
            start: 가상 시작 시각
            settle_rounds: 시간 진행 후 다른 태스크에 양보할 횟수
        """
        self._start = start or datetime(2025, 1, 1, tzinfo=timezone.utc)
        self._elapsed = 0.0
        self._seq = itertools.count()
        self._sleepers: List[Tuple[float, int, asyncio.Future]] = []
        self.settle_rounds = settle_rounds

    @property
    def elapsed(self) -> float:
        """시작 이후 경과한 가상 시간 (초)"""
        return self._elapsed

    @property
    def pending(self) -> int:
        """대기 중인 sleep 수"""
        return sum(1 for _, _, fut in self._sleepers if not fut.done())

    def now(self) -> datetime:
        return self._start + timedelta(seconds=self._elapsed)

    async def sleep(self, seconds: float) -> None:
        if seconds <= 0:
            await asyncio.sleep(0)
            return
        fut = asyncio.get_running_loop().create_future()
        heapq.heappush(self._sleepers, (self._elapsed + seconds, next(self._seq), fut))
        await fut

    async def settle(self) -> None:
        """준비된 태스크들이 실행되도록 이벤트 루프에 양보합니다."""
        for _ in range(self.settle_rounds):
            await asyncio.sleep(0)

    async def advance(self, seconds: float) -> None:
        """
        가상 시간을 진행시킵니다.

        마감 시각 순서대로 sleep을 깨우고, 매번 다른 태스크가 반응할 기회를 줍니다.

        Args:
            seconds: 진행할 시간 (초)
        """
        target = self._elapsed + seconds
        await self.settle()
        while self._sleepers and self._sleepers[0][0] <= target:
            deadline, _, fut = heapq.heappop(self._sleepers)
            self._elapsed = max(self._elapsed, deadline)
            # 취소된 sleep은 건너뜀
            if not fut.done():
                fut.set_result(None)
            await self.settle()
        self._elapsed = target
        await self.settle()
