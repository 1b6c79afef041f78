"""
Clock Adapter 단위 테스트

이 모듈은 실제 시계와 가상 시계를 테스트합니다.
"""

import asyncio
from datetime import datetime, timedelta, timezone

from touristsafe.adapters.clock import ManualClock, SystemClock


class TestSystemClock:
    """실제 시계 테스트"""

    def test_now_is_utc(self):
        """현재 시각은 UTC"""
        assert SystemClock().now().tzinfo == timezone.utc

    async def test_sleep_zero(self):
        """0초 sleep은 즉시 반환"""
        await SystemClock().sleep(0)


class TestManualClock:
    """가상 시계 테스트"""

    async def test_now_advances(self, manual_clock):
        """advance만큼 가상 시간 진행"""
        start = manual_clock.now()
        await manual_clock.advance(2.5)
        assert manual_clock.now() - start == timedelta(seconds=2.5)
        assert manual_clock.elapsed == 2.5

    async def test_sleep_wakes_at_deadline(self, manual_clock):
        """마감 시각 도달 시 sleep 종료"""
        done = []

        async def sleeper():
            await manual_clock.sleep(3)
            done.append(manual_clock.elapsed)

        task = asyncio.create_task(sleeper())
        await manual_clock.advance(2)
        assert done == []
        await manual_clock.advance(1)
        assert done == [3]
        await task

    async def test_sleepers_wake_in_order(self, manual_clock):
        """여러 sleep은 마감 시각 순서대로 깨어남"""
        order = []

        async def sleeper(name, seconds):
            await manual_clock.sleep(seconds)
            order.append((name, manual_clock.elapsed))

        tasks = [asyncio.create_task(sleeper("b", 2)), asyncio.create_task(sleeper("a", 1))]
        await manual_clock.advance(5)
        assert order == [("a", 1), ("b", 2)]
        assert manual_clock.elapsed == 5
        await asyncio.gather(*tasks)

    async def test_cancelled_sleep_is_skipped(self, manual_clock):
        """취소된 sleep은 건너뜀"""
        task = asyncio.create_task(manual_clock.sleep(1))
        await manual_clock.settle()
        assert manual_clock.pending == 1
        task.cancel()
        await manual_clock.settle()
        assert manual_clock.pending == 0
        await manual_clock.advance(2)
        assert task.cancelled()

    async def test_custom_start(self):
        """시작 시각 지정"""
        start = datetime(2030, 6, 1, tzinfo=timezone.utc)
        assert ManualClock(start).now() == start
