"""
Emergency alert state machine for TouristSafe.

This module implements the panic-button cycle:

    IDLE -> ARMED(countdown) -> {cancel -> IDLE, fire -> FIRED -> COOLDOWN -> IDLE}

A single runner task owns every state transition. User commands,
countdown ticks, geolocation results and cooldown expiry all arrive
through one inbox queue, tagged with the alert cycle they belong to,
so a cancel and the tick that would fire can never both take effect.
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Optional, Set
from touristsafe.core.alerting import (
    AlertReport, AlertSnapshot, AlertState, StatusNotice,
    build_payload, cancelled_notice, fired_notice,
)
from touristsafe.core.errors import GeolocationError, GeolocationTimeoutError, PositionUnavailableError
from touristsafe.core.models import EmergencyAlertPayload, LatLng
from touristsafe.ports.clock import ClockPort
from touristsafe.ports.geolocation import GeolocationPort
from touristsafe.ports.notify import AlertNotifyPort
from touristsafe.observability import metrics
from touristsafe.observability.logging_setup import get_logger

log = get_logger("touristsafe.alert")

TransitionListener = Callable[[AlertState, AlertState, AlertSnapshot], None]

@dataclass
class _Command:
    kind: str
    cycle: int = 0
    data: Any = None
    reply: Optional[asyncio.Future] = None

class EmergencyAlertMachine:
    """패닉 버튼 상태 머신 (runner 태스크가 유일한 writer)"""

    def __init__(self,
                 geolocation: GeolocationPort,
                 notifier: AlertNotifyPort,
                 clock: ClockPort,
                 *,
                 countdown_seconds: int = 3,
                 tick_interval_sec: float = 1.0,
                 cooldown_sec: float = 5.0,
                 geolocation_timeout_sec: Optional[float] = None,
                 delivery_grace_sec: float = 2.0):
        """
        초기화합니다.

        Args:
            geolocation: 위치 제공자 포트
            notifier: 경보 알림 포트
            clock: 시계
            countdown_seconds: 카운트다운 시작 값 (tick 수)
            tick_interval_sec: 카운트다운 tick 간격 (초)
            cooldown_sec: 발송 후 재무장 금지 시간 (초)
            geolocation_timeout_sec: 위치 조회 제한 시간 (None이면 무제한)
            delivery_grace_sec: 종료 시 진행 중인 알림 전달을 기다리는 시간 (초)
        """
        if countdown_seconds < 1:
            raise ValueError("countdown_seconds must be at least 1")
        if tick_interval_sec <= 0:
            raise ValueError("tick_interval_sec must be positive")
        if cooldown_sec < 0:
            raise ValueError("cooldown_sec must not be negative")
        if geolocation_timeout_sec is not None and geolocation_timeout_sec <= 0:
            raise ValueError("geolocation_timeout_sec must be positive or None")

        self.geolocation = geolocation
        self.notifier = notifier
        self.clock = clock
        self.countdown_seconds = countdown_seconds
        self.tick_interval_sec = tick_interval_sec
        self.cooldown_sec = cooldown_sec
        self.geolocation_timeout_sec = geolocation_timeout_sec
        self.delivery_grace_sec = delivery_grace_sec

        self._state = AlertState.IDLE
        self._countdown = 0
        self._cycle = 0
        self._fired_at: Optional[datetime] = None
        self.last_report: Optional[AlertReport] = None

        self._inbox: asyncio.Queue = asyncio.Queue()
        self._runner: Optional[asyncio.Task] = None
        self._timer: Optional[asyncio.Task] = None
        self._locator: Optional[asyncio.Task] = None
        self._deliveries: Set[asyncio.Task] = set()
        self._listeners: List[TransitionListener] = []

    # ---- 조회 ----

    @property
    def state(self) -> AlertState:
        return self._state

    @property
    def countdown(self) -> int:
        return self._countdown

    @property
    def cycle(self) -> int:
        return self._cycle

    @property
    def running(self) -> bool:
        return self._runner is not None and not self._runner.done()

    def snapshot(self) -> AlertSnapshot:
        """현재 상태 스냅샷을 반환합니다."""
        return AlertSnapshot(
            state=self._state,
            countdown=self._countdown,
            cycle=self._cycle,
            last_report=self.last_report,
        )

    def add_listener(self, listener: TransitionListener) -> None:
        """상태 전이 리스너를 등록합니다 (runner 태스크에서 동기 호출)."""
        self._listeners.append(listener)

    # ---- 수명 주기 ----

    async def start(self) -> None:
        """runner 태스크를 시작합니다."""
        if self.running:
            return
        self._runner = asyncio.create_task(self._run())
        log.info("경보 머신 시작됨",
                 countdown=self.countdown_seconds,
                 cooldown_sec=self.cooldown_sec,
                 geolocation_timeout_sec=self.geolocation_timeout_sec)

    async def stop(self) -> None:
        """
        runner와 타이머를 중지합니다.

        진행 중인 주기(ARMED/FIRED/COOLDOWN)는 폐기되어 IDLE로 돌아가며,
        진행 중인 알림 전달은 잠시 기다립니다.
        """
        helpers = [t for t in (self._timer, self._locator) if t is not None]
        for task in helpers:
            task.cancel()
        await asyncio.gather(*helpers, return_exceptions=True)
        self._timer = None
        self._locator = None

        if self._runner is not None:
            self._runner.cancel()
            try:
                await self._runner
            except asyncio.CancelledError:
                pass
            self._runner = None

        # 응답을 기다리는 명령 정리
        while not self._inbox.empty():
            cmd = self._inbox.get_nowait()
            if cmd.reply is not None and not cmd.reply.done():
                cmd.reply.set_exception(RuntimeError("alert machine stopped"))

        # 타이머/위치 조회가 사라졌으므로 진행 중인 주기는 폐기하고 IDLE로 복귀
        if self._state is not AlertState.IDLE:
            log.warning("진행 중인 경보 주기 폐기", cycle=self._cycle, state=self._state.value)
            self._cycle += 1
            self._countdown = 0
            self._fired_at = None
            self._transition(AlertState.IDLE)

        if self._deliveries:
            _, pending = await asyncio.wait(set(self._deliveries), timeout=self.delivery_grace_sec)
            for task in pending:
                task.cancel()

        log.info("경보 머신 중지됨", state=self._state.value)

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()

    # ---- 사용자 명령 ----

    async def press(self) -> AlertSnapshot:
        """
        패닉 버튼을 누릅니다. IDLE이 아니면 무시됩니다.

        Returns:
            명령 처리 후 스냅샷
        """
        return await self._submit("press")

    async def cancel(self) -> AlertSnapshot:
        """
        카운트다운 중인 경보를 취소합니다. ARMED가 아니면 무시됩니다.

        Returns:
            명령 처리 후 스냅샷
        """
        return await self._submit("cancel")

    async def _submit(self, kind: str) -> AlertSnapshot:
        if not self.running:
            raise RuntimeError("alert machine is not running")
        reply = asyncio.get_running_loop().create_future()
        self._inbox.put_nowait(_Command(kind, reply=reply))
        return await reply

    # ---- runner ----

    async def _run(self) -> None:
        while True:
            cmd = await self._inbox.get()
            try:
                self._dispatch(cmd)
            except Exception as e:
                log.exception("경보 명령 처리 오류", kind=cmd.kind, error=str(e))
            finally:
                if cmd.reply is not None and not cmd.reply.done():
                    cmd.reply.set_result(self.snapshot())

    def _dispatch(self, cmd: _Command) -> None:
        handler = {
            "press": self._on_press,
            "cancel": self._on_cancel,
            "tick": self._on_tick,
            "located": self._on_located,
            "cooldown_elapsed": self._on_cooldown_elapsed,
        }[cmd.kind]
        handler(cmd)

    def _on_press(self, cmd: _Command) -> None:
        if self._state is not AlertState.IDLE:
            metrics.panic_presses.labels(outcome="ignored").inc()
            log.debug("경보 진행 중, 버튼 입력 무시", state=self._state.value)
            return

        metrics.panic_presses.labels(outcome="armed").inc()
        self._cycle += 1
        self._countdown = self.countdown_seconds
        self._fired_at = None
        self._transition(AlertState.ARMED)
        self._timer = asyncio.create_task(self._countdown_ticks(self._cycle))

    def _on_cancel(self, cmd: _Command) -> None:
        if self._state is not AlertState.ARMED:
            log.debug("취소할 카운트다운 없음", state=self._state.value)
            return

        self._cancel_timer()
        self._countdown = 0
        metrics.alerts_cancelled.inc()
        self._transition(AlertState.IDLE)
        self._spawn_delivery(self._announce(cancelled_notice(self.clock.now())))

    def _on_tick(self, cmd: _Command) -> None:
        if cmd.cycle != self._cycle or self._state is not AlertState.ARMED:
            log.debug("지난 주기의 tick 무시", cycle=cmd.cycle)
            return

        self._countdown -= 1
        if self._countdown > 0:
            log.debug("카운트다운", remaining=self._countdown)
            return

        self._countdown = 0
        self._cancel_timer()
        self._fired_at = self.clock.now()
        self._transition(AlertState.FIRED)
        self._locator = asyncio.create_task(self._locate(self._cycle))

    def _on_located(self, cmd: _Command) -> None:
        if cmd.cycle != self._cycle or self._state is not AlertState.FIRED:
            log.debug("지난 주기의 위치 결과 무시", cycle=cmd.cycle)
            return

        self._locator = None
        result = cmd.data
        location: Optional[LatLng] = result if isinstance(result, LatLng) else None
        location_error = None
        if location is None:
            location_error = getattr(result, "code", "unavailable")

        payload = build_payload(self._fired_at or self.clock.now(), location)
        notice = fired_notice(payload)
        self.last_report = AlertReport(
            cycle=self._cycle,
            location_attached=location is not None,
            location_error=location_error,
            payload=payload,
            notice=notice,
        )

        metrics.alerts_fired.labels(location="attached" if location else "unavailable").inc()
        log.warning("긴급 경보 발송",
                    cycle=self._cycle,
                    location_attached=location is not None,
                    location_error=location_error)

        self._spawn_delivery(self._deliver(payload, notice))
        self._transition(AlertState.COOLDOWN)
        self._timer = asyncio.create_task(self._cooldown(self._cycle))

    def _on_cooldown_elapsed(self, cmd: _Command) -> None:
        if cmd.cycle != self._cycle or self._state is not AlertState.COOLDOWN:
            return
        self._timer = None
        self._transition(AlertState.IDLE)

    def _transition(self, new: AlertState) -> None:
        old = self._state
        self._state = new
        log.info("경보 상태 전이", cycle=self._cycle, old=old.value, new=new.value)

        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(old, new, snap)
            except Exception as e:
                log.error("상태 전이 리스너 오류", error=str(e))

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    # ---- 보조 태스크 (inbox로만 결과 전달) ----

    async def _countdown_ticks(self, cycle: int) -> None:
        while True:
            await self.clock.sleep(self.tick_interval_sec)
            self._inbox.put_nowait(_Command("tick", cycle=cycle))

    async def _cooldown(self, cycle: int) -> None:
        await self.clock.sleep(self.cooldown_sec)
        self._inbox.put_nowait(_Command("cooldown_elapsed", cycle=cycle))

    async def _locate(self, cycle: int) -> None:
        t0 = time.perf_counter()
        try:
            result: Any = await self._fetch_position()
        except GeolocationError as e:
            result = e
        except Exception as e:
            # 제공자 오류도 위치 없음으로 처리 (경보는 계속 진행)
            log.error("위치 제공자 오류", error=str(e))
            result = PositionUnavailableError(str(e) or type(e).__name__)
        metrics.geolocation_seconds.observe(time.perf_counter() - t0)

        if isinstance(result, GeolocationError):
            log.warning("경보 위치 확인 실패", cycle=cycle, code=result.code)
        self._inbox.put_nowait(_Command("located", cycle=cycle, data=result))

    async def _fetch_position(self) -> LatLng:
        if self.geolocation_timeout_sec is None:
            return await self.geolocation.get_current_position()

        fetch = asyncio.ensure_future(self.geolocation.get_current_position())
        timer = asyncio.ensure_future(self.clock.sleep(self.geolocation_timeout_sec))
        try:
            done, _ = await asyncio.wait({fetch, timer}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            timer.cancel()
            if not fetch.done():
                fetch.cancel()

        if fetch in done:
            return fetch.result()
        raise GeolocationTimeoutError(f"no position within {self.geolocation_timeout_sec}s")

    def _spawn_delivery(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._deliveries.add(task)
        task.add_done_callback(self._deliveries.discard)

    async def _deliver(self, payload: EmergencyAlertPayload, notice: StatusNotice) -> None:
        # 1회 전달, 재시도 없음
        try:
            await self.notifier.notify(payload)
        except Exception as e:
            metrics.notify_failures.labels(kind="payload").inc()
            log.error("경보 페이로드 전달 실패", error=str(e))
        await self._announce(notice)

    async def _announce(self, notice: StatusNotice) -> None:
        try:
            await self.notifier.announce(notice)
        except Exception as e:
            metrics.notify_failures.labels(kind="notice").inc()
            log.error("상태 알림 전달 실패", error=str(e))
