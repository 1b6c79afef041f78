"""
Safety session for TouristSafe.

A session binds one tourist (identity and role) to the collaborators
it uses, and owns the zone aggregator, the live score updater and the
emergency alert machine for that tourist. Core components receive the
session context explicitly instead of reading ambient globals.
"""

import random
from typing import Optional
from pydantic import BaseModel
from touristsafe.core.alerting import AlertSnapshot, AlertState
from touristsafe.core.errors import ProfileTransitionError
from touristsafe.core.models import LatLng, TouristProfile
from touristsafe.core.scoring import RandomWalkTelemetry
from touristsafe.core.zones import Viewport, ZonePicture
from touristsafe.ports.clock import ClockPort
from touristsafe.ports.geolocation import GeolocationPort
from touristsafe.ports.notify import AlertNotifyPort
from touristsafe.ports.store import SafetyStorePort
from touristsafe.settings import Settings
from touristsafe.orchestrators.alert_machine import EmergencyAlertMachine
from touristsafe.orchestrators.score_updater import ScoreUpdater
from touristsafe.orchestrators.zone_aggregator import ZoneAggregator
from touristsafe.observability.logging_setup import get_logger

log = get_logger("touristsafe.session")

class SessionContext(BaseModel):
    """세션 식별 정보 (사용자 ID, 역할, 표시 이름)"""
    user_id: str
    role: Optional[str] = None
    display_name: str = ""

class SafetySession:
    """관광객 한 명의 안전 세션"""

    def __init__(self,
                 context: SessionContext,
                 store: SafetyStorePort,
                 geolocation: GeolocationPort,
                 notifier: AlertNotifyPort,
                 clock: ClockPort,
                 settings: Optional[Settings] = None):
        """
        초기화합니다.

        Args:
            context: 세션 식별 정보
            store: 안전 데이터 저장소
            geolocation: 위치 제공자
            notifier: 경보 알림 협력자
            clock: 시계
            settings: 설정 (기본값 사용 시 생략)
        """
        s = settings or Settings()
        self.context = context
        self.geolocation = geolocation
        self.notifier = notifier
        self.clock = clock
        self.profile = TouristProfile(
            id=context.user_id,
            name=context.display_name,
            role=context.role,
        )

        self.zones = ZoneAggregator(
            store, clock, incident_limit=s.store.incident_limit
        )
        self.scores = ScoreUpdater(
            clock,
            RandomWalkTelemetry(
                random.Random(s.scores.seed),
                derive_overall=s.scores.derive_overall,
            ),
            interval_sec=s.scores.refresh_interval_sec,
        )
        self.alert = EmergencyAlertMachine(
            geolocation,
            notifier,
            clock,
            countdown_seconds=s.alert.countdown_seconds,
            tick_interval_sec=s.alert.tick_interval_sec,
            cooldown_sec=s.alert.cooldown_sec,
            geolocation_timeout_sec=s.alert.geolocation_timeout_sec,
        )
        self.alert.add_listener(self._on_alert_transition)

    # ---- 수명 주기 ----

    async def start(self) -> None:
        """지표 갱신과 경보 머신을 시작합니다."""
        await self.scores.start()
        await self.alert.start()
        log.info("안전 세션 시작", user_id=self.context.user_id, role=self.context.role)

    async def stop(self) -> None:
        """세션의 모든 태스크를 중지합니다."""
        await self.alert.stop()
        await self.scores.stop()
        log.info("안전 세션 종료", user_id=self.context.user_id)

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()

    # ---- 조회 / 명령 ----

    async def zone_picture(self,
                           point: Optional[LatLng] = None,
                           viewport: Optional[Viewport] = None) -> ZonePicture:
        """위험 지도를 조회합니다."""
        return await self.zones.load(point=point, viewport=viewport)

    async def press_panic(self) -> AlertSnapshot:
        """패닉 버튼을 누릅니다."""
        return await self.alert.press()

    async def cancel_panic(self) -> AlertSnapshot:
        """카운트다운 중인 경보를 취소합니다."""
        return await self.alert.cancel()

    def check_out(self) -> TouristProfile:
        """
        체크아웃을 시작합니다.

        Returns:
            갱신된 프로필

        Raises:
            ProfileTransitionError: 프로필이 active 상태가 아닌 경우
        """
        if self.profile.status != "active":
            raise ProfileTransitionError(
                f"cannot check out from status '{self.profile.status}'"
            )
        self._set_status("checking-out")
        return self.profile

    def _set_status(self, status: str) -> None:
        old = self.profile.status
        self.profile = self.profile.model_copy(update={"status": status})
        log.info("프로필 상태 전이", user_id=self.profile.id, old=old, new=status)

    def _on_alert_transition(self, old: AlertState, new: AlertState, snapshot: AlertSnapshot) -> None:
        if new is AlertState.FIRED and self.profile.status == "active":
            self._set_status("emergency")
        elif new is AlertState.IDLE and self.profile.status == "emergency":
            self._set_status("active")
