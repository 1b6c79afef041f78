"""
HTTP endpoints for TouristSafe.

This module implements health, readiness, metrics, and info endpoints
for operational visibility, plus the session endpoints the tourist
client uses: dashboard, risk map, panic button and device location.
"""

from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import Response, JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from pydantic import ValidationError
import time
from touristsafe.settings import Settings
from touristsafe.core.errors import ProfileTransitionError
from touristsafe.core.models import LatLng
from touristsafe.core.zones import Viewport
from touristsafe.adapters.geolocation import ReportedPositionProvider
from touristsafe.adapters.notify import NoticeFeed
from touristsafe.features.dashboard import Dashboard, build_score_card
from touristsafe.features.map_geojson import to_feature_collection
from touristsafe.orchestrators.session import SafetySession
from touristsafe.observability import metrics as m
from touristsafe.observability.logging_setup import get_logger

log = get_logger("touristsafe.http")

def create_app(settings: Settings, session: Optional[SafetySession] = None) -> FastAPI:
    """
    FastAPI 애플리케이션을 생성합니다.

    Args:
        settings: 서비스 설정
        session: 안전 세션 (앱 수명 주기에 맞춰 시작/종료). 없으면 세션 엔드포인트는 503

    Returns:
        FastAPI 앱
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if session is None:
            yield
            return
        async with session:
            yield

    app = FastAPI(
        title=settings.observability.service_name,
        version=settings.observability.build_version,
        description="TouristSafe Risk Aggregation & Emergency Alert Service",
        lifespan=lifespan,
    )

    start_time = time.time()

    def _session() -> SafetySession:
        if session is None:
            raise HTTPException(status_code=503, detail="No active session")
        return session

    def _point(lat: Optional[float], lng: Optional[float]) -> Optional[LatLng]:
        if lat is None and lng is None:
            return None
        if lat is None or lng is None:
            raise HTTPException(status_code=400, detail="lat and lng must be given together")
        try:
            return LatLng(lat=lat, lng=lng)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=f"Invalid coordinates: {e.errors()[0]['msg']}")

    def _current_point(s: SafetySession, lat: Optional[float], lng: Optional[float]) -> Optional[LatLng]:
        point = _point(lat, lng)
        if point is None and isinstance(s.geolocation, ReportedPositionProvider):
            point = s.geolocation.last_fix
        return point

    @app.get("/health")
    async def health():
        """헬스 체크 엔드포인트"""
        return JSONResponse({
            "status": "ok",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/ready")
    async def ready():
        """레디니스 체크 엔드포인트"""
        running = session is not None and session.alert.running and session.scores.running
        return JSONResponse({
            "status": "ready" if running else "not_ready",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        }, status_code=200 if running else 503)

    @app.get("/metrics")
    async def metrics():
        """Prometheus 메트릭 엔드포인트"""
        if not settings.observability.metrics_enabled:
            raise HTTPException(status_code=503, detail="Metrics disabled")

        m.uptime_seconds.set(time.time() - start_time)
        return Response(
            generate_latest(),
            media_type=CONTENT_TYPE_LATEST
        )

    @app.get("/info")
    async def info():
        """서비스 정보 엔드포인트"""
        uptime = time.time() - start_time
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "build_date": settings.observability.build_date,
            "uptime_seconds": int(uptime),
            "metrics_enabled": settings.observability.metrics_enabled,
            "log_level": settings.observability.log_level
        })

    @app.get("/dashboard")
    async def dashboard(lat: Optional[float] = None, lng: Optional[float] = None):
        """점수 카드, 프로필, 경보 상태를 반환합니다."""
        s = _session()
        picture = await s.zone_picture(point=_current_point(s, lat, lng))
        card = build_score_card(s.scores.metrics, s.scores.previous, picture)
        return Dashboard(profile=s.profile, scores=card, alert=s.alert.snapshot()).model_dump(mode="json")

    @app.get("/zones")
    async def zones(lat: Optional[float] = None,
                    lng: Optional[float] = None,
                    south: Optional[float] = None,
                    west: Optional[float] = None,
                    north: Optional[float] = None,
                    east: Optional[float] = None,
                    format: str = Query(default="json", pattern="^(json|geojson)$")):
        """위험 지도를 반환합니다 (bbox 지정 시 표시 영역으로 제한)."""
        s = _session()
        bbox = (south, west, north, east)
        viewport = None
        if any(v is not None for v in bbox):
            if any(v is None for v in bbox):
                raise HTTPException(status_code=400, detail="south, west, north and east must be given together")
            try:
                viewport = Viewport(south=south, west=west, north=north, east=east)
            except ValidationError as e:
                raise HTTPException(status_code=400, detail=f"Invalid bbox: {e.errors()[0]['msg']}")

        picture = await s.zone_picture(point=_point(lat, lng), viewport=viewport)
        if format == "geojson":
            return to_feature_collection(picture)
        return picture.model_dump(mode="json")

    @app.get("/alert")
    async def alert_state():
        """경보 머신 상태를 반환합니다."""
        return _session().alert.snapshot().model_dump(mode="json")

    @app.post("/alert/press")
    async def alert_press():
        """패닉 버튼을 누릅니다."""
        snap = await _session().press_panic()
        return snap.model_dump(mode="json")

    @app.post("/alert/cancel")
    async def alert_cancel():
        """카운트다운 중인 경보를 취소합니다."""
        snap = await _session().cancel_panic()
        return snap.model_dump(mode="json")

    @app.post("/session/location")
    async def report_location(position: LatLng):
        """기기 위치를 보고합니다."""
        s = _session()
        if not isinstance(s.geolocation, ReportedPositionProvider):
            raise HTTPException(status_code=409, detail="Location is not device-reported")
        fix = s.geolocation.report(position.lat, position.lng)
        return {"ok": True, "location": fix.model_dump()}

    @app.post("/session/location/deny")
    async def deny_location():
        """위치 권한 거부를 보고합니다."""
        s = _session()
        if not isinstance(s.geolocation, ReportedPositionProvider):
            raise HTTPException(status_code=409, detail="Location is not device-reported")
        s.geolocation.deny()
        return {"ok": True, "permission_denied": True}

    @app.post("/session/checkout")
    async def checkout():
        """체크아웃을 시작합니다."""
        s = _session()
        try:
            profile = s.check_out()
        except ProfileTransitionError as e:
            log.warning("체크아웃 거부", user_id=s.profile.id, error=str(e))
            raise HTTPException(status_code=409, detail=str(e))
        return profile.model_dump(mode="json")

    @app.get("/session/notices")
    async def notices(limit: int = Query(default=20, ge=1, le=100)):
        """최근 상태 알림을 최신순으로 반환합니다."""
        s = _session()
        if not isinstance(s.notifier, NoticeFeed):
            raise HTTPException(status_code=409, detail="Notices are delivered externally")
        return {
            "notices": [n.model_dump(mode="json") for n in s.notifier.recent_notices(limit)],
            "alerts": [p.model_dump(mode="json") for p in s.notifier.recent_payloads(limit)],
        }

    @app.get("/")
    async def root():
        """루트 엔드포인트"""
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "endpoints": {
                "health": "/health",
                "ready": "/ready",
                "metrics": "/metrics",
                "info": "/info",
                "dashboard": "/dashboard",
                "zones": "/zones",
                "alert": "/alert",
                "alert_press": "/alert/press",
                "alert_cancel": "/alert/cancel",
                "session_location": "/session/location",
                "session_checkout": "/session/checkout",
                "session_notices": "/session/notices"
            }
        })

    return app
