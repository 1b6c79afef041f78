# touristsafe/main.py
import os, asyncio, signal
from contextlib import AsyncExitStack
import uvicorn
from touristsafe.settings import Settings
from touristsafe.observability.health import create_app
from touristsafe.observability.logging_setup import setup_logging_dev, setup_logging_json, get_logger
from touristsafe.adapters.clock import SystemClock
from touristsafe.adapters.store.memory import InMemoryStore
from touristsafe.adapters.supabase.client import SupabaseStore
from touristsafe.adapters.geolocation.reported import ReportedPositionProvider
from touristsafe.adapters.notify.feed import NoticeFeed
from touristsafe.orchestrators.session import SafetySession, SessionContext

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def _opt_float(name, default):
    raw = os.getenv(name)
    if raw is None: return default
    if raw.strip().lower() in ("", "none", "null", "off"): return None
    return float(raw)

def _opt_int(name, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "": return default
    return int(raw)

def build_settings() -> Settings:
    s = Settings()

    # 저장소
    s.store.base_url = os.getenv("SUPABASE_URL", s.store.base_url)
    s.store.api_key = os.getenv("SUPABASE_KEY", s.store.api_key)
    s.store.timeout_sec = int(os.getenv("STORE_TIMEOUT_SEC", s.store.timeout_sec))
    s.store.incident_limit = int(os.getenv("INCIDENT_LIMIT", s.store.incident_limit))

    # 경보
    s.alert.countdown_seconds = int(os.getenv("ALERT_COUNTDOWN", s.alert.countdown_seconds))
    s.alert.cooldown_sec = float(os.getenv("ALERT_COOLDOWN_SEC", s.alert.cooldown_sec))
    s.alert.geolocation_timeout_sec = _opt_float("GEOLOCATION_TIMEOUT_SEC", s.alert.geolocation_timeout_sec)

    # 안전 지표
    s.scores.refresh_interval_sec = float(os.getenv("SCORE_REFRESH_SEC", s.scores.refresh_interval_sec))
    s.scores.derive_overall = _b("SCORE_DERIVE_OVERALL", s.scores.derive_overall)
    s.scores.seed = _opt_int("SCORE_SEED", s.scores.seed)

    # 세션
    s.session.tourist_id = os.getenv("TOURIST_ID", s.session.tourist_id)
    s.session.display_name = os.getenv("TOURIST_NAME", s.session.display_name)
    s.session.role = os.getenv("TOURIST_ROLE", s.session.role)

    # 관측성
    s.observability.metrics_enabled = _b("METRICS_ENABLED", s.observability.metrics_enabled)
    s.observability.http_port = int(os.getenv("METRICS_PORT", s.observability.http_port))
    s.observability.log_level = os.getenv("LOG_LEVEL", s.observability.log_level)
    s.observability.log_json = _b("LOG_JSON", s.observability.log_json)

    return s

async def main():
    s = build_settings()
    if s.observability.log_json: setup_logging_json(s.observability.log_level)
    else: setup_logging_dev(s.observability.log_level)
    log = get_logger("touristsafe.main")
    log.info("설정 로드 완료")

    clock = SystemClock()

    async with AsyncExitStack() as stack:
        if s.store.base_url:
            store = await stack.enter_async_context(SupabaseStore(
                s.store.base_url,
                s.store.api_key,
                timeout=s.store.timeout_sec,
                max_retries=s.store.max_retries,
            ))
            log.info("Supabase 저장소 사용", base_url=s.store.base_url)
        else:
            store = InMemoryStore()
            log.warning("SUPABASE_URL 미설정, 메모리 저장소로 실행")

        session = SafetySession(
            SessionContext(
                user_id=s.session.tourist_id,
                role=s.session.role,
                display_name=s.session.display_name,
            ),
            store=store,
            geolocation=ReportedPositionProvider(clock, max_fix_age_sec=s.geolocation.max_fix_age_sec),
            notifier=NoticeFeed(),
            clock=clock,
            settings=s,
        )

        app = create_app(s, session)
        server = uvicorn.Server(
            uvicorn.Config(app, host="0.0.0.0", port=s.observability.http_port, log_level="info")
        )
        http_task = asyncio.create_task(server.serve())
        log.info("HTTP 서버 시작됨", port=s.observability.http_port)

        stop = asyncio.Future()
        try:
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGTERM, signal.SIGINT):
                try: loop.add_signal_handler(sig, lambda: (not stop.done()) and stop.set_result(True))
                except NotImplementedError: pass
        except RuntimeError: pass

        await asyncio.wait({stop, http_task}, return_when=asyncio.FIRST_COMPLETED)
        # lifespan 종료 시 세션 태스크도 정리됨
        server.should_exit = True
        await http_task
        log.info("서비스 종료")

if __name__ == "__main__":
    asyncio.run(main())
