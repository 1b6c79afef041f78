# touristsafe/settings.py
from __future__ import annotations
from pydantic import BaseModel, Field

class StoreConfig(BaseModel):
    base_url: str = ""                        # 비어 있으면 메모리 저장소 사용
    api_key: str = ""
    timeout_sec: int = 10
    incident_limit: int = 50
    max_retries: int = 3

class AlertConfig(BaseModel):
    countdown_seconds: int = 3
    tick_interval_sec: float = 1.0
    cooldown_sec: float = 5.0
    geolocation_timeout_sec: float | None = 10.0   # None = 무제한

class ScoreConfig(BaseModel):
    refresh_interval_sec: float = 5.0
    derive_overall: bool = False
    seed: int | None = None

class GeolocationConfig(BaseModel):
    max_fix_age_sec: float = 30.0

class SessionConfig(BaseModel):
    tourist_id: str = "local-tourist"
    display_name: str = ""
    role: str | None = "tourist"

class Observability(BaseModel):
    http_port: int = 8099
    metrics_enabled: bool = True
    service_name: str = "TouristSafe"
    build_version: str = "0.1.0"
    build_date: str = "2025-01-01"
    log_level: str = "INFO"
    log_json: bool = False                    # True면 JSON 한 줄 로그

class Settings(BaseModel):
    # 하위 섹션 (기본값/팩토리로 누락 방지)
    store: StoreConfig = Field(default_factory=StoreConfig)
    alert: AlertConfig = Field(default_factory=AlertConfig)
    scores: ScoreConfig = Field(default_factory=ScoreConfig)
    geolocation: GeolocationConfig = Field(default_factory=GeolocationConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    observability: Observability = Field(default_factory=Observability)
