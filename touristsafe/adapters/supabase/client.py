"""
Supabase REST client for TouristSafe.

This module provides the store adapter that reads safety zones and
incidents (and upserts profile roles) through the Supabase PostgREST API.
"""

import asyncio
import json
from typing import Any, Dict, List, Optional
import aiohttp
from touristsafe.core.errors import DataUnavailableError
from touristsafe.core.models import SafetyIncident, SafetyZone
from touristsafe.core.normalize import normalize_incidents, normalize_zones
from touristsafe.common.retry import retry_with_backoff
from touristsafe.observability.logging_setup import get_logger

log = get_logger("touristsafe.supabase")

# 저장소 요청 실패 예외
TRANSIENT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)

def is_transient(error: BaseException) -> bool:
    """재시도할 오류인지 판단합니다 (4xx 응답은 즉시 실패)."""
    if isinstance(error, aiohttp.ClientResponseError):
        return error.status >= 500 or error.status == 429
    return True

class SupabaseStore:
    """Supabase 안전 데이터 저장소 클라이언트"""

    def __init__(self,
                 base_url: str,
                 api_key: str,
                 timeout: int = 10,
                 max_retries: int = 3):
        """
        초기화합니다.

        Args:
            base_url: Supabase 프로젝트 URL
            api_key: Supabase anon/service 키
            timeout: 요청 타임아웃 (초)
            max_retries: 최대 재시도 횟수
        """
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout
        self.max_retries = max_retries
        self.session: Optional[aiohttp.ClientSession] = None

        log.info("Supabase 클라이언트 초기화됨", base_url=self.base_url)

    async def __aenter__(self):
        """비동기 컨텍스트 매니저 진입"""
        self.session = aiohttp.ClientSession(
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json"
            },
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """비동기 컨텍스트 매니저 종료"""
        if self.session:
            await self.session.close()
            self.session = None

    async def _make_request(self, method: str, endpoint: str, **kwargs) -> Any:
        """
        API 요청을 수행합니다.

        Args:
            method: HTTP 메서드
            endpoint: REST 엔드포인트
            **kwargs: 추가 요청 매개변수

        Returns:
            응답 JSON (본문이 없으면 None)
        """
        if not self.session:
            raise RuntimeError("세션이 초기화되지 않았습니다. async with를 사용하세요.")

        url = f"{self.base_url}/rest/v1{endpoint}"

        async def _request():
            async with self.session.request(method, url, **kwargs) as response:
                response.raise_for_status()
                body = await response.text()
                return json.loads(body) if body else None

        return await retry_with_backoff(
            _request,
            max_retries=self.max_retries,
            retry_on=TRANSIENT_ERRORS,
            retry_if=is_transient,
        )

    async def _fetch_rows(self, source: str, endpoint: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        try:
            data = await self._make_request("GET", endpoint, params=params)
        except (*TRANSIENT_ERRORS, ValueError) as e:
            log.error("저장소 조회 실패", source=source, error=str(e))
            raise DataUnavailableError(source, str(e) or type(e).__name__) from e

        if not isinstance(data, list):
            raise DataUnavailableError(source, "unexpected response shape")
        return data

    async def list_safety_zones(self) -> List[SafetyZone]:
        """
        모든 안전 구역을 가져옵니다 (safety_score 내림차순).

        Returns:
            안전 구역 목록
        """
        rows = await self._fetch_rows(
            "zones", "/safety_zones", {"select": "*", "order": "safety_score.desc"}
        )
        zones = normalize_zones(rows)
        log.info("안전 구역 목록 가져옴", count=len(zones))
        return zones

    async def list_incidents(self, limit: int) -> List[SafetyIncident]:
        """
        사건 목록을 가져옵니다.

        Args:
            limit: 최대 조회 건수

        Returns:
            사건 목록
        """
        rows = await self._fetch_rows(
            "incidents", "/safety_incidents", {"select": "*", "limit": str(limit)}
        )
        incidents = normalize_incidents(rows)
        log.info("사건 목록 가져옴", count=len(incidents))
        return incidents

    async def fetch_profile_role(self, user_id: str) -> Optional[str]:
        """
        사용자 역할을 조회합니다.

        Args:
            user_id: 사용자 ID

        Returns:
            역할 또는 None (프로필 없음)
        """
        rows = await self._fetch_rows(
            "profiles", "/profiles", {"select": "role", "user_id": f"eq.{user_id}"}
        )
        if not rows:
            return None
        return rows[0].get("role")

    async def upsert_profile_role(self,
                                  user_id: str,
                                  role: str,
                                  *,
                                  full_name: str = "",
                                  email: str = "",
                                  avatar_url: str = "") -> bool:
        """
        사용자 프로필 역할을 저장합니다 (역할 관리 협력자용).

        Args:
            user_id: 사용자 ID
            role: 역할 ("tourist" 또는 "police")
            full_name: 표시 이름
            email: 이메일
            avatar_url: 아바타 URL

        Returns:
            저장 성공 여부
        """
        try:
            await self._make_request(
                "POST",
                "/profiles",
                json={
                    "user_id": user_id,
                    "role": role,
                    "full_name": full_name or (email.split("@")[0] if email else ""),
                    "avatar_url": avatar_url,
                    "email": email,
                },
                headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
            )
            log.info("프로필 역할 저장됨", user_id=user_id, role=role)
            return True
        except TRANSIENT_ERRORS as e:
            log.error("프로필 역할 저장 실패", user_id=user_id, error=str(e))
            return False
