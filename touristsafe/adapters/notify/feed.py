"""
In-memory notification feed for TouristSafe.

This module implements the notification port as a bounded feed that
the presentation layer polls (toast/banner rendering happens there).
"""

from collections import deque
from typing import Deque, List
from touristsafe.core.alerting import StatusNotice
from touristsafe.core.models import EmergencyAlertPayload
from touristsafe.observability.logging_setup import get_logger

log = get_logger("touristsafe.notify")

class NoticeFeed:
    """경보 페이로드와 상태 알림을 보관하는 피드"""

    def __init__(self, maxlen: int = 100):
        """
        초기화합니다.

        Args:
            maxlen: 보관할 최대 항목 수
        """
        self.payloads: Deque[EmergencyAlertPayload] = deque(maxlen=maxlen)
        self.notices: Deque[StatusNotice] = deque(maxlen=maxlen)

    async def notify(self, payload: EmergencyAlertPayload) -> None:
        self.payloads.append(payload)
        log.warning("긴급 경보 전달됨",
                    timestamp=payload.timestamp.isoformat(),
                    location=payload.location.model_dump() if payload.location else None)

    async def announce(self, notice: StatusNotice) -> None:
        self.notices.append(notice)
        log.info("상태 알림", title=notice.title, description=notice.description)

    def recent_notices(self, limit: int = 20) -> List[StatusNotice]:
        """최근 상태 알림을 최신순으로 반환합니다."""
        return list(reversed(self.notices))[:limit]

    def recent_payloads(self, limit: int = 20) -> List[EmergencyAlertPayload]:
        """최근 경보 페이로드를 최신순으로 반환합니다."""
        return list(reversed(self.payloads))[:limit]
