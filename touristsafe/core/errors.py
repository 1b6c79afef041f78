"""
Error taxonomy for TouristSafe.

Adapters raise these errors; orchestrators recover them into
degraded-but-informative results.
"""


class TouristSafeError(Exception):
    """TouristSafe 기본 예외"""


class DataUnavailableError(TouristSafeError):
    """외부 저장소에서 데이터를 가져오지 못함"""

    def __init__(self, source: str, reason: str):
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


class GeolocationError(TouristSafeError):
    """위치 조회 실패 (경보 발송은 막지 않음)"""
    code = "unavailable"


class GeolocationPermissionError(GeolocationError):
    """위치 권한 거부"""
    code = "permission_denied"


class PositionUnavailableError(GeolocationError):
    """현재 위치를 확인할 수 없음"""
    code = "position_unavailable"


class GeolocationTimeoutError(GeolocationError):
    """위치 조회 시간 초과"""
    code = "timeout"


class ProfileTransitionError(TouristSafeError, ValueError):
    """허용되지 않는 프로필 상태 전이"""
