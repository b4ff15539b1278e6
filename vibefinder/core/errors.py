"""
VibeFinder Errors
파이프라인 예외 계층
"""

from typing import Optional


class VibeFinderError(Exception):
    """모든 파이프라인 예외의 베이스"""


class ConfigurationError(VibeFinderError):
    """필수 키/시크릿 누락 (네트워크 호출 전에 발생)"""


class UpstreamError(VibeFinderError):
    """필수 업스트림 호출 실패 (토큰 발급, 트랙 조회 등)"""

    def __init__(self, service: str, message: str, status_code: Optional[int] = None):
        self.service = service
        self.status_code = status_code
        super().__init__(f"{service}: {message}")


class TrackNotFoundError(VibeFinderError):
    """카탈로그에 해당 트랙 ID가 없음"""

    def __init__(self, track_id: str):
        self.track_id = track_id
        super().__init__(f"Track not found: {track_id}")
