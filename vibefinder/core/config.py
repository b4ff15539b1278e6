"""
VibeFinder Backend Configuration
환경변수 기반 설정 관리
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ACRCloud (fingerprint service)
    ACRCLOUD_HOST: str = Field(default="", description="ACRCloud 호스트 (예: identify-eu-west-1.acrcloud.com)")
    ACRCLOUD_ACCESS_KEY: str = Field(default="", description="ACRCloud access key")
    ACRCLOUD_ACCESS_SECRET: str = Field(default="", description="ACRCloud access secret (서명용)")

    # Spotify (primary catalog)
    SPOTIFY_CLIENT_ID: str = Field(default="", description="Spotify client id")
    SPOTIFY_CLIENT_SECRET: str = Field(default="", description="Spotify client secret")
    SPOTIFY_MARKET: str = Field(default="ID", description="검색 market 코드")
    SPOTIFY_ACCOUNTS_URL: str = Field(default="https://accounts.spotify.com", description="토큰 발급 URL")
    SPOTIFY_API_URL: str = Field(default="https://api.spotify.com", description="Spotify Web API URL")
    SPOTIFY_WEB_URL: str = Field(default="https://open.spotify.com", description="검색 딥링크 URL")

    # Last.fm (secondary catalog)
    LASTFM_API_KEY: str = Field(default="", description="Last.fm API key")
    LASTFM_API_URL: str = Field(default="https://ws.audioscrobbler.com/2.0/", description="Last.fm REST URL")

    # Deezer (tertiary catalog)
    DEEZER_API_URL: str = Field(default="https://api.deezer.com", description="Deezer API URL")

    # Recommendation settings
    SIMILAR_LIMIT: int = Field(default=30, ge=1, le=100, description="Last.fm 유사곡 요청 개수")

    # Request settings
    MAX_SAMPLE_BYTES: int = Field(default=5 * 1024 * 1024, ge=1, description="업로드 샘플 최대 크기 (bytes)")
    HTTP_TIMEOUT_SEC: float = Field(default=15.0, gt=0.0, description="업스트림 HTTP 타임아웃 (초)")

    # Settings 모델이 환경변수를 어떻게 읽을지 규칙
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @property
    def acrcloud_configured(self) -> bool:
        return bool(self.ACRCLOUD_HOST and self.ACRCLOUD_ACCESS_KEY and self.ACRCLOUD_ACCESS_SECRET)

    @property
    def spotify_configured(self) -> bool:
        return bool(self.SPOTIFY_CLIENT_ID and self.SPOTIFY_CLIENT_SECRET)

    @property
    def lastfm_configured(self) -> bool:
        return bool(self.LASTFM_API_KEY)


def get_settings() -> Settings:
    return Settings()
