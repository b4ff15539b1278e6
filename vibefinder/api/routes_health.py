"""
VibeFinder Health Check API
헬스 체크 라우터
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..core.config import Settings
from .deps import get_config

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """헬스 체크 응답"""
    status: str
    acrcloud_configured: bool
    spotify_configured: bool
    lastfm_configured: bool
    market: str


@router.get("/health", response_model=HealthResponse)
async def health_check(config: Settings = Depends(get_config)) -> HealthResponse:
    """
    서버 상태 확인

    - 업스트림별 자격 증명 설정 여부 (네트워크 호출 없음)
    """
    configured = (
        config.acrcloud_configured
        and config.spotify_configured
        and config.lastfm_configured
    )

    return HealthResponse(
        status="ok" if configured else "degraded",
        acrcloud_configured=config.acrcloud_configured,
        spotify_configured=config.spotify_configured,
        lastfm_configured=config.lastfm_configured,
        market=config.SPOTIFY_MARKET
    )
