"""
VibeFinder Recommendation API
추천 라우터
"""

import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException

from ..schemas.recommend import RecommendResponse, RecommendItem
from ..schemas.common import ErrorResponse
from ..core.config import Settings
from ..core.engine import RecommendationEngine
from ..core.errors import ConfigurationError, TrackNotFoundError, UpstreamError
from .deps import get_config, get_http_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["recommend"])


@router.get(
    "/song/{spotify_id}",
    response_model=RecommendResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Track not found"},
        500: {"model": ErrorResponse, "description": "Configuration or internal error"},
        502: {"model": ErrorResponse, "description": "Upstream failure"}
    }
)
async def recommend(
    spotify_id: str,
    config: Settings = Depends(get_config),
    client: httpx.AsyncClient = Depends(get_http_client)
) -> RecommendResponse:
    """
    트랙 정보 + 유사곡 추천

    - spotify_id: Spotify 트랙 ID
    """
    try:
        engine = RecommendationEngine.from_settings(config, client)
        result = await engine.recommend(spotify_id)
        return RecommendResponse(
            track=result["track"],
            recommendations=[RecommendItem(**item) for item in result["recommendations"]]
        )
    except TrackNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except UpstreamError as e:
        logger.error(f"Upstream error: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except Exception:
        logger.exception("Recommendation error")
        raise HTTPException(status_code=500, detail="Internal Server Error")
