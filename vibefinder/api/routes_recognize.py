"""
VibeFinder Recognition API
오디오 샘플 인식 라우터
"""

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile

from ..schemas.recognize import RecognizeResponse
from ..schemas.common import ErrorResponse
from ..core.config import Settings
from ..core.engine import RecognitionService
from ..core.errors import ConfigurationError, UpstreamError
from ..core.models import Matched, RecognitionFailed
from .deps import get_config, get_http_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["recognize"])


@router.post(
    "/recognize",
    response_model=RecognizeResponse,
    responses={
        204: {"description": "No match"},
        400: {"model": ErrorResponse, "description": "Invalid sample"},
        500: {"model": ErrorResponse, "description": "Configuration or internal error"},
        502: {"model": ErrorResponse, "description": "Upstream failure"}
    }
)
async def recognize(
    sample: Optional[UploadFile] = File(None, description="오디오 샘플"),
    config: Settings = Depends(get_config),
    client: httpx.AsyncClient = Depends(get_http_client)
):
    """
    오디오 샘플 인식

    - 매칭 성공: 곡 정보 + spotifyId (없으면 null)
    - 매칭 없음: 204
    """
    if sample is None:
        raise HTTPException(status_code=400, detail="No audio file found.")

    # 메모리로 읽기 전에 업로드 크기부터 확인
    if sample.size is not None and sample.size > config.MAX_SAMPLE_BYTES:
        raise HTTPException(status_code=400, detail="Audio sample is too large.")

    audio = await sample.read()
    if not audio:
        raise HTTPException(status_code=400, detail="Audio sample is empty.")
    if len(audio) > config.MAX_SAMPLE_BYTES:
        raise HTTPException(status_code=400, detail="Audio sample is too large.")

    logger.info(f"Audio sample: {sample.filename} ({len(audio) / 1024:.2f}KB)")

    service = RecognitionService.from_settings(config, client)
    try:
        outcome = await service.recognize(audio, sample.filename or "sample")
        if isinstance(outcome, RecognitionFailed):
            logger.error(f"Recognition failed: {outcome.reason}")
            raise HTTPException(status_code=502, detail=outcome.reason)
        if not isinstance(outcome, Matched):
            return Response(status_code=204)
        result = await service.resolve(outcome)
        return RecognizeResponse(**result)
    except HTTPException:
        raise
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except UpstreamError as e:
        logger.error(f"Upstream error: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except Exception:
        logger.exception("Recognition error")
        raise HTTPException(status_code=500, detail="Internal Server Error")
