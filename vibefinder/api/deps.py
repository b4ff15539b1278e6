"""
VibeFinder API Dependencies
요청 단위 의존성 (설정, HTTP 클라이언트)
"""

from typing import AsyncIterator

import httpx
from fastapi import Depends, Request

from ..core.config import Settings


def get_config(request: Request) -> Settings:
    """lifespan에서 로드한 설정"""
    return request.app.state.config


async def get_http_client(config: Settings = Depends(get_config)) -> AsyncIterator[httpx.AsyncClient]:
    """요청마다 새 클라이언트 생성, 응답 후 종료"""
    async with httpx.AsyncClient(timeout=config.HTTP_TIMEOUT_SEC) as client:
        yield client
