"""
VibeFinder Backend Main Application
FastAPI 앱 및 startup/shutdown 이벤트
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.config import get_settings
from .api import routes_health, routes_recognize, routes_recommend
from .utils.logging import setup_logging

# 로깅 설정
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 라이프사이클 관리"""
    # Startup
    logger.info("=" * 60)
    logger.info("VibeFinder Backend Starting...")
    logger.info("=" * 60)

    # 설정 로드
    config = get_settings()
    app.state.config = config

    logger.info(f"ACRCloud configured: {config.acrcloud_configured}")
    logger.info(f"Spotify configured: {config.spotify_configured} (market={config.SPOTIFY_MARKET})")
    logger.info(f"Last.fm configured: {config.lastfm_configured}")

    yield

    # Shutdown
    logger.info("VibeFinder Backend Shutting down...")


# FastAPI 앱 생성
app = FastAPI(
    title="VibeFinder API",
    description="음악 인식 + 유사곡 추천 API",
    version="1.0.0",
    lifespan=lifespan
)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HTTPException)
async def error_body_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """모든 에러 응답을 {"error": ...} 형태로 통일"""
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """요청 검증 실패도 400 {"error": ...} 형태로 반환"""
    problems = [
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "Invalid request: " + "; ".join(problems)})


# 라우터 등록
app.include_router(routes_health.router)
app.include_router(routes_recognize.router)
app.include_router(routes_recommend.router)


@app.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "service": "VibeFinder API",
        "version": "1.0.0",
        "docs": "/docs"
    }
