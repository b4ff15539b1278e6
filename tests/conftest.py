"""Test configuration and fixtures."""

import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

# Add repo root to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from vibefinder.core.config import Settings

ACR_HOST = "identify.acr.test"
SPOTIFY_ACCOUNTS = "accounts.spotify.test"
SPOTIFY_API = "api.spotify.test"
LASTFM = "lastfm.test"
DEEZER = "deezer.test"


def make_settings(**overrides: Any) -> Settings:
    values: Dict[str, Any] = {
        "ACRCLOUD_HOST": ACR_HOST,
        "ACRCLOUD_ACCESS_KEY": "acr-key",
        "ACRCLOUD_ACCESS_SECRET": "acr-secret",
        "SPOTIFY_CLIENT_ID": "client-id",
        "SPOTIFY_CLIENT_SECRET": "client-secret",
        "SPOTIFY_MARKET": "ID",
        "SPOTIFY_ACCOUNTS_URL": f"https://{SPOTIFY_ACCOUNTS}",
        "SPOTIFY_API_URL": f"https://{SPOTIFY_API}",
        "SPOTIFY_WEB_URL": "https://open.spotify.com",
        "LASTFM_API_KEY": "lastfm-key",
        "LASTFM_API_URL": f"https://{LASTFM}/2.0/",
        "DEEZER_API_URL": f"https://{DEEZER}",
    }
    values.update(overrides)
    return Settings(**values)


class FakeUpstream:
    """httpx.MockTransport 기반 가짜 업스트림 (host, path) 라우팅 + 요청 기록"""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def add(
        self,
        host: str,
        path: str,
        json: Any = None,
        status_code: int = 200,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None
    ) -> None:
        if handler is None:
            def handler(request: httpx.Request) -> httpx.Response:
                return httpx.Response(status_code, json=json)
        self.routes[(host, path)] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.url.host, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "no route"})
        return route(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle))

    def requests_to(self, host: str, path: Optional[str] = None) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.url.host == host and (path is None or r.url.path == path)
        ]


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()
