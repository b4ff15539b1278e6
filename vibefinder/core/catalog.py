"""
VibeFinder Catalog Client
Spotify 토큰 발급, 트랙 조회, ISRC/텍스트 기반 트랙 식별
"""

import base64
import logging
from typing import Any, Dict, Optional

import httpx

from .errors import ConfigurationError, TrackNotFoundError, UpstreamError
from .models import CanonicalTrack

logger = logging.getLogger(__name__)


class CatalogTokenProvider:
    """client-credentials 토큰 발급 (호출마다 새로 발급, 캐시 없음)"""

    def __init__(self, client: httpx.AsyncClient, client_id: str, client_secret: str, accounts_url: str):
        self.client = client
        self.client_id = client_id
        self.client_secret = client_secret
        self.accounts_url = accounts_url.rstrip("/")

    async def get_token(self) -> str:
        """
        Raises:
            ConfigurationError: client id/secret 누락
            UpstreamError: 토큰 발급 실패
        """
        if not self.client_id or not self.client_secret:
            raise ConfigurationError("Spotify client credentials are not configured")

        basic = base64.b64encode(f"{self.client_id}:{self.client_secret}".encode("utf-8")).decode("ascii")
        try:
            response = await self.client.post(
                f"{self.accounts_url}/api/token",
                headers={
                    "Authorization": f"Basic {basic}",
                    "Content-Type": "application/x-www-form-urlencoded",
                },
                data={"grant_type": "client_credentials"}
            )
        except httpx.HTTPError as e:
            raise UpstreamError("spotify-auth", f"request failed: {e}") from e

        if response.is_error:
            raise UpstreamError("spotify-auth", "token exchange rejected", response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamError("spotify-auth", "invalid token response") from e

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise UpstreamError("spotify-auth", "access_token missing in response")
        return str(token)


def _first_track(payload: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(payload, dict):
        return None
    tracks = payload.get("tracks")
    items = tracks.get("items") if isinstance(tracks, dict) else None
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return None


class IdentityResolver:
    """
    (title, artist, isrc) -> CanonicalTrack

    검색 순서:
    1. isrc:<code> (ISRC가 있을 때)
    2. track:"<title>" artist:"<artist>"
    """

    def __init__(self, client: httpx.AsyncClient, api_url: str, market: str):
        self.client = client
        self.api_url = api_url.rstrip("/")
        self.market = market

    async def search(self, query: str, token: str) -> CanonicalTrack:
        """단일 검색 시도. 실패는 매칭 없음으로 처리"""
        try:
            response = await self.client.get(
                f"{self.api_url}/v1/search",
                params={"q": query, "type": "track", "limit": 1, "market": self.market},
                headers={"Authorization": f"Bearer {token}"}
            )
        except httpx.HTTPError as e:
            logger.error(f"Spotify search request failed for {query!r}: {e}")
            return CanonicalTrack()

        if response.is_error:
            logger.error(f"Spotify search error {response.status_code}: {query!r}")
            return CanonicalTrack()

        try:
            track = _first_track(response.json())
        except ValueError:
            logger.error(f"Spotify search returned invalid JSON: {query!r}")
            return CanonicalTrack()

        if track is None or not track.get("id"):
            return CanonicalTrack()

        artists = track.get("artists")
        artist_id = None
        if isinstance(artists, list) and artists and isinstance(artists[0], dict):
            artist_id = artists[0].get("id")

        return CanonicalTrack(catalog_id=str(track["id"]), primary_artist_id=artist_id)

    async def resolve(self, title: str, artist: str, token: str, isrc: Optional[str] = None) -> CanonicalTrack:
        if isrc:
            by_isrc = await self.search(f"isrc:{isrc}", token)
            if by_isrc.catalog_id:
                return by_isrc
            logger.info(f"ISRC lookup missed ({isrc}), falling back to text search")

        return await self.search(f'track:"{title}" artist:"{artist}"', token)


class CatalogTrackLookup:
    """Spotify 트랙 ID로 트랙 조회"""

    def __init__(self, client: httpx.AsyncClient, api_url: str):
        self.client = client
        self.api_url = api_url.rstrip("/")

    async def get_track(self, track_id: str, token: str) -> Dict[str, Any]:
        """
        Raises:
            TrackNotFoundError: 404 (또는 잘못된 ID)
            UpstreamError: 그 외 실패
        """
        try:
            response = await self.client.get(
                f"{self.api_url}/v1/tracks/{track_id}",
                headers={"Authorization": f"Bearer {token}"}
            )
        except httpx.HTTPError as e:
            raise UpstreamError("spotify", f"track lookup failed: {e}") from e

        if response.status_code in (400, 404):
            raise TrackNotFoundError(track_id)
        if response.is_error:
            raise UpstreamError("spotify", "track lookup rejected", response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamError("spotify", "invalid track response") from e

        if not isinstance(payload, dict) or not payload.get("name"):
            raise UpstreamError("spotify", "track response missing name")
        return payload
