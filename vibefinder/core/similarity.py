"""
VibeFinder Similarity Provider
Last.fm track.getInfo / track.getsimilar 조회
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from .errors import ConfigurationError
from .models import Candidate

logger = logging.getLogger(__name__)

# enrichment fan-out 상한 (설정으로 바꾸지 않음)
ENRICH_TOPN = 8


def _as_list(value: Any) -> List[Any]:
    """Last.fm은 항목이 하나일 때 리스트 대신 객체를 반환하기도 함"""
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        return [value]
    return []


def normalize_artist(artist: Any) -> str:
    """artist 필드가 문자열 또는 {name} 객체인 경우 모두 이름으로 변환"""
    if isinstance(artist, str):
        return artist
    if isinstance(artist, dict):
        return str(artist.get("name") or "")
    return ""


def normalize_tags(toptags: Any) -> List[str]:
    if not isinstance(toptags, dict):
        return []
    names = []
    for tag in _as_list(toptags.get("tag")):
        if isinstance(tag, dict) and tag.get("name"):
            names.append(str(tag["name"]))
    return names


def parse_playcount(value: Any) -> int:
    try:
        count = int(float(value))
    except (TypeError, ValueError):
        return 0
    return max(count, 0)


def parse_match(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class SimilarityProvider:
    """Last.fm 기반 유사곡 + 태그/재생수 조회"""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        api_url: str,
        similar_limit: int = 30
    ):
        if not api_key:
            raise ConfigurationError("LASTFM_API_KEY is not configured")
        self.client = client
        self.api_key = api_key
        self.api_url = api_url
        self.similar_limit = similar_limit

    async def _get(self, params: Dict[str, str]) -> Optional[Dict[str, Any]]:
        """
        Last.fm GET 호출

        Returns:
            JSON 딕셔너리, 실패 또는 in-band 에러({"error": n})인 경우 None
        """
        query = {"api_key": self.api_key, "format": "json", **params}
        try:
            response = await self.client.get(self.api_url, params=query)
        except httpx.HTTPError as e:
            logger.warning(f"Last.fm {params.get('method')} request failed: {e}")
            return None

        if response.is_error:
            logger.warning(f"Last.fm {params.get('method')} error: {response.status_code}")
            return None

        try:
            payload = response.json()
        except ValueError:
            logger.warning(f"Last.fm {params.get('method')} returned invalid JSON")
            return None

        if not isinstance(payload, dict):
            return None
        if "error" in payload:
            logger.warning(f"Last.fm {params.get('method')} error {payload.get('error')}: {payload.get('message')}")
            return None
        return payload

    async def track_info(self, artist: str, title: str) -> Tuple[int, List[str]]:
        """
        트랙 재생수와 태그 조회

        Returns:
            (playcount, tags), 실패 시 (0, [])
        """
        payload = await self._get({"method": "track.getInfo", "artist": artist, "track": title})
        track = payload.get("track") if payload else None
        if not isinstance(track, dict):
            return 0, []
        return parse_playcount(track.get("playcount")), normalize_tags(track.get("toptags"))

    async def reference_tags(self, artist: str, title: str) -> List[str]:
        """기준 곡 태그 (tag overlap 비교 기준)"""
        _, tags = await self.track_info(artist, title)
        return tags

    async def similar_tracks(self, artist: str, title: str) -> List[Candidate]:
        """
        유사곡 조회 후 상위 ENRICH_TOPN개만 유지 (enrichment 전에 자름)
        """
        payload = await self._get({
            "method": "track.getsimilar",
            "artist": artist,
            "track": title,
            "limit": str(self.similar_limit),
        })
        similar = payload.get("similartracks") if payload else None
        if not isinstance(similar, dict):
            return []

        candidates: List[Candidate] = []
        for item in _as_list(similar.get("track"))[:ENRICH_TOPN]:
            if not isinstance(item, dict):
                continue
            candidates.append(Candidate(
                title=str(item.get("name") or ""),
                artist=normalize_artist(item.get("artist")),
                raw_similarity=parse_match(item.get("match"))
            ))
        return candidates
