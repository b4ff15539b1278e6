"""
VibeFinder Preview Enricher
후보별 재생수/태그 + Deezer 미리듣기 병렬 조회
"""

import asyncio
import logging
from typing import Any, List, Optional, Tuple

import httpx

from .models import Candidate, EnrichedCandidate
from .similarity import SimilarityProvider

logger = logging.getLogger(__name__)


def _text_or_none(value: Any) -> Optional[str]:
    """비어 있지 않은 문자열만 허용"""
    if isinstance(value, str) and value:
        return value
    return None


class PreviewEnricher:
    """Deezer 검색으로 preview URL / 앨범명 조회"""

    def __init__(self, client: httpx.AsyncClient, api_url: str):
        self.client = client
        self.api_url = api_url.rstrip("/")

    async def lookup(self, artist: str, title: str) -> Tuple[Optional[str], Optional[str]]:
        """
        Returns:
            (preview_url, album_title), 실패 시 (None, None)
        """
        try:
            response = await self.client.get(
                f"{self.api_url}/search",
                params={"q": f'artist:"{artist}" track:"{title}"', "limit": 1}
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Deezer lookup failed for {artist} - {title}: {e}")
            return None, None

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            return None, None

        hit = data[0]
        album = hit.get("album")
        album_title = album.get("title") if isinstance(album, dict) else None
        return _text_or_none(hit.get("preview")), _text_or_none(album_title)


async def enrich_candidate(
    candidate: Candidate,
    similarity: SimilarityProvider,
    enricher: PreviewEnricher
) -> EnrichedCandidate:
    """후보 하나 enrichment (Last.fm -> Deezer 순차 호출)"""
    playcount, tags = await similarity.track_info(candidate.artist, candidate.title)
    preview_url, album_name = await enricher.lookup(candidate.artist, candidate.title)
    return EnrichedCandidate(
        title=candidate.title,
        artist=candidate.artist,
        raw_similarity=candidate.raw_similarity,
        tags=tags,
        playcount=playcount,
        preview_url=preview_url,
        album_name=album_name
    )


def _degraded(candidate: Candidate) -> EnrichedCandidate:
    return EnrichedCandidate(
        title=candidate.title,
        artist=candidate.artist,
        raw_similarity=candidate.raw_similarity
    )


async def enrich_candidates(
    candidates: List[Candidate],
    similarity: SimilarityProvider,
    enricher: PreviewEnricher
) -> List[EnrichedCandidate]:
    """
    후보 전체 병렬 enrichment

    - 후보마다 태스크 하나, 모두 완료된 뒤 반환
    - 한 태스크의 실패가 다른 태스크를 취소하지 않음
    - 결과 순서는 입력 순서와 동일
    """
    results: List[Any] = await asyncio.gather(
        *(enrich_candidate(c, similarity, enricher) for c in candidates),
        return_exceptions=True
    )

    enriched: List[EnrichedCandidate] = []
    for candidate, result in zip(candidates, results):
        if isinstance(result, BaseException):
            logger.warning(f"Enrichment failed for {candidate.artist} - {candidate.title}: {result!r}")
            enriched.append(_degraded(candidate))
        else:
            enriched.append(result)
    return enriched
