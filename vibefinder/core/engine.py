"""
VibeFinder Pipelines
인식 파이프라인 (오디오 -> Spotify ID) + 추천 파이프라인 (Spotify ID -> 추천 목록)
"""

import logging
from typing import Any, Dict, Optional

import httpx

from .assembler import assemble_recommendations
from .catalog import CatalogTokenProvider, CatalogTrackLookup, IdentityResolver
from .config import Settings
from .enrichment import PreviewEnricher, enrich_candidates
from .models import Matched, RecognitionOutcome
from .recognition import SignedRecognitionClient
from .scoring import score_candidates
from .similarity import SimilarityProvider
from ..utils.timing import Timer

logger = logging.getLogger(__name__)


class RecognitionService:
    """
    인식 파이프라인

    1. ACRCloud 서명 요청
    2. 매칭되면 Spotify 토큰 발급
    3. ISRC -> 텍스트 검색 순으로 Spotify 트랙 ID 조회
    """

    def __init__(
        self,
        recognizer: SignedRecognitionClient,
        tokens: CatalogTokenProvider,
        resolver: IdentityResolver
    ):
        self.recognizer = recognizer
        self.tokens = tokens
        self.resolver = resolver

    @classmethod
    def from_settings(cls, config: Settings, client: httpx.AsyncClient) -> "RecognitionService":
        return cls(
            recognizer=SignedRecognitionClient(
                client,
                host=config.ACRCLOUD_HOST,
                access_key=config.ACRCLOUD_ACCESS_KEY,
                access_secret=config.ACRCLOUD_ACCESS_SECRET
            ),
            tokens=CatalogTokenProvider(
                client,
                client_id=config.SPOTIFY_CLIENT_ID,
                client_secret=config.SPOTIFY_CLIENT_SECRET,
                accounts_url=config.SPOTIFY_ACCOUNTS_URL
            ),
            resolver=IdentityResolver(client, api_url=config.SPOTIFY_API_URL, market=config.SPOTIFY_MARKET)
        )

    async def recognize(self, sample: bytes, filename: str) -> RecognitionOutcome:
        """
        Returns:
            Matched / NoMatch / RecognitionFailed

        Raises:
            ConfigurationError: ACRCloud 설정 누락
        """
        with Timer("acrcloud identify"):
            return await self.recognizer.identify(sample, filename)

    async def resolve(self, outcome: Matched) -> Dict[str, Any]:
        """
        매칭 결과에 Spotify ID를 붙여 응답 payload 생성

        Raises:
            ConfigurationError: Spotify 설정 누락
            UpstreamError: 토큰 발급 실패
        """
        match = outcome.match
        token = await self.tokens.get_token()

        with Timer("spotify resolve"):
            canonical = await self.resolver.resolve(match.title, match.primary_artist, token, match.isrc)
        logger.info(f"[Recognize] {match.title} / {match.primary_artist} -> spotifyId={canonical.catalog_id}")

        return {
            "title": match.title,
            "artists": match.artists,
            "album": {"name": match.album_name},
            "source": match.source,
            "spotifyId": canonical.catalog_id,
        }


class RecommendationEngine:
    """
    추천 파이프라인

    1. Spotify 트랙 조회 (title, 대표 아티스트)
    2. Last.fm 기준 태그 + 유사곡 (상위 N개)
    3. 후보별 재생수/태그/미리듣기 병렬 enrichment
    4. vibe score 스코어링 및 정렬
    5. 응답 생성
    """

    def __init__(
        self,
        tokens: CatalogTokenProvider,
        tracks: CatalogTrackLookup,
        similarity: SimilarityProvider,
        enricher: PreviewEnricher,
        web_url: str
    ):
        self.tokens = tokens
        self.tracks = tracks
        self.similarity = similarity
        self.enricher = enricher
        self.web_url = web_url

    @classmethod
    def from_settings(cls, config: Settings, client: httpx.AsyncClient) -> "RecommendationEngine":
        return cls(
            tokens=CatalogTokenProvider(
                client,
                client_id=config.SPOTIFY_CLIENT_ID,
                client_secret=config.SPOTIFY_CLIENT_SECRET,
                accounts_url=config.SPOTIFY_ACCOUNTS_URL
            ),
            tracks=CatalogTrackLookup(client, api_url=config.SPOTIFY_API_URL),
            similarity=SimilarityProvider(
                client,
                api_key=config.LASTFM_API_KEY,
                api_url=config.LASTFM_API_URL,
                similar_limit=config.SIMILAR_LIMIT
            ),
            enricher=PreviewEnricher(client, api_url=config.DEEZER_API_URL),
            web_url=config.SPOTIFY_WEB_URL
        )

    async def recommend(self, spotify_id: str) -> Dict[str, Any]:
        """
        Raises:
            ConfigurationError: 필수 설정 누락
            TrackNotFoundError: Spotify에 없는 트랙
            UpstreamError: 토큰/트랙 조회 실패
        """
        token = await self.tokens.get_token()
        track = await self.tracks.get_track(spotify_id, token)

        title = str(track.get("name") or "")
        artist = _primary_artist_name(track) or ""

        with Timer("lastfm reference + similar"):
            baseline_tags = await self.similarity.reference_tags(artist, title)
            candidates = await self.similarity.similar_tracks(artist, title)

        with Timer(f"enrich {len(candidates)} candidates"):
            enriched = await enrich_candidates(candidates, self.similarity, self.enricher)

        ranked = score_candidates(enriched, baseline_tags)
        logger.info(
            f"[Recommend] {artist} - {title}: "
            f"baseline_tags={len(baseline_tags)}, candidates={len(ranked)}"
        )

        return {
            "track": track,
            "recommendations": assemble_recommendations(ranked, self.web_url),
        }


def _primary_artist_name(track: Dict[str, Any]) -> Optional[str]:
    artists = track.get("artists")
    if isinstance(artists, list) and artists and isinstance(artists[0], dict):
        return artists[0].get("name")
    return None
