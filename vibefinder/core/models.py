"""
VibeFinder Domain Models
요청 단위로 생성되는 내부 데이터 구조
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union


@dataclass(frozen=True)
class RecognitionMatch:
    """지문 인식 결과 (music 또는 humming)"""
    title: str
    artists: List[Dict[str, str]]
    album_name: str
    source: str  # "music" | "humming"
    isrc: Optional[str] = None

    @property
    def primary_artist(self) -> str:
        if self.artists:
            return self.artists[0].get("name", "") or ""
        return ""


@dataclass(frozen=True)
class Matched:
    match: RecognitionMatch


@dataclass(frozen=True)
class NoMatch:
    """인식 불가 (에러 아님)"""
    status_code: Optional[int] = None


@dataclass(frozen=True)
class RecognitionFailed:
    """업스트림 호출/파싱 실패"""
    reason: str


RecognitionOutcome = Union[Matched, NoMatch, RecognitionFailed]


@dataclass(frozen=True)
class CanonicalTrack:
    """카탈로그 트랙 식별자 (catalog_id=None 은 정상 종료 상태)"""
    catalog_id: Optional[str] = None
    primary_artist_id: Optional[str] = None


@dataclass
class Candidate:
    """Last.fm 유사곡 후보"""
    title: str
    artist: str
    raw_similarity: float = 0.0
    tags: List[str] = field(default_factory=list)
    playcount: int = 0


@dataclass
class EnrichedCandidate(Candidate):
    preview_url: Optional[str] = None
    album_name: Optional[str] = None


@dataclass
class ScoredRecommendation(EnrichedCandidate):
    similarity_pct: float = 0.0
    popularity_pct: float = 0.0
    tag_overlap_count: int = 0
    tag_overlap_pct: float = 0.0
    vibe_score: float = 0.0
