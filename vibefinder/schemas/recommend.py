"""
VibeFinder Recommendation Schemas
추천 관련 스키마
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel

from .common import AlbumRef, ArtistRef


class RecommendItem(BaseModel):
    """추천 결과 항목"""
    title: str
    artists: List[ArtistRef]
    album: AlbumRef
    spotifyId: str  # 표시용 ID (실제 Spotify ID 아님)
    preview_url: Optional[str] = None
    spotifyUrl: str
    vibeScore: float
    similarity: float
    popularity: float
    playcount: int
    tags: List[str]
    tagOverlap: int
    tagOverlapPct: float


class RecommendResponse(BaseModel):
    """추천 응답"""
    track: Dict[str, Any]  # Spotify 트랙 원본
    recommendations: List[RecommendItem]
