"""
VibeFinder Recognition Schemas
인식 관련 스키마
"""

from typing import List, Literal, Optional
from pydantic import BaseModel

from .common import AlbumRef, ArtistRef


class RecognizeResponse(BaseModel):
    """인식 성공 응답"""
    title: str
    artists: List[ArtistRef]
    album: AlbumRef
    source: Literal["music", "humming"]
    spotifyId: Optional[str] = None
