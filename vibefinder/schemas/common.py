"""
VibeFinder Common Schemas
공통 스키마
"""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """에러 응답"""
    error: str


class ArtistRef(BaseModel):
    name: str


class AlbumRef(BaseModel):
    name: str


