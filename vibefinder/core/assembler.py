"""
VibeFinder Result Assembler
스코어링 결과 -> 응답 payload 변환
"""

import hashlib
from typing import Any, Dict, List
from urllib.parse import quote

from .models import ScoredRecommendation

DEFAULT_ALBUM_NAME = "Single/Unknown"


def display_id(artist: str, title: str, position: int) -> str:
    """
    추천 항목 표시용 ID (실제 카탈로그 ID 아님)

    artist/title/position 기반 해시라 같은 입력이면 항상 같은 값
    """
    digest = hashlib.sha1(f"{artist}|{title}|{position}".encode("utf-8")).hexdigest()
    return f"rec-{position}-{digest[:8]}"


def search_deeplink(web_url: str, artist: str, title: str) -> str:
    """카탈로그 웹 검색 링크 (encodeURIComponent와 동일한 인코딩)"""
    term = quote(f"{artist} {title}", safe="-_.!~*'()")
    return f"{web_url.rstrip('/')}/search/{term}"


def assemble_recommendations(
    ranked: List[ScoredRecommendation],
    web_url: str
) -> List[Dict[str, Any]]:
    items = []
    for position, rec in enumerate(ranked):
        items.append({
            "title": rec.title,
            "artists": [{"name": rec.artist}],
            "album": {"name": rec.album_name or DEFAULT_ALBUM_NAME},
            "spotifyId": display_id(rec.artist, rec.title, position),
            "preview_url": rec.preview_url,
            "spotifyUrl": search_deeplink(web_url, rec.artist, rec.title),
            "vibeScore": rec.vibe_score,
            "similarity": rec.similarity_pct,
            "popularity": rec.popularity_pct,
            "playcount": rec.playcount,
            "tags": rec.tags,
            "tagOverlap": rec.tag_overlap_count,
            "tagOverlapPct": rec.tag_overlap_pct,
        })
    return items
