"""
VibeFinder Scoring Utilities
similarity / popularity / tag overlap 정규화 + vibe score 결합
"""

from typing import Iterable, List, Sequence, Set

import numpy as np

from .models import EnrichedCandidate, ScoredRecommendation


# 고정 가중치 (설정으로 바꾸지 않음)
WEIGHT_SIMILARITY = 0.55
WEIGHT_POPULARITY = 0.30
WEIGHT_TAG_OVERLAP = 0.15

LISTEN_EPSILON = 0.0001
TAG_FLOOR = 1


# =============================================================================
# 정규화 함수
# =============================================================================

def normalize_similarity(raw: float) -> float:
    """
    Last.fm match 값을 0~100으로 정규화

    - (0, 1] 이면 비율로 보고 x100
    - 1 초과면 이미 퍼센트로 보고 그대로
    - 0/음수/NaN 은 0
    """
    if raw is None or not np.isfinite(raw) or raw <= 0:
        return 0.0
    pct = raw * 100.0 if raw <= 1 else float(raw)
    return min(pct, 100.0)


def popularity_scores(playcounts: Sequence[int]) -> np.ndarray:
    """
    log10(playcount + 1) / 배치 최대값 * 100

    모든 playcount가 0이면 분모를 epsilon으로 두어 전부 0
    """
    counts = np.asarray(playcounts, dtype=float)
    if counts.size == 0:
        return counts
    counts = np.where(np.isfinite(counts) & (counts > 0), counts, 0.0)
    listen = np.log10(counts + 1.0)
    denom = max(float(listen.max()), LISTEN_EPSILON)
    return listen / denom * 100.0


def tag_overlap_count(tags: Iterable[str], baseline: Set[str]) -> int:
    """기준 태그 집합(소문자)에 포함된 후보 태그 수"""
    return sum(1 for tag in tags if tag.lower() in baseline)


def tag_overlap_scores(counts: Sequence[int]) -> np.ndarray:
    """overlap 수 / 배치 최대값(최소 1) * 100"""
    arr = np.asarray(counts, dtype=float)
    if arr.size == 0:
        return arr
    denom = max(float(arr.max()), TAG_FLOOR)
    return arr / denom * 100.0


def fuse(similarity_pct: float, popularity_pct: float, tag_overlap_pct: float) -> float:
    return (
        similarity_pct * WEIGHT_SIMILARITY
        + popularity_pct * WEIGHT_POPULARITY
        + tag_overlap_pct * WEIGHT_TAG_OVERLAP
    )


# =============================================================================
# 배치 스코어링
# =============================================================================

def score_candidates(
    candidates: List[EnrichedCandidate],
    baseline_tags: Iterable[str]
) -> List[ScoredRecommendation]:
    """
    enrichment 완료된 후보 배치를 스코어링하고 vibe score 내림차순 정렬

    Args:
        candidates: enrichment 결과 (최대 8개)
        baseline_tags: 기준 곡 태그

    Returns:
        ScoredRecommendation 리스트 (동점이면 입력 순서 유지)
    """
    if not candidates:
        return []

    baseline = {tag.lower() for tag in baseline_tags}

    overlap_counts = [tag_overlap_count(c.tags, baseline) for c in candidates]
    popularity = popularity_scores([c.playcount for c in candidates])
    tag_pct = tag_overlap_scores(overlap_counts)

    scored: List[ScoredRecommendation] = []
    for idx, cand in enumerate(candidates):
        sim_pct = normalize_similarity(cand.raw_similarity)
        pop_pct = float(popularity[idx])
        overlap_pct = float(tag_pct[idx])
        scored.append(ScoredRecommendation(
            title=cand.title,
            artist=cand.artist,
            raw_similarity=cand.raw_similarity,
            tags=list(cand.tags),
            playcount=cand.playcount,
            preview_url=cand.preview_url,
            album_name=cand.album_name,
            similarity_pct=sim_pct,
            popularity_pct=pop_pct,
            tag_overlap_count=overlap_counts[idx],
            tag_overlap_pct=overlap_pct,
            vibe_score=fuse(sim_pct, pop_pct, overlap_pct)
        ))

    # sorted()는 안정 정렬이므로 동점은 원래 순서 유지
    return sorted(scored, key=lambda r: r.vibe_score, reverse=True)
