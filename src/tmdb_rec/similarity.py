"""Pairwise similarity between two FeatureSets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .features import FeatureSet
from .scoring_config import ScoringConfig


def jaccard(a: Iterable, b: Iterable) -> float:
    """
    Intersection over union of two collections.

    Returns 0.0 when either side is empty so that two movies that both lack
    a signal are not rewarded for it.
    """
    set_a, set_b = set(a), set(b)
    if not set_a or not set_b:
        return 0.0
    return len(set_a & set_b) / len(set_a | set_b)


@dataclass(frozen=True)
class SimilarityBreakdown:
    keyword: float
    genre: float
    director: float
    combined: float


def similarity_breakdown(
    a: FeatureSet,
    b: FeatureSet,
    config: ScoringConfig | None = None,
) -> SimilarityBreakdown:
    """Compute the three sub-scores and their weighted combination."""
    config = config or ScoringConfig()
    keyword = jaccard(a.keywords, b.keywords)
    genre = jaccard(a.genres, b.genres)
    director = jaccard(a.directors, b.directors)

    combined = (
        config.keyword_weight * keyword
        + config.genre_weight * genre
        + config.director_weight * director
    )
    # Float rounding can push a perfect match a hair past 1.0
    combined = min(1.0, max(0.0, combined))
    return SimilarityBreakdown(keyword=keyword, genre=genre, director=director, combined=combined)


def pair_similarity(a: FeatureSet, b: FeatureSet, config: ScoringConfig | None = None) -> float:
    return similarity_breakdown(a, b, config).combined
