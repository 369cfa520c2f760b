"""
Feature extraction for content-based scoring.

Turns a TMDB movie payload into a FeatureSet of overview keywords, genre ids
and director names. Missing fields yield empty features, never errors.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator

from .scoring_config import ScoringConfig

logger = logging.getLogger(__name__)

_PUNCTUATION_RE = re.compile(r"[^\w\s]")


@dataclass(frozen=True)
class FeatureSet:
    """
    Derived representation of one movie.

    Each field holds de-duplicated values in extraction order. Scoring treats
    them as sets; explanations rely on the order.
    """
    keywords: tuple[str, ...] = ()
    genres: tuple[int, ...] = ()
    directors: tuple[str, ...] = ()


def _unique(values: Iterable) -> tuple:
    return tuple(dict.fromkeys(values))


def tokenize(text: str | None) -> Iterator[str]:
    """Lowercase, strip punctuation and split on whitespace."""
    if not text:
        return iter(())
    return iter(_PUNCTUATION_RE.sub("", text.lower()).split())


def extract_keywords(text: str | None, config: ScoringConfig | None = None) -> tuple[str, ...]:
    """
    Extract significant keywords from a free-text overview.

    Args:
        text: Overview text (may be empty or None)
        config: Supplies the stopword list and minimum token length

    Returns:
        Unique keywords in order of first appearance
    """
    config = config or ScoringConfig()
    return _unique(
        token for token in tokenize(text)
        if len(token) >= config.min_token_length and token not in config.stopwords
    )


def extract_genres(movie: dict) -> tuple[int, ...]:
    """Genre ids from `genre_ids` (list results) or `genres` (detail payloads)."""
    raw = movie.get("genre_ids") or []
    if not raw:
        raw = [g.get("id") if isinstance(g, dict) else g for g in movie.get("genres") or []]
    return _unique(g for g in raw if isinstance(g, int) and not isinstance(g, bool))


def extract_directors(movie: dict) -> tuple[str, ...]:
    """Names of crew members whose job is Director (case-insensitive)."""
    credits = movie.get("credits") or {}
    crew = credits.get("crew") if isinstance(credits, dict) else None
    if crew is None:
        crew = movie.get("crew") or []

    directors = []
    for member in crew:
        if not isinstance(member, dict):
            continue
        job = member.get("job")
        name = member.get("name")
        if not isinstance(job, str) or not isinstance(name, str):
            continue
        name = name.strip()
        if name and job.lower() == "director":
            directors.append(name)
    return _unique(directors)


def extract_features(movie: dict, config: ScoringConfig | None = None) -> FeatureSet:
    features = FeatureSet(
        keywords=extract_keywords(movie.get("overview"), config),
        genres=extract_genres(movie),
        directors=extract_directors(movie),
    )
    if not (features.keywords or features.genres or features.directors):
        logger.debug(f"Movie {movie.get('id')} has no usable content features")
    return features
