"""
Human-readable justifications for recommendations.

All wording lives here so it can change without touching scoring.
"""

from __future__ import annotations

from .features import FeatureSet
from .scoring_config import ScoringConfig

SEPARATOR = " • "


def _join_names(names: list[str]) -> str:
    if len(names) <= 1:
        return "".join(names)
    return ", ".join(names[:-1]) + " and " + names[-1]


def _shared(ordered: tuple, other: tuple) -> list:
    other_set = set(other)
    return [value for value in ordered if value in other_set]


def _rating(movie: dict) -> float | None:
    value = movie.get("vote_average")
    if isinstance(value, bool):
        return None
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def generate_explanation(
    candidate: dict,
    seed: dict,
    candidate_features: FeatureSet,
    seed_features: FeatureSet,
    config: ScoringConfig | None = None,
) -> str:
    """
    Describe what a candidate has in common with its best-matching seed.

    Clauses are emitted in a fixed order (directors, genres, keywords,
    rating) and joined with a bullet. When nothing applies a generic
    sentence naming the seed is returned instead.
    """
    config = config or ScoringConfig()
    seed_title = seed.get("title") or "your pick"
    clauses: list[str] = []

    directors = _shared(candidate_features.directors, seed_features.directors)
    if len(directors) == 1:
        clauses.append(f"Directed by {directors[0]}, who also directed '{seed_title}'")
    elif directors:
        clauses.append(f"Shares directors ({_join_names(directors)}) with '{seed_title}'")

    genres = _shared(candidate_features.genres, seed_features.genres)
    if genres:
        noun = "genre" if len(genres) == 1 else "genres"
        clauses.append(f"Shares {len(genres)} {noun} with '{seed_title}'")

    keywords = _shared(candidate_features.keywords, seed_features.keywords)
    if keywords:
        clauses.append("Similar themes: " + ", ".join(keywords[:config.max_explanation_keywords]))

    rating = _rating(candidate)
    if rating is not None and rating >= config.high_rating_threshold:
        clauses.append("Highly rated by audiences")

    if not clauses:
        return f'Similar to "{seed_title}" based on content and themes'
    return SEPARATOR.join(clauses)
