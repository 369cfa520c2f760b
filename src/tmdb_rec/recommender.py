from dataclasses import dataclass
import logging

import numpy as np

from .explanation import generate_explanation
from .features import FeatureSet, extract_features
from .scoring_config import ScoringConfig
from .similarity import pair_similarity

logger = logging.getLogger(__name__)


class InvalidSeedsError(ValueError):
    """Seed/candidate input that the pipeline cannot score."""


@dataclass
class Recommendation:
    movie: dict
    score: float
    explanation: str


@dataclass
class CandidateScore:
    score: float
    best_seed_index: int
    similarities: list[float]
    explanation: str


def validate_inputs(seed_movies: list[dict], candidate_pools: list[list[dict]]) -> None:
    """Reject inputs for which the per-candidate mean is undefined."""
    if not seed_movies:
        raise InvalidSeedsError("At least one seed movie is required")
    if len(seed_movies) != len(candidate_pools):
        raise InvalidSeedsError(
            f"Got {len(seed_movies)} seed movies but {len(candidate_pools)} candidate pools"
        )


def score_candidate(
    candidate: dict,
    seed_movies: list[dict],
    seed_features: list[FeatureSet],
    config: ScoringConfig | None = None,
) -> CandidateScore:
    """
    Score one candidate against every seed.

    The score is the mean of the per-seed similarities; the explanation is
    built against the single best-matching seed (earliest seed wins ties).
    """
    config = config or ScoringConfig()
    features = extract_features(candidate, config)
    similarities = np.array([pair_similarity(seed, features, config) for seed in seed_features])

    best = int(np.argmax(similarities))
    explanation = generate_explanation(candidate, seed_movies[best], features, seed_features[best], config)
    return CandidateScore(
        score=float(similarities.mean()),
        best_seed_index=best,
        similarities=similarities.tolist(),
        explanation=explanation,
    )


def recommend(
    seed_movies: list[dict],
    candidate_pools: list[list[dict]],
    config: ScoringConfig | None = None,
) -> list[Recommendation]:
    """
    Rank the union of all candidate pools against the seed movies.

    Args:
        seed_movies: Movies the user picked, with full details (overview,
            genres, credits)
        candidate_pools: candidate_pools[i] is the "similar movies" result
            for seed_movies[i]

    Returns:
        At most config.max_results recommendations, best first, with each
        movie id appearing once

    Raises:
        InvalidSeedsError: No seeds, or seeds and pools differ in length
    """
    validate_inputs(seed_movies, candidate_pools)
    config = config or ScoringConfig()

    seed_features = [extract_features(movie, config) for movie in seed_movies]
    candidates = [movie for pool in candidate_pools for movie in (pool or [])]

    scored: list[Recommendation] = []
    for candidate in candidates:
        if candidate.get("id") is None:
            logger.debug(f"Skipping candidate without id: {candidate.get('title')!r}")
            continue
        result = score_candidate(candidate, seed_movies, seed_features, config)
        scored.append(Recommendation(movie=candidate, score=result.score, explanation=result.explanation))

    # Stable sort keeps pool order among equal scores
    scored.sort(key=lambda rec: rec.score, reverse=True)

    unique: dict = {}
    for rec in scored:
        unique.setdefault(rec.movie["id"], rec)

    results = list(unique.values())[:config.max_results]
    logger.debug(
        f"Scored {len(scored)} candidates ({len(unique)} unique) against "
        f"{len(seed_movies)} seeds; returning {len(results)}"
    )
    return results
