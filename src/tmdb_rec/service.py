"""
Orchestration around the recommendation pipeline.

Accepts movie ids, fetches seeds and their similar-movie pools from the
catalog, validates the input and runs the pure scoring pipeline.
"""
import logging

from .catalog import AsyncTMDBClient, CatalogError
from .recommender import InvalidSeedsError, Recommendation, recommend
from .scoring_config import ScoringConfig

logger = logging.getLogger(__name__)


async def recommend_for_movie_ids(
    movie_ids: list[int],
    client: AsyncTMDBClient,
    config: ScoringConfig | None = None,
    progress: bool = False,
) -> list[Recommendation]:
    """
    Fetch seeds and candidates for movie_ids and rank recommendations.

    Duplicate ids are collapsed (first occurrence kept) before fetching.

    Raises:
        InvalidSeedsError: movie_ids is empty
        CatalogError: A seed could not be fetched or does not exist
    """
    seed_ids = list(dict.fromkeys(int(movie_id) for movie_id in movie_ids))
    if not seed_ids:
        raise InvalidSeedsError("At least one movie id is required")
    if len(seed_ids) < len(movie_ids):
        logger.info(f"Ignoring {len(movie_ids) - len(seed_ids)} duplicate seed id(s)")

    fetched = await client.get_movies_with_similar(seed_ids, progress=progress)

    missing = [movie_id for movie_id, (details, _) in zip(seed_ids, fetched) if details is None]
    if missing:
        raise CatalogError(f"Movie(s) not found in catalog: {', '.join(map(str, missing))}")

    seeds = [details for details, _ in fetched]
    pools = [similar for _, similar in fetched]
    logger.debug(f"Candidate pool sizes: {[len(pool) for pool in pools]}")
    return recommend(seeds, pools, config)


def serialize_recommendations(recs: list[Recommendation], include_score: bool = False) -> list[dict]:
    """Convert recommendations into JSON-ready dicts."""
    payload = []
    for rec in recs:
        item = {"movie": rec.movie, "explanation": rec.explanation}
        if include_score:
            item["score"] = round(rec.score, 4)
        payload.append(item)
    return payload
