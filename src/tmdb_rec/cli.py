import argparse
import asyncio
import dataclasses
import json
import logging

from .config import TMDB_API_KEY, TMDB_BASE_URL, DEFAULT_MAX_CONCURRENT
from .catalog import AsyncTMDBClient, CatalogError
from .features import extract_features
from .recommender import InvalidSeedsError, Recommendation, score_candidate
from .scoring_config import ScoringConfig, load_scoring_config
from .service import recommend_for_movie_ids, serialize_recommendations
from .similarity import similarity_breakdown

logger = logging.getLogger(__name__)


def _release_year(movie: dict) -> str:
    release_date = movie.get("release_date") or ""
    return release_date[:4] if len(release_date) >= 4 else "n/a"


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def _build_config(args: argparse.Namespace) -> ScoringConfig:
    config = load_scoring_config(getattr(args, "weights_file", None))
    limit = getattr(args, "limit", None)
    if limit:
        config = dataclasses.replace(config, max_results=limit)
    return config


def _make_client() -> AsyncTMDBClient | None:
    if not TMDB_API_KEY:
        logger.error("TMDB_API_KEY is not set. Export your TMDB API key and try again.")
        return None
    return AsyncTMDBClient(TMDB_API_KEY, base_url=TMDB_BASE_URL, max_concurrent=DEFAULT_MAX_CONCURRENT)


def _output_recommendations(recs: list[Recommendation], args: argparse.Namespace) -> None:
    """Log recommendations in the requested format."""
    show_score = getattr(args, "show_score", False)

    if getattr(args, "format", "text") == "json":
        logger.info(json.dumps(serialize_recommendations(recs, include_score=show_score), indent=2))
        return

    if not recs:
        logger.info("No recommendations found for these movies.")
        return

    logger.info(f"\nTop {len(recs)} recommendations:")
    for i, r in enumerate(recs, 1):
        title = r.movie.get("title") or f"Movie {r.movie.get('id')}"
        score = f" - Score: {r.score:.3f}" if show_score else ""
        logger.info(f"{i}. {title} ({_release_year(r.movie)}){score}")
        logger.info(f"   Why: {r.explanation}")


async def _recommend_async(args: argparse.Namespace, client: AsyncTMDBClient) -> list[Recommendation]:
    async with client:
        return await recommend_for_movie_ids(
            args.movie_ids, client, _build_config(args), progress=args.progress
        )


def cmd_recommend(args: argparse.Namespace) -> None:
    """Recommend movies similar to the given TMDB ids."""
    client = _make_client()
    if client is None:
        return

    try:
        recs = asyncio.run(_recommend_async(args, client))
    except (CatalogError, InvalidSeedsError) as exc:
        logger.error(f"Could not build recommendations: {exc}")
        return

    _output_recommendations(recs, args)


async def _fetch_pair(client: AsyncTMDBClient, seed_id: int, candidate_id: int) -> tuple[dict | None, dict | None]:
    async with client:
        return await asyncio.gather(client.get_movie(seed_id), client.get_movie(candidate_id))


def cmd_compare(args: argparse.Namespace) -> None:
    """Show how one movie scores against another."""
    client = _make_client()
    if client is None:
        return

    try:
        seed, candidate = asyncio.run(_fetch_pair(client, args.seed_id, args.candidate_id))
    except CatalogError as exc:
        logger.error(f"Could not fetch movies: {exc}")
        return

    for movie_id, movie in ((args.seed_id, seed), (args.candidate_id, candidate)):
        if movie is None:
            logger.error(f"Movie {movie_id} not found in catalog")
            return

    config = _build_config(args)
    seed_features = extract_features(seed, config)
    candidate_features = extract_features(candidate, config)
    breakdown = similarity_breakdown(seed_features, candidate_features, config)
    result = score_candidate(candidate, [seed], [seed_features], config)

    logger.info(f"\n{candidate.get('title')} vs {seed.get('title')}:")
    logger.info(f"  Keywords:  {breakdown.keyword:.3f} (weight {config.keyword_weight:.2f})")
    logger.info(f"  Genres:    {breakdown.genre:.3f} (weight {config.genre_weight:.2f})")
    logger.info(f"  Directors: {breakdown.director:.3f} (weight {config.director_weight:.2f})")
    logger.info(f"  Combined:  {breakdown.combined:.3f}")
    logger.info(f"  Why: {result.explanation}")


def main():
    parser = argparse.ArgumentParser(description="TMDB content-based recommender")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    rec_parser = subparsers.add_parser("recommend", help="Recommend movies similar to the given ones")
    rec_parser.add_argument("movie_ids", nargs="+", type=int, metavar="MOVIE_ID", help="TMDB movie ids")
    rec_parser.add_argument("--limit", type=_positive_int, help="Number of recommendations (default from config)")
    rec_parser.add_argument("--weights-file", help="JSON file overriding scoring weights")
    rec_parser.add_argument("--format", choices=["text", "json"], default="text", help="Output format")
    rec_parser.add_argument("--show-score", action="store_true", help="Include similarity scores")
    rec_parser.add_argument("--progress", action="store_true", help="Show a progress bar while fetching")
    rec_parser.set_defaults(func=cmd_recommend)

    compare_parser = subparsers.add_parser("compare", help="Explain the similarity between two movies")
    compare_parser.add_argument("seed_id", type=int, help="TMDB id of the movie you like")
    compare_parser.add_argument("candidate_id", type=int, help="TMDB id of the movie to compare")
    compare_parser.add_argument("--weights-file", help="JSON file overriding scoring weights")
    compare_parser.set_defaults(func=cmd_compare)

    args = parser.parse_args()

    # Configure logging based on verbosity
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    args.func(args)


if __name__ == "__main__":
    main()
