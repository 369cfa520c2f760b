"""
Configuration constants for the TMDB recommender.

This module centralizes all magic numbers and configurable parameters.
Values can be overridden via environment variables or a scoring config file.
"""
import os
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def _env_number(key: str, default, cast, min_val):
    # Unparseable values fall back to the default; values under the floor are raised to it
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        val = cast(raw)
    except ValueError:
        logger.warning(f"Ignoring {key}={raw!r}: not a valid {cast.__name__}, keeping {default}")
        return default
    if val < min_val:
        logger.warning(f"{key}={val} is below the floor of {min_val}; clamping")
        return min_val
    return val


def _get_float_env(key: str, default: float, min_val: float = 0) -> float:
    """Read a TMDB_* / TMDB_REC_* float override, e.g. a timeout or scoring weight."""
    return _env_number(key, default, float, min_val)


def _get_int_env(key: str, default: int, min_val: int = 1) -> int:
    """Integer counterpart of _get_float_env for counts such as retries or result size."""
    return _env_number(key, default, int, min_val)


# Catalog (TMDB) Configuration
TMDB_API_KEY = os.environ.get("TMDB_API_KEY", "")
TMDB_BASE_URL = os.environ.get("TMDB_BASE_URL", "https://api.themoviedb.org/3").rstrip("/")
HTTP_TIMEOUT = _get_float_env("TMDB_HTTP_TIMEOUT", 30.0, min_val=1.0)
DEFAULT_MAX_CONCURRENT = _get_int_env("TMDB_MAX_CONCURRENT", 5, min_val=1)

# Retry and Rate Limiting
MAX_HTTP_RETRIES = _get_int_env("TMDB_MAX_RETRIES", 3, min_val=1)
RETRY_INITIAL_DELAY = _get_float_env("TMDB_RETRY_DELAY", 1.0, min_val=0.0)
RETRY_BACKOFF_FACTOR = 2.0
MAX_429_RETRY_SECONDS = 300  # Maximum total time to wait for 429 responses
DEFAULT_RETRY_AFTER = 5  # Default wait time if Retry-After header missing

# Scoring Weights (must sum to 1.0)
KEYWORD_WEIGHT = _get_float_env("TMDB_REC_KEYWORD_WEIGHT", 0.4)
GENRE_WEIGHT = _get_float_env("TMDB_REC_GENRE_WEIGHT", 0.2)
DIRECTOR_WEIGHT = _get_float_env("TMDB_REC_DIRECTOR_WEIGHT", 0.4)

# Output shaping
MAX_RESULTS = _get_int_env("TMDB_REC_MAX_RESULTS", 5, min_val=1)
MAX_EXPLANATION_KEYWORDS = _get_int_env("TMDB_REC_MAX_KEYWORDS", 3, min_val=1)
HIGH_RATING_THRESHOLD = _get_float_env("TMDB_REC_HIGH_RATING", 7.5)

# Tokens this short or shorter are dropped from overviews
MIN_TOKEN_LENGTH = 3

# Optional JSON file overriding any ScoringConfig field
SCORING_CONFIG_PATH = Path(os.environ.get("TMDB_REC_SCORING_CONFIG", "data/scoring_config.json"))

# Common English function words ignored when extracting overview keywords.
# Changing this list changes keyword similarity for every pair of movies.
STOPWORDS = frozenset({
    "the", "and", "for", "are", "but", "not", "you", "all", "any", "can",
    "had", "her", "was", "one", "our", "out", "has", "him", "his", "how",
    "its", "may", "new", "now", "old", "see", "two", "way", "who", "did",
    "get", "let", "say", "she", "too", "use", "with", "they", "this", "that",
    "from", "have", "been", "were", "when", "what", "will", "into", "their",
    "them", "then", "than", "there", "these", "those", "which", "while",
    "would", "could", "should", "about", "after", "before", "where", "being",
    "because", "other", "some", "such", "only", "also", "just", "over",
    "more", "most", "very", "each", "both", "through", "during", "until",
    "against", "between", "under", "again", "further", "once", "here",
    "himself", "herself", "themselves", "itself",
})
