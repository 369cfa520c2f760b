import importlib
import sys
from pathlib import Path

import pytest

# Ensure the package under test is importable without installation
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


def make_movie(
    movie_id: int,
    title: str,
    overview: str = "",
    genre_ids=None,
    directors=None,
    vote_average=None,
    genres=None,
):
    """Build a TMDB-shaped movie payload."""
    movie = {
        "id": movie_id,
        "title": title,
        "overview": overview,
        "vote_average": vote_average,
    }
    if genres is not None:
        movie["genres"] = genres
    else:
        movie["genre_ids"] = list(genre_ids or [])
    if directors is not None:
        movie["credits"] = {
            "cast": [],
            "crew": [{"name": name, "job": "Director", "department": "Directing"} for name in directors],
        }
    return movie


@pytest.fixture
def movie_factory():
    return make_movie


@pytest.fixture
def fresh_config(monkeypatch):
    """
    Reload config and scoring_config so environment overrides take effect.
    """
    import tmdb_rec.config as config
    import tmdb_rec.scoring_config as scoring_config

    def _reload(**env):
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        importlib.reload(config)
        importlib.reload(scoring_config)
        return config, scoring_config

    yield _reload

    # Restore module state for later tests
    monkeypatch.undo()
    importlib.reload(config)
    importlib.reload(scoring_config)
