import json
import logging
import sys

import pytest

from tmdb_rec import cli
from tmdb_rec.catalog import CatalogError
from tmdb_rec.recommender import Recommendation


def test_main_dispatches_to_subcommand(monkeypatch):
    called = {}

    def fake_recommend(args):
        called["command"] = args.command
        called["movie_ids"] = args.movie_ids
        called["limit"] = args.limit
        called["format"] = args.format

    monkeypatch.setattr(cli, "cmd_recommend", fake_recommend)
    monkeypatch.setattr(sys, "argv", ["prog", "recommend", "603", "27205", "--limit", "3", "--format", "json"])

    cli.main()

    assert called == {"command": "recommend", "movie_ids": [603, 27205], "limit": 3, "format": "json"}


def test_limit_must_be_positive(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["prog", "recommend", "603", "--limit", "0"])

    with pytest.raises(SystemExit):
        cli.main()


def test_main_parses_compare(monkeypatch):
    called = {}
    monkeypatch.setattr(cli, "cmd_compare", lambda args: called.update(vars(args)))
    monkeypatch.setattr(sys, "argv", ["prog", "compare", "1", "2"])

    cli.main()

    assert called["seed_id"] == 1
    assert called["candidate_id"] == 2


def _recommend_args(**overrides):
    args = dict(movie_ids=[1], limit=None, weights_file=None, format="text", show_score=False, progress=False)
    args.update(overrides)
    return type("Args", (), args)()


def test_cmd_recommend_requires_api_key(monkeypatch, caplog):
    monkeypatch.setattr(cli, "TMDB_API_KEY", "")
    caplog.set_level(logging.ERROR, logger="tmdb_rec.cli")

    cli.cmd_recommend(_recommend_args())

    assert "TMDB_API_KEY" in caplog.text


def test_cmd_recommend_outputs_json(monkeypatch, caplog):
    captured = {}

    async def fake_recommend(movie_ids, client, config, progress=False):
        captured["movie_ids"] = movie_ids
        captured["max_results"] = config.max_results
        return [Recommendation(movie={"id": 2, "title": "Two"}, score=0.5, explanation="Highly rated by audiences")]

    monkeypatch.setattr(cli, "TMDB_API_KEY", "key")
    monkeypatch.setattr(cli, "recommend_for_movie_ids", fake_recommend)
    caplog.set_level(logging.INFO, logger="tmdb_rec.cli")

    cli.cmd_recommend(_recommend_args(format="json", limit=2, show_score=True))

    assert captured == {"movie_ids": [1], "max_results": 2}
    payload = json.loads(caplog.records[-1].getMessage())
    assert payload == [{"movie": {"id": 2, "title": "Two"}, "explanation": "Highly rated by audiences", "score": 0.5}]


def test_cmd_recommend_logs_catalog_failures(monkeypatch, caplog):
    async def failing(*args, **kwargs):
        raise CatalogError("catalog down")

    monkeypatch.setattr(cli, "TMDB_API_KEY", "key")
    monkeypatch.setattr(cli, "recommend_for_movie_ids", failing)
    caplog.set_level(logging.ERROR, logger="tmdb_rec.cli")

    cli.cmd_recommend(_recommend_args())

    assert "catalog down" in caplog.text


def test_output_recommendations_text(caplog):
    recs = [Recommendation(movie={"id": 2, "title": "Two", "release_date": "1999-03-31"}, score=0.5, explanation="Why not")]
    caplog.set_level(logging.INFO, logger="tmdb_rec.cli")

    cli._output_recommendations(recs, _recommend_args(show_score=True))

    assert "1. Two (1999) - Score: 0.500" in caplog.text
    assert "Why: Why not" in caplog.text


def test_cmd_compare_logs_breakdown(monkeypatch, caplog):
    seed = {
        "id": 1, "title": "Seed", "overview": "Detective hunts killer", "genre_ids": [80],
        "credits": {"crew": [{"name": "Jane Doe", "job": "Director"}]},
    }
    candidate = {
        "id": 2, "title": "Other", "overview": "Detective chases killer", "genre_ids": [80],
        "credits": {"crew": [{"name": "Jane Doe", "job": "Director"}]},
    }

    async def fake_fetch(client, seed_id, candidate_id):
        return seed, candidate

    monkeypatch.setattr(cli, "TMDB_API_KEY", "key")
    monkeypatch.setattr(cli, "_fetch_pair", fake_fetch)
    caplog.set_level(logging.INFO, logger="tmdb_rec.cli")

    cli.cmd_compare(type("Args", (), {"seed_id": 1, "candidate_id": 2, "weights_file": None})())

    assert "Directors: 1.000" in caplog.text
    assert "Genres:    1.000" in caplog.text
    assert "Directed by Jane Doe, who also directed 'Seed'" in caplog.text


def test_cmd_compare_reports_missing_movie(monkeypatch, caplog):
    async def fake_fetch(client, seed_id, candidate_id):
        return {"id": 1, "title": "Seed"}, None

    monkeypatch.setattr(cli, "TMDB_API_KEY", "key")
    monkeypatch.setattr(cli, "_fetch_pair", fake_fetch)
    caplog.set_level(logging.ERROR, logger="tmdb_rec.cli")

    cli.cmd_compare(type("Args", (), {"seed_id": 1, "candidate_id": 2, "weights_file": None})())

    assert "Movie 2 not found" in caplog.text
