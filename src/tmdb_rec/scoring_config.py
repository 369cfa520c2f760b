"""
Tunable parameters for the content-based scorer.

A ScoringConfig is passed explicitly through the pipeline so that a run is a
pure function of (seeds, candidates, config). Defaults come from config.py
and can be overridden per field from a JSON file.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

from .config import (
    DIRECTOR_WEIGHT,
    GENRE_WEIGHT,
    HIGH_RATING_THRESHOLD,
    KEYWORD_WEIGHT,
    MAX_EXPLANATION_KEYWORDS,
    MAX_RESULTS,
    MIN_TOKEN_LENGTH,
    SCORING_CONFIG_PATH,
    STOPWORDS,
)

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS = {
    "keyword_weight": 0.4,
    "genre_weight": 0.2,
    "director_weight": 0.4,
}
WEIGHT_FIELDS = tuple(DEFAULT_WEIGHTS)


def _coerce_weight(name: str, value: Any) -> float:
    try:
        weight = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid {name}={value!r}, using 0.0")
        return 0.0
    if math.isnan(weight) or weight < 0:
        logger.warning(f"{name}={weight} is below minimum 0.0, using 0.0")
        return 0.0
    return weight


@dataclass
class ScoringConfig:
    """Weights and limits used by the similarity scorer and explanation generator."""

    keyword_weight: float = KEYWORD_WEIGHT
    genre_weight: float = GENRE_WEIGHT
    director_weight: float = DIRECTOR_WEIGHT
    max_explanation_keywords: int = MAX_EXPLANATION_KEYWORDS
    max_results: int = MAX_RESULTS
    high_rating_threshold: float = HIGH_RATING_THRESHOLD
    min_token_length: int = MIN_TOKEN_LENGTH
    stopwords: frozenset[str] = field(default_factory=lambda: STOPWORDS)

    def __post_init__(self) -> None:
        """Repair weights so the combined score stays within [0, 1]."""
        for name in WEIGHT_FIELDS:
            setattr(self, name, _coerce_weight(name, getattr(self, name)))

        total = sum(getattr(self, name) for name in WEIGHT_FIELDS)
        if total == 0:
            logger.warning("All scoring weights are zero; restoring defaults")
            for name, default in DEFAULT_WEIGHTS.items():
                setattr(self, name, default)
        elif not math.isclose(total, 1.0, abs_tol=1e-9):
            logger.warning(f"Scoring weights sum to {total:.3f}, not 1.0; renormalizing")
            for name in WEIGHT_FIELDS:
                setattr(self, name, getattr(self, name) / total)

        for name in ("max_explanation_keywords", "max_results", "min_token_length"):
            value = int(getattr(self, name))
            if value < 1:
                raise ValueError(f"{name} must be at least 1, got {value}")
            setattr(self, name, value)

        self.high_rating_threshold = float(self.high_rating_threshold)
        self.stopwords = frozenset(str(word).lower() for word in self.stopwords)

    @property
    def weights(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in WEIGHT_FIELDS}

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["stopwords"] = sorted(self.stopwords)
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ScoringConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(payload) - known
        if unknown:
            logger.warning(f"Ignoring unknown scoring config keys: {sorted(unknown)}")
        kwargs = {k: v for k, v in payload.items() if k in known}
        if "stopwords" in kwargs:
            kwargs["stopwords"] = frozenset(kwargs["stopwords"])
        return cls(**kwargs)


def load_scoring_config(path: str | Path | None = None) -> ScoringConfig:
    """Load a config from disk; fall back to defaults if missing or invalid."""
    config_path = Path(path) if path else SCORING_CONFIG_PATH
    if not config_path.exists():
        logger.debug("Scoring config not found at %s; using defaults", config_path)
        return ScoringConfig()

    try:
        payload = json.loads(config_path.read_text())
        if not isinstance(payload, dict):
            raise ValueError("expected a JSON object")
        return ScoringConfig.from_dict(payload)
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("Failed to load scoring config from %s: %s", config_path, exc)
        return ScoringConfig()


def save_scoring_config(config: ScoringConfig, path: str | Path | None = None) -> Path:
    """Persist a config to disk."""
    config_path = Path(path) if path else SCORING_CONFIG_PATH
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(config.to_dict(), indent=2))
    return config_path
