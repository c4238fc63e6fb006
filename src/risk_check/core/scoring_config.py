from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from risk_check.core.errors import ConfigurationError
from risk_check.domain.sources import SOURCE_ORDER, RiskSource

WEIGHT_SUM_TOLERANCE = 1e-9

FALLBACK_CONSERVATIVE = "conservative"
FALLBACK_WORST_CASE = "worst_case"
FALLBACK_STRATEGIES = (FALLBACK_CONSERVATIVE, FALLBACK_WORST_CASE)

DEFAULT_WEIGHTS: Dict[RiskSource, float] = {
    RiskSource.SANCTIONS: 0.45,
    RiskSource.PEP: 0.15,
    RiskSource.ADVERSE_MEDIA: 0.15,
    RiskSource.INTERNAL_HISTORY: 0.15,
    RiskSource.COUNTRY_BASELINE: 0.10,
}

DEFAULT_FALLBACK_SCORES: Dict[RiskSource, float] = {
    RiskSource.SANCTIONS: 50.0,
    RiskSource.PEP: 30.0,
    RiskSource.ADVERSE_MEDIA: 25.0,
    RiskSource.INTERNAL_HISTORY: 20.0,
    RiskSource.COUNTRY_BASELINE: 15.0,
}


@dataclass(frozen=True)
class TierThresholds:
    """Upper-inclusive tier boundaries: low is [0, low_max], medium is (low_max, medium_max]."""

    low_max: float = 30.0
    medium_max: float = 70.0

    def ranges(self) -> Dict[str, tuple]:
        return {
            "low": (0.0, self.low_max),
            "medium": (self.low_max, self.medium_max),
            "high": (self.medium_max, 100.0),
        }


@dataclass(frozen=True)
class ScoringConfig:
    weights: Mapping[RiskSource, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    thresholds: TierThresholds = field(default_factory=TierThresholds)
    fallback_strategy: str = FALLBACK_CONSERVATIVE
    fallback_scores: Mapping[RiskSource, float] = field(
        default_factory=lambda: dict(DEFAULT_FALLBACK_SCORES)
    )
    config_version: str = "v1"

    def __post_init__(self) -> None:
        # Read-only views over private copies of the caller's mappings.
        object.__setattr__(self, "weights", MappingProxyType(dict(self.weights)))
        object.__setattr__(self, "fallback_scores", MappingProxyType(dict(self.fallback_scores)))

    def weight(self, source: RiskSource) -> float:
        return float(self.weights[source])

    def fallback_for(self, source: RiskSource) -> float:
        if self.fallback_strategy == FALLBACK_WORST_CASE:
            return 100.0
        return float(self.fallback_scores[source])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "config_version": self.config_version,
            "weights": {s.value: float(self.weights[s]) for s in SOURCE_ORDER},
            "thresholds": {
                "low_max": float(self.thresholds.low_max),
                "medium_max": float(self.thresholds.medium_max),
            },
            "fallback": {
                "strategy": self.fallback_strategy,
                "scores": {s.value: float(self.fallback_scores[s]) for s in SOURCE_ORDER},
            },
        }

    def with_overrides(self, overrides: Optional[Dict[str, Any]]) -> "ScoringConfig":
        """Return a validated copy with ruleset-level overrides merged in."""
        if not overrides:
            return self
        if not isinstance(overrides, Mapping):
            raise ConfigurationError(f"Overrides must be a mapping, got {type(overrides).__name__}")

        raw = self.to_dict()
        if "config_version" in overrides:
            raw["config_version"] = overrides["config_version"]
        for section in ("weights", "thresholds"):
            if section in overrides:
                raw[section] = {**raw[section], **_section(overrides[section], section)}
        if "fallback" in overrides:
            fb = _section(overrides["fallback"], "fallback")
            if "strategy" in fb:
                raw["fallback"]["strategy"] = fb["strategy"]
            if "scores" in fb:
                raw["fallback"]["scores"] = {
                    **raw["fallback"]["scores"],
                    **_section(fb["scores"], "fallback.scores"),
                }
        return scoring_config_from_dict(raw)


def _section(value: Any, name: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Override section {name!r} must be a mapping, got {type(value).__name__}")
    return dict(value)


def scoring_config_from_dict(raw: Dict[str, Any]) -> ScoringConfig:
    _validate_config(raw)

    weights = {RiskSource(k): float(v) for k, v in raw["weights"].items()}
    th = raw["thresholds"]
    fb = raw.get("fallback", {}) or {}
    fb_scores = dict(DEFAULT_FALLBACK_SCORES)
    fb_scores.update({RiskSource(k): float(v) for k, v in (fb.get("scores") or {}).items()})

    return ScoringConfig(
        weights=weights,
        thresholds=TierThresholds(low_max=float(th["low_max"]), medium_max=float(th["medium_max"])),
        fallback_strategy=str(fb.get("strategy", FALLBACK_CONSERVATIVE)),
        fallback_scores=fb_scores,
        config_version=str(raw.get("config_version", "v1")),
    )


def load_scoring_config(path: Path) -> ScoringConfig:
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Scoring config is not valid JSON: {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigurationError("Scoring config must be a JSON object")
    return scoring_config_from_dict(raw)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def _validate_config(raw: Dict[str, Any]) -> None:
    for k in ["weights", "thresholds"]:
        if k not in raw:
            raise ConfigurationError(f"Missing scoring config key: {k}")

    weights = raw["weights"]
    if not isinstance(weights, Mapping):
        raise ConfigurationError("Weights must be a mapping of source to weight")

    expected = {s.value for s in SOURCE_ORDER}
    unknown = sorted(str(k) for k in set(weights) - expected)
    missing = sorted(expected - set(weights))
    if unknown:
        raise ConfigurationError(f"Unknown weight sources: {', '.join(unknown)}")
    if missing:
        raise ConfigurationError(f"Missing weight sources: {', '.join(missing)}")

    for source, w in weights.items():
        if not _is_number(w) or not (0.0 < float(w) <= 1.0):
            raise ConfigurationError(f"Weight for {source} must be in (0, 1], got {w!r}")

    total = sum(float(w) for w in weights.values())
    if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
        raise ConfigurationError(f"Weights must sum to 1.0, got {total!r}")

    th = raw["thresholds"]
    if not isinstance(th, Mapping) or "low_max" not in th or "medium_max" not in th:
        raise ConfigurationError("Thresholds require low_max and medium_max")
    if not _is_number(th["low_max"]) or not _is_number(th["medium_max"]):
        raise ConfigurationError("Thresholds must be finite numbers")
    low_max = float(th["low_max"])
    medium_max = float(th["medium_max"])
    if not (0.0 <= low_max < medium_max < 100.0):
        raise ConfigurationError("Invalid thresholds: require 0 <= low_max < medium_max < 100")

    fb = raw.get("fallback", {}) or {}
    if not isinstance(fb, Mapping):
        raise ConfigurationError("Fallback must be a mapping with strategy and scores")
    strategy = fb.get("strategy", FALLBACK_CONSERVATIVE)
    if not isinstance(strategy, str) or strategy not in FALLBACK_STRATEGIES:
        raise ConfigurationError(f"Unsupported fallback strategy: {strategy!r}")

    scores = fb.get("scores", {}) or {}
    if not isinstance(scores, Mapping):
        raise ConfigurationError("Fallback scores must be a mapping of source to score")
    for source, v in scores.items():
        if source not in expected:
            raise ConfigurationError(f"Unknown fallback source: {source}")
        if not _is_number(v) or not (0.0 <= float(v) <= 100.0):
            raise ConfigurationError(f"Fallback score for {source} must be in [0, 100], got {v!r}")


DEFAULT_SCORING_CONFIG = ScoringConfig()
