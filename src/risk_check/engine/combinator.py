from __future__ import annotations

import math
from typing import Any, Sequence

from risk_check.core.assessment_types import RiskFactorScore
from risk_check.core.errors import InvalidBreakdownError, InvalidScoreError
from risk_check.core.scoring_config import DEFAULT_SCORING_CONFIG, ScoringConfig
from risk_check.domain.sources import SOURCE_ORDER


def validate_raw_score(value: Any, label: str = "score") -> float:
    """Return the score as float or raise; out-of-range values are never clamped."""
    if isinstance(value, bool):
        raise InvalidScoreError(f"{label} must be a number, got {value!r}")
    try:
        s = float(value)
    except (TypeError, ValueError):
        raise InvalidScoreError(f"{label} must be a number, got {value!r}") from None
    if not math.isfinite(s):
        raise InvalidScoreError(f"{label} must be finite, got {value!r}")
    if s < 0.0 or s > 100.0:
        raise InvalidScoreError(f"{label} must be within [0, 100], got {s!r}")
    return s


class WeightedScoreCombinator:
    def __init__(self, config: ScoringConfig = DEFAULT_SCORING_CONFIG):
        self.config = config

    def combine(self, scores: Sequence[RiskFactorScore]) -> float:
        by_source = {}
        for item in scores:
            if item.source in by_source:
                raise InvalidBreakdownError(f"Duplicate source in breakdown: {item.source.value}")
            by_source[item.source] = validate_raw_score(item.raw_score, f"{item.source.value} rawScore")

        missing = [s.value for s in SOURCE_ORDER if s not in by_source]
        if missing:
            raise InvalidBreakdownError(
                "Combinator needs a complete breakdown, missing: " + ", ".join(missing)
            )

        # Summed in fixed order so the float result is reproducible.
        total = 0.0
        for source in SOURCE_ORDER:
            total += by_source[source] * self.config.weight(source)
        return total
