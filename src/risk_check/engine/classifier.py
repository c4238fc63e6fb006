from __future__ import annotations

from risk_check.core.assessment_types import RiskTier
from risk_check.core.errors import ConfigurationError
from risk_check.core.scoring_config import WEIGHT_SUM_TOLERANCE, TierThresholds
from risk_check.engine.combinator import validate_raw_score

# Weights may sum to 1 + WEIGHT_SUM_TOLERANCE, so an all-100 breakdown can land
# just above 100.
OVERALL_SCORE_CEILING = 100.0 * (1.0 + WEIGHT_SUM_TOLERANCE)


class TierClassifier:
    """
    Maps an overall score in [0, 100] to exactly one tier.

    Boundaries are upper-inclusive: a score equal to ``low_max`` is still
    low, a score equal to ``medium_max`` is still medium. The dashboard shows
    the same split as "0 - 30", "30.01 - 70" and "70.01 - 100".
    """

    def __init__(self, thresholds: TierThresholds = TierThresholds()):
        self.thresholds = thresholds
        if not (0.0 <= thresholds.low_max < thresholds.medium_max < 100.0):
            raise ConfigurationError("Invalid thresholds: require 0 <= low_max < medium_max < 100")

    def classify(self, score: float) -> RiskTier:
        if isinstance(score, (int, float)) and not isinstance(score, bool):
            if 100.0 < score <= OVERALL_SCORE_CEILING:
                return RiskTier.HIGH

        s = validate_raw_score(score, "overallScore")
        t = self.thresholds

        if s <= t.low_max:
            return RiskTier.LOW
        if s <= t.medium_max:
            return RiskTier.MEDIUM
        return RiskTier.HIGH
