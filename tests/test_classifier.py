import pytest

from risk_check.core.assessment_types import RiskTier
from risk_check.core.errors import ConfigurationError, InvalidScoreError
from risk_check.core.scoring_config import TierThresholds
from risk_check.engine.classifier import TierClassifier


@pytest.mark.parametrize(
    "score, tier",
    [
        (0, RiskTier.LOW),
        (30, RiskTier.LOW),
        (30.01, RiskTier.MEDIUM),
        (70, RiskTier.MEDIUM),
        (70.01, RiskTier.HIGH),
        (100, RiskTier.HIGH),
    ],
)
def test_tier_boundaries_belong_to_lower_tier(score, tier):
    assert TierClassifier().classify(score) == tier


def test_classification_is_total_over_range():
    classifier = TierClassifier()
    seen = set()
    for i in range(0, 10001):
        seen.add(classifier.classify(i / 100.0))
    assert seen == {RiskTier.LOW, RiskTier.MEDIUM, RiskTier.HIGH}


@pytest.mark.parametrize("score", [-0.01, 100.01, float("nan"), float("inf")])
def test_out_of_range_score_is_rejected(score):
    with pytest.raises(InvalidScoreError):
        TierClassifier().classify(score)


def test_custom_thresholds_are_used():
    classifier = TierClassifier(TierThresholds(low_max=20.0, medium_max=50.0))
    assert classifier.classify(25) == RiskTier.MEDIUM
    assert classifier.classify(50.5) == RiskTier.HIGH


def test_non_monotonic_thresholds_are_rejected():
    with pytest.raises(ConfigurationError):
        TierClassifier(TierThresholds(low_max=70.0, medium_max=30.0))


def test_weight_sum_rounding_above_hundred_is_high():
    assert TierClassifier().classify(100.00000005) == RiskTier.HIGH
    with pytest.raises(InvalidScoreError):
        TierClassifier().classify(100.001)
