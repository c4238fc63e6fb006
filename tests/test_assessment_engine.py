import dataclasses

import pytest

from risk_check.core.assessment_engine import AssessmentEngine, build_engine, compute_risk_assessment
from risk_check.core.assessment_types import (
    PARTIAL_SOURCES_WARNING,
    RiskFactorScore,
    RiskTier,
    assessment_to_dict,
)
from risk_check.core.errors import MissingSourceError, ScoringError
from risk_check.core.scoring_config import DEFAULT_SCORING_CONFIG
from risk_check.domain.sources import RiskSource
from risk_check.engine.classifier import TierClassifier
from risk_check.engine.combinator import WeightedScoreCombinator
from risk_check.engine.contributions import ContributionReporter, total_contribution
from risk_check.engine.degradation import PartialSourcePolicy


def _breakdown(sanctions=0.0, pep=0.0, adverse=0.0, history=0.0, country=0.0):
    return {
        "sanctions": sanctions,
        "pep": pep,
        "adverseMedia": adverse,
        "internalHistory": history,
        "countryBaseline": country,
    }


def test_sanctions_and_pep_maxed_is_medium():
    result = compute_risk_assessment(_breakdown(sanctions=100, pep=100), [], 1)
    assert result.overall_score == pytest.approx(60.0)
    assert result.tier == RiskTier.MEDIUM


def test_all_zero_is_low():
    result = compute_risk_assessment(_breakdown(), [], 1)
    assert result.overall_score == 0
    assert result.tier == RiskTier.LOW
    assert result.warnings == ()


def test_contributions_sum_to_overall():
    result = compute_risk_assessment(_breakdown(12.5, 33.3, 71.1, 5.0, 88.8), [], 3)
    assert total_contribution(result.contributions) == pytest.approx(result.overall_score, abs=1e-9)
    assert [c.source for c in result.contributions] == [b.source for b in result.breakdown]


def test_identical_inputs_give_identical_results():
    args = (_breakdown(40, 10, 20, 30, 50), ["pep-timeout"], 2)
    first = compute_risk_assessment(*args)
    second = compute_risk_assessment(*args)
    assert first == second
    assert first.fingerprint.input_hash == second.fingerprint.input_hash


def test_partial_source_is_surfaced_and_does_not_abort():
    result = compute_risk_assessment(_breakdown(sanctions=20), ["sanctions-timeout"], 1)
    assert result.partial_sources == ("sanctions-timeout",)
    assert result.is_partial
    assert PARTIAL_SOURCES_WARNING in result.warnings
    sanctions = [c for c in result.contributions if c.source == RiskSource.SANCTIONS][0]
    assert sanctions.partial is True


def test_missing_partial_score_uses_fallback():
    breakdown = _breakdown()
    del breakdown["sanctions"]
    result = compute_risk_assessment(breakdown, ["sanctions-timeout"], 1)
    assert result.score_for(RiskSource.SANCTIONS) == 50.0
    assert result.overall_score == pytest.approx(50.0 * 0.45)


def test_missing_source_propagates():
    breakdown = _breakdown()
    del breakdown["countryBaseline"]
    with pytest.raises(MissingSourceError):
        compute_risk_assessment(breakdown, [], 1)


@pytest.mark.parametrize("version", [0, -1, 1.5, "1", True])
def test_invalid_ruleset_version_is_rejected(version):
    with pytest.raises(ScoringError):
        compute_risk_assessment(_breakdown(), [], version)


def test_result_is_immutable():
    result = compute_risk_assessment(_breakdown(), [], 1)
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.overall_score = 99.0


def test_engine_runs_without_optional_components():
    engine = AssessmentEngine(
        config=DEFAULT_SCORING_CONFIG,
        degradation=PartialSourcePolicy(),
        combinator=WeightedScoreCombinator(),
        classifier=TierClassifier(),
        contributions=ContributionReporter(),
    )
    scores = [RiskFactorScore(s, 80.0) for s in RiskSource]
    result = engine.run(scores, [], 4)

    assert result.tier == RiskTier.HIGH
    assert result.top_risks == ()
    assert result.fingerprint is None
    assert result.ruleset_version == 4


def test_overrides_change_weights():
    config = DEFAULT_SCORING_CONFIG.with_overrides(
        {"weights": {"sanctions": 0.25, "countryBaseline": 0.30}}
    )
    result = build_engine(config).run(_breakdown(country=90), [], 2)
    assert result.overall_score == pytest.approx(27.0)
    assert result.tier == RiskTier.LOW


def test_weights_at_sum_tolerance_score_all_hundred_as_high():
    config = DEFAULT_SCORING_CONFIG.with_overrides({"weights": {"sanctions": 0.4500000005}})
    scores = [RiskFactorScore(s, 100.0) for s in RiskSource]

    result = build_engine(config).run(scores, [], 1)

    assert result.overall_score == pytest.approx(100.0)
    assert result.tier == RiskTier.HIGH


def test_result_dict_uses_dashboard_keys():
    payload = assessment_to_dict(compute_risk_assessment(_breakdown(sanctions=100, pep=100), ["pep-timeout"], 7))

    assert payload["overallScore"] == pytest.approx(60.0)
    assert payload["tier"] == "medium"
    assert payload["partialSources"] == ["pep-timeout"]
    assert payload["rulesetVersion"] == 7
    assert {b["source"] for b in payload["breakdown"]} == {s.value for s in RiskSource}
    assert payload["audit"]["fingerprint"]["input_hash"]
