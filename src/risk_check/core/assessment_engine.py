from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Protocol, Sequence

from risk_check.core.assessment_types import (
    PARTIAL_SOURCES_WARNING,
    AuditFingerprint,
    FactorContribution,
    ResolvedBreakdown,
    RiskAssessmentResult,
    RiskFactorScore,
    RiskTier,
    TopRisk,
)
from risk_check.core.errors import ScoringError
from risk_check.core.scoring_config import DEFAULT_SCORING_CONFIG, ScoringConfig
from risk_check.domain.sources import RiskSource
from risk_check.engine.audit_trail import AssessmentAuditTrail
from risk_check.engine.classifier import TierClassifier
from risk_check.engine.combinator import WeightedScoreCombinator
from risk_check.engine.contributions import ContributionReporter
from risk_check.engine.degradation import PartialSourcePolicy
from risk_check.engine.insights import AssessmentInsights

logger = logging.getLogger(__name__)


class DegradationComponent(Protocol):
    def resolve(self, breakdown: Any, partial_sources: Sequence[str]) -> ResolvedBreakdown:
        raise NotImplementedError


class CombinatorComponent(Protocol):
    def combine(self, scores: Sequence[RiskFactorScore]) -> float:
        raise NotImplementedError


class ClassifierComponent(Protocol):
    def classify(self, score: float) -> RiskTier:
        raise NotImplementedError


class ContributionComponent(Protocol):
    def report(
        self,
        scores: Sequence[RiskFactorScore],
        degraded_sources: Iterable[RiskSource] = (),
    ) -> List[FactorContribution]:
        raise NotImplementedError


class InsightsComponent(Protocol):
    def top_risks(self, scores: Sequence[RiskFactorScore]) -> List[TopRisk]:
        raise NotImplementedError

    def recommendations(
        self,
        scores: Sequence[RiskFactorScore],
        overall_score: float,
        has_partial: bool = False,
    ) -> List[str]:
        raise NotImplementedError

    def penalty_range(self, tier: RiskTier) -> str:
        raise NotImplementedError


class AuditComponent(Protocol):
    def fingerprint(
        self,
        resolved: ResolvedBreakdown,
        ruleset_version: int,
        config: ScoringConfig,
    ) -> AuditFingerprint:
        raise NotImplementedError

    def build_audit(
        self,
        overall_score: float,
        tier: RiskTier,
        contributions: Sequence[FactorContribution],
        resolved: ResolvedBreakdown,
        ruleset_version: int,
    ) -> List[dict]:
        raise NotImplementedError


def _validate_ruleset_version(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ScoringError(f"ruleset_version must be an integer, got {value!r}")
    if value < 1:
        raise ScoringError(f"ruleset_version must be >= 1, got {value!r}")
    return value


@dataclass
class AssessmentEngine:
    config: ScoringConfig
    degradation: DegradationComponent
    combinator: CombinatorComponent
    classifier: ClassifierComponent
    contributions: ContributionComponent
    insights: Optional[InsightsComponent] = None
    audit: Optional[AuditComponent] = None

    def run(
        self,
        breakdown: Any,
        partial_sources: Sequence[str],
        ruleset_version: int,
    ) -> RiskAssessmentResult:
        version = _validate_ruleset_version(ruleset_version)

        resolved = self.degradation.resolve(breakdown, partial_sources)
        overall = self.combinator.combine(resolved.scores)
        tier = self.classifier.classify(overall)
        contributions = self.contributions.report(resolved.scores, resolved.degraded_sources)

        warnings: List[str] = []
        if resolved.partial_sources:
            warnings.append(PARTIAL_SOURCES_WARNING)

        top_risks: List[TopRisk] = []
        recommendations: List[str] = []
        penalty_range = ""
        if self.insights is not None:
            top_risks = self.insights.top_risks(resolved.scores)
            recommendations = self.insights.recommendations(
                resolved.scores, overall, has_partial=bool(resolved.partial_sources)
            )
            penalty_range = self.insights.penalty_range(tier)

        audit_trail: List[dict] = []
        fingerprint: Optional[AuditFingerprint] = None
        if self.audit is not None:
            audit_trail = self.audit.build_audit(overall, tier, contributions, resolved, version)
            fingerprint = self.audit.fingerprint(resolved, version, self.config)

        logger.info(
            "Risk assessment completed: score=%.2f tier=%s ruleset=v%d partial=%s",
            overall,
            tier.value,
            version,
            list(resolved.partial_sources),
        )

        return RiskAssessmentResult(
            overall_score=overall,
            tier=tier,
            breakdown=resolved.scores,
            partial_sources=resolved.partial_sources,
            ruleset_version=version,
            contributions=tuple(contributions),
            top_risks=tuple(top_risks),
            recommendations=tuple(recommendations),
            penalty_range=penalty_range,
            audit_trail=tuple(audit_trail),
            fingerprint=fingerprint,
            warnings=tuple(warnings),
        )


def build_engine(config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> AssessmentEngine:
    return AssessmentEngine(
        config=config,
        degradation=PartialSourcePolicy(config),
        combinator=WeightedScoreCombinator(config),
        classifier=TierClassifier(config.thresholds),
        contributions=ContributionReporter(config),
        insights=AssessmentInsights(),
        audit=AssessmentAuditTrail(),
    )


def compute_risk_assessment(
    breakdown: Any,
    partial_sources: Sequence[str],
    ruleset_version: int,
    config: Optional[ScoringConfig] = None,
) -> RiskAssessmentResult:
    """
    Score one assessment.

    ``breakdown`` is a list of RiskFactorScore, a list of
    ``{"source", "rawScore"}`` dicts or a source -> score mapping. Sources
    listed in ``partial_sources`` may be absent; every other source must be
    present. The result is a fresh immutable value; nothing is cached.
    """
    engine = build_engine(config or DEFAULT_SCORING_CONFIG)
    return engine.run(breakdown, partial_sources, ruleset_version)
