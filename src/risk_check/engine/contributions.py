from __future__ import annotations

from typing import Iterable, List, Sequence

from risk_check.core.assessment_types import FactorContribution, RiskFactorScore
from risk_check.core.scoring_config import DEFAULT_SCORING_CONFIG, ScoringConfig
from risk_check.domain.sources import RiskSource


class ContributionReporter:
    def __init__(self, config: ScoringConfig = DEFAULT_SCORING_CONFIG):
        self.config = config

    def report(
        self,
        scores: Sequence[RiskFactorScore],
        degraded_sources: Iterable[RiskSource] = (),
    ) -> List[FactorContribution]:
        degraded = set(degraded_sources)
        contributions: List[FactorContribution] = []

        for item in scores:
            weight = self.config.weight(item.source)
            contributions.append(
                FactorContribution(
                    source=item.source,
                    raw_score=float(item.raw_score),
                    weight=weight,
                    weighted_contribution=float(item.raw_score) * weight,
                    partial=item.source in degraded,
                )
            )

        return contributions


def total_contribution(contributions: Iterable[FactorContribution]) -> float:
    total = 0.0
    for c in contributions:
        total += c.weighted_contribution
    return total
