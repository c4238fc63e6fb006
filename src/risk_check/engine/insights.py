from __future__ import annotations

from typing import Dict, List, Sequence

from risk_check.core.assessment_types import RiskFactorScore, RiskTier, TopRisk
from risk_check.domain.sources import SOURCE_DESCRIPTIONS, SOURCE_ORDER, RiskSource

_TITLES: Dict[RiskSource, str] = {
    RiskSource.SANCTIONS: "Sanctions",
    RiskSource.PEP: "PEP",
    RiskSource.ADVERSE_MEDIA: "Adverse Media",
    RiskSource.INTERNAL_HISTORY: "Internal History",
    RiskSource.COUNTRY_BASELINE: "Country Baseline",
}

# (source, raw score must exceed, recommendation)
_SOURCE_RECOMMENDATIONS = (
    (RiskSource.SANCTIONS, 30.0, "Conduct enhanced due diligence and sanctions screening"),
    (RiskSource.PEP, 30.0, "Implement PEP monitoring and reporting procedures"),
    (RiskSource.ADVERSE_MEDIA, 30.0, "Monitor adverse media mentions and establish reputational risk controls"),
    (RiskSource.INTERNAL_HISTORY, 30.0, "Review previous compliance issues and implement corrective measures"),
    (RiskSource.COUNTRY_BASELINE, 40.0, "Apply country-specific compliance requirements and enhanced monitoring"),
)

OVERSIGHT_SCORE = 50.0
OVERSIGHT_RECOMMENDATION = "Consider increased oversight and regular compliance reviews"
RERUN_RECOMMENDATION = "Re-run the assessment once all data sources are available"

PENALTY_RANGES: Dict[RiskTier, str] = {
    RiskTier.LOW: "$500 - $2,500 in potential fines for minor compliance issues",
    RiskTier.MEDIUM: "$2,500 - $25,000 in potential fines for moderate compliance violations",
    RiskTier.HIGH: "$25,000 - $500,000+ in potential fines for serious compliance violations",
}


def _severity(score: float) -> RiskTier:
    if score > 60:
        return RiskTier.HIGH
    if score > 30:
        return RiskTier.MEDIUM
    return RiskTier.LOW


class AssessmentInsights:
    def __init__(self, top_n: int = 3, min_score: float = 20.0):
        self.top_n = int(top_n)
        self.min_score = float(min_score)

    def top_risks(self, scores: Sequence[RiskFactorScore]) -> List[TopRisk]:
        order = {s: i for i, s in enumerate(SOURCE_ORDER)}
        ranked = sorted(scores, key=lambda x: (-float(x.raw_score), order[x.source]))

        risks: List[TopRisk] = []
        for item in ranked[: self.top_n]:
            if float(item.raw_score) <= self.min_score:
                continue
            risks.append(
                TopRisk(
                    title=f"{_TITLES[item.source]} Risk",
                    description=SOURCE_DESCRIPTIONS[item.source],
                    severity=_severity(float(item.raw_score)),
                    source=item.source,
                    raw_score=float(item.raw_score),
                )
            )
        return risks

    def recommendations(
        self,
        scores: Sequence[RiskFactorScore],
        overall_score: float,
        has_partial: bool = False,
    ) -> List[str]:
        by_source = {item.source: float(item.raw_score) for item in scores}
        out: List[str] = []

        for source, above, text in _SOURCE_RECOMMENDATIONS:
            if by_source.get(source, 0.0) > above:
                out.append(text)

        if float(overall_score) > OVERSIGHT_SCORE:
            out.append(OVERSIGHT_RECOMMENDATION)
        if has_partial:
            out.append(RERUN_RECOMMENDATION)

        return out

    def penalty_range(self, tier: RiskTier) -> str:
        return PENALTY_RANGES[tier]
