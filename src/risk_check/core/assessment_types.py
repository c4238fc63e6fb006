from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from risk_check.domain.sources import RiskSource

PARTIAL_SOURCES_WARNING = (
    "Some data sources did not respond in time; the risk score may be higher than calculated."
)


class RiskTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class RiskFactorScore:
    source: RiskSource
    raw_score: float


@dataclass(frozen=True)
class FactorContribution:
    source: RiskSource
    raw_score: float
    weight: float
    weighted_contribution: float
    partial: bool = False


@dataclass(frozen=True)
class ResolvedBreakdown:
    """Complete five-source breakdown after the partial-source policy ran."""

    scores: Tuple[RiskFactorScore, ...]
    partial_sources: Tuple[str, ...]
    degraded_sources: Tuple[RiskSource, ...] = ()
    substituted_sources: Tuple[RiskSource, ...] = ()
    unmapped_partial_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TopRisk:
    title: str
    description: str
    severity: RiskTier
    source: RiskSource
    raw_score: float


@dataclass(frozen=True)
class AuditFingerprint:
    input_hash: str
    config_hash: str
    model_hash: str = ""


@dataclass(frozen=True)
class RiskAssessmentResult:
    overall_score: float
    tier: RiskTier
    breakdown: Tuple[RiskFactorScore, ...]
    partial_sources: Tuple[str, ...]
    ruleset_version: int

    contributions: Tuple[FactorContribution, ...] = ()

    top_risks: Tuple[TopRisk, ...] = ()
    recommendations: Tuple[str, ...] = ()
    penalty_range: str = ""

    audit_trail: Tuple[Mapping[str, Any], ...] = ()
    fingerprint: Optional[AuditFingerprint] = None

    warnings: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "audit_trail", tuple(_freeze(e) for e in self.audit_trail))

    @property
    def is_partial(self) -> bool:
        return len(self.partial_sources) > 0

    def score_for(self, source: RiskSource) -> float:
        for item in self.breakdown:
            if item.source == source:
                return item.raw_score
        raise KeyError(source)


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


def audit_trail_to_list(result: RiskAssessmentResult) -> List[Dict[str, Any]]:
    """Plain, JSON-ready copy of the result's read-only audit entries."""
    return [_thaw(entry) for entry in result.audit_trail]


def assessment_to_dict(result: RiskAssessmentResult) -> Dict[str, Any]:
    """JSON shape consumed by the dashboard (camelCase keys)."""
    contributions: List[Dict[str, Any]] = [
        {
            "source": c.source.value,
            "rawScore": c.raw_score,
            "weight": c.weight,
            "weightedContribution": c.weighted_contribution,
            "partial": c.partial,
        }
        for c in result.contributions
    ]

    fp = result.fingerprint
    return {
        "overallScore": result.overall_score,
        "tier": result.tier.value,
        "breakdown": [{"source": b.source.value, "rawScore": b.raw_score} for b in result.breakdown],
        "partialSources": list(result.partial_sources),
        "rulesetVersion": result.ruleset_version,
        "contributions": contributions,
        "topRisks": [
            {"title": r.title, "description": r.description, "severity": r.severity.value}
            for r in result.top_risks
        ],
        "recommendations": list(result.recommendations),
        "penaltyRange": result.penalty_range,
        "warnings": list(result.warnings),
        "audit": {
            "trail": audit_trail_to_list(result),
            "fingerprint": {
                "input_hash": fp.input_hash,
                "config_hash": fp.config_hash,
                "model_hash": fp.model_hash,
            }
            if fp
            else {},
        },
    }
