from __future__ import annotations

import hashlib
import json
from typing import Any, Dict, List, Sequence

from risk_check.core.assessment_types import (
    AuditFingerprint,
    FactorContribution,
    ResolvedBreakdown,
    RiskTier,
)
from risk_check.core.scoring_config import ScoringConfig

MODEL_REF = "risk-check-weighted-v1"


def canonical_json(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)


def sha256_of(obj: Any) -> str:
    return hashlib.sha256(canonical_json(obj).encode("utf-8")).hexdigest()


class AssessmentAuditTrail:
    def __init__(self, model_ref: str = MODEL_REF):
        self.model_ref = model_ref

    def fingerprint(
        self,
        resolved: ResolvedBreakdown,
        ruleset_version: int,
        config: ScoringConfig,
    ) -> AuditFingerprint:
        inputs = {
            "breakdown": {s.source.value: s.raw_score for s in resolved.scores},
            "partial_sources": list(resolved.partial_sources),
            "ruleset_version": int(ruleset_version),
        }
        return AuditFingerprint(
            input_hash=sha256_of(inputs),
            config_hash=sha256_of(config.to_dict()),
            model_hash=self.model_ref,
        )

    def build_audit(
        self,
        overall_score: float,
        tier: RiskTier,
        contributions: Sequence[FactorContribution],
        resolved: ResolvedBreakdown,
        ruleset_version: int,
    ) -> List[Dict[str, Any]]:
        entries: List[Dict[str, Any]] = [
            {"key": "overall_score", "value": overall_score},
            {"key": "tier", "value": tier.value},
            {
                "key": "contributions",
                "value": {c.source.value: c.weighted_contribution for c in contributions},
            },
            {"key": "ruleset_version", "value": int(ruleset_version)},
        ]

        if resolved.partial_sources:
            entries.append({"key": "partial_sources", "value": list(resolved.partial_sources)})
        if resolved.substituted_sources:
            entries.append(
                {
                    "key": "fallback_substituted",
                    "value": [s.value for s in resolved.substituted_sources],
                }
            )
        if resolved.unmapped_partial_ids:
            entries.append({"key": "unmapped_partial_ids", "value": list(resolved.unmapped_partial_ids)})

        return entries
