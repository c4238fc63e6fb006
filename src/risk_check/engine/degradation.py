from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Sequence, Union

from risk_check.core.assessment_types import ResolvedBreakdown, RiskFactorScore
from risk_check.core.errors import InvalidBreakdownError, MissingSourceError
from risk_check.core.scoring_config import DEFAULT_SCORING_CONFIG, ScoringConfig
from risk_check.domain.sources import SOURCE_ORDER, RiskSource, parse_source, source_for_partial_id
from risk_check.engine.combinator import validate_raw_score

logger = logging.getLogger(__name__)

BreakdownInput = Union[Sequence[RiskFactorScore], Sequence[Mapping[str, Any]], Mapping[Any, Any]]


def coerce_breakdown(breakdown: BreakdownInput) -> List[RiskFactorScore]:
    """
    Accepts the shapes the provider layer produces:

    - a list of RiskFactorScore
    - a list of ``{"source": ..., "rawScore": ...}`` dicts
    - a mapping of source -> raw score (``None`` meaning "no data")

    Entries without a score are dropped here; the policy decides whether
    that is a partial source or a missing one.
    """
    if breakdown is None:
        return []

    items: List[RiskFactorScore] = []
    seen: set = set()

    if isinstance(breakdown, Mapping):
        pairs = list(breakdown.items())
    else:
        pairs = []
        for entry in breakdown:
            if isinstance(entry, RiskFactorScore):
                pairs.append((entry.source, entry.raw_score))
            elif isinstance(entry, Mapping):
                if "source" not in entry:
                    raise InvalidBreakdownError(f"Breakdown entry has no source: {dict(entry)!r}")
                raw = entry.get("rawScore", entry.get("raw_score"))
                pairs.append((entry["source"], raw))
            else:
                raise InvalidBreakdownError(f"Unsupported breakdown entry: {entry!r}")

    for key, raw in pairs:
        try:
            source = key if isinstance(key, RiskSource) else parse_source(key)
        except ValueError as exc:
            raise InvalidBreakdownError(str(exc)) from None

        if source in seen:
            raise InvalidBreakdownError(f"Duplicate source in breakdown: {source.value}")
        seen.add(source)

        if raw is None:
            continue
        items.append(RiskFactorScore(source=source, raw_score=validate_raw_score(raw, f"{source.value} rawScore")))

    return items


class PartialSourcePolicy:
    """
    Completes a breakdown when some providers did not answer in time.

    Partial identifiers are kept verbatim for the result. A partial source
    with no score gets the configured fallback; one that still carries a
    score keeps it as a flagged estimate. A source with neither a score nor
    a partial flag is an integration error and is raised.
    """

    def __init__(self, config: ScoringConfig = DEFAULT_SCORING_CONFIG):
        self.config = config

    def resolve(self, breakdown: BreakdownInput, partial_sources: Sequence[str]) -> ResolvedBreakdown:
        if isinstance(partial_sources, str):
            raise InvalidBreakdownError("partial_sources must be a list of identifiers, not a string")

        reported = tuple(str(p) for p in (partial_sources or ()))
        scored: Dict[RiskSource, float] = {
            item.source: item.raw_score for item in coerce_breakdown(breakdown)
        }

        degraded: List[RiskSource] = []
        unmapped: List[str] = []
        for identifier in reported:
            source = source_for_partial_id(identifier)
            if source is None:
                unmapped.append(identifier)
                logger.warning("Partial source %r does not map to a scored source", identifier)
                continue
            if source not in degraded:
                degraded.append(source)

        missing = [s for s in SOURCE_ORDER if s not in scored and s not in degraded]
        if missing:
            raise MissingSourceError(missing)

        substituted: List[RiskSource] = []
        scores: List[RiskFactorScore] = []
        for source in SOURCE_ORDER:
            if source in scored:
                value = scored[source]
            else:
                value = self.config.fallback_for(source)
                substituted.append(source)
                logger.warning(
                    "Using %s fallback %.2f for unavailable source %s",
                    self.config.fallback_strategy,
                    value,
                    source.value,
                )
            scores.append(RiskFactorScore(source=source, raw_score=value))

        return ResolvedBreakdown(
            scores=tuple(scores),
            partial_sources=reported,
            degraded_sources=tuple(s for s in SOURCE_ORDER if s in degraded),
            substituted_sources=tuple(substituted),
            unmapped_partial_ids=tuple(unmapped),
        )
