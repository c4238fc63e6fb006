from __future__ import annotations

from typing import Any, Dict, List

import streamlit as st

from risk_check.core.assessment_engine import build_engine
from risk_check.core.assessment_types import RiskAssessmentResult, audit_trail_to_list
from risk_check.core.errors import ScoringError
from risk_check.core.scoring_config import (
    DEFAULT_SCORING_CONFIG,
    FALLBACK_STRATEGIES,
    ScoringConfig,
)
from risk_check.domain.sources import (
    SOURCE_DISPLAY_NAMES,
    SOURCE_ORDER,
    partial_display_name,
)

APP_TITLE = "Risk Scoring Transparency"

PARTIAL_CHOICES = [
    "sanctions-timeout",
    "pep-timeout",
    "adverse-media-timeout",
    "internal-history-timeout",
    "country-data-timeout",
    "compliance-timeout",
]


def _format_score(value: float) -> str:
    return f"{float(value):.2f}".rstrip("0").rstrip(".")


def _tier_label(tier_value: str) -> str:
    v = (tier_value or "").strip().lower()
    if v in {"low", "medium", "high"}:
        return f"{v.upper()} RISK"
    return "UNKNOWN"


def methodology_rows(config: ScoringConfig) -> List[Dict[str, Any]]:
    return [
        {
            "Source": SOURCE_DISPLAY_NAMES[s],
            "Weight": f"{round(config.weight(s) * 100)}%",
            "Fallback when unavailable": _format_score(config.fallback_for(s)),
        }
        for s in SOURCE_ORDER
    ]


def tier_range_rows(config: ScoringConfig) -> List[Dict[str, str]]:
    t = config.thresholds
    return [
        {"Tier": "Low", "Range": f"0 - {_format_score(t.low_max)}"},
        {"Tier": "Medium", "Range": f"{_format_score(t.low_max + 0.01)} - {_format_score(t.medium_max)}"},
        {"Tier": "High", "Range": f"{_format_score(t.medium_max + 0.01)} - 100"},
    ]


def _render_methodology(config: ScoringConfig) -> None:
    st.subheader("Methodology")
    st.dataframe(methodology_rows(config), width="stretch")
    st.dataframe(tier_range_rows(config), width="stretch")
    st.caption(f"Config version: {config.config_version} · fallback strategy: {config.fallback_strategy}")


def _render_result(output: RiskAssessmentResult) -> None:
    st.divider()
    st.subheader("Assessment outcome")

    col_a, col_b, col_c = st.columns([1, 1, 1])
    with col_a:
        st.metric("Overall score", _format_score(output.overall_score))
    with col_b:
        st.metric("Tier", _tier_label(output.tier.value))
    with col_c:
        st.metric("Ruleset", f"v{output.ruleset_version}")

    if output.partial_sources:
        st.warning(" ".join(output.warnings))
        st.write("Unavailable sources:")
        for p in output.partial_sources:
            st.write(f"- {partial_display_name(p)}")

    st.divider()
    st.subheader("Score breakdown")

    rows = []
    for c in output.contributions:
        rows.append(
            {
                "Source": SOURCE_DISPLAY_NAMES[c.source],
                "Raw score": c.raw_score,
                "Weight": f"{round(c.weight * 100)}%",
                "Contribution": round(c.weighted_contribution, 2),
                "Status": "Partial" if c.partial else "Available",
            }
        )
    st.dataframe(rows, width="stretch")

    st.divider()
    st.subheader("Top risks and recommendations")

    if output.top_risks:
        for r in output.top_risks:
            st.write(f"- **{r.title}** ({r.severity.value}): {r.description}")
    else:
        st.write("No individual factor above the reporting threshold.")

    for rec in output.recommendations:
        st.write(f"- {rec}")
    st.caption(output.penalty_range)

    st.divider()
    st.subheader("Audit and reproducibility")
    st.json(
        {
            "fingerprint": {
                "input_hash": output.fingerprint.input_hash,
                "config_hash": output.fingerprint.config_hash,
                "model_hash": output.fingerprint.model_hash,
            }
            if output.fingerprint
            else {},
            "audit_trail": audit_trail_to_list(output),
        }
    )


def main() -> None:
    st.set_page_config(page_title=APP_TITLE, layout="wide")
    st.title(APP_TITLE)

    with st.sidebar:
        st.subheader("Scoring policy")
        strategy = st.selectbox("Fallback strategy", list(FALLBACK_STRATEGIES), index=0)
        ruleset_version = st.number_input("Ruleset version", value=1, min_value=1, step=1)

    config = DEFAULT_SCORING_CONFIG.with_overrides({"fallback": {"strategy": strategy}})
    _render_methodology(config)

    st.divider()
    st.subheader("Raw scores")

    partial = st.multiselect("Partial sources", PARTIAL_CHOICES, default=[])

    breakdown: Dict[str, Any] = {}
    cols = st.columns(len(SOURCE_ORDER))
    for col, source in zip(cols, SOURCE_ORDER):
        with col:
            missing = st.checkbox("No data", key=f"missing_{source.value}")
            value = st.number_input(
                SOURCE_DISPLAY_NAMES[source],
                value=0.0,
                min_value=0.0,
                max_value=100.0,
                step=1.0,
                key=f"score_{source.value}",
            )
            breakdown[source.value] = None if missing else float(value)

    if not st.button("Run assessment"):
        st.info("Enter raw scores and click Run assessment.")
        return

    try:
        output = build_engine(config).run(breakdown, partial, int(ruleset_version))
    except ScoringError as e:
        st.error(f"Assessment rejected: {e}")
        return

    _render_result(output)


if __name__ == "__main__":
    main()
