from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Optional


class RiskSource(str, Enum):
    SANCTIONS = "sanctions"
    PEP = "pep"
    ADVERSE_MEDIA = "adverseMedia"
    INTERNAL_HISTORY = "internalHistory"
    COUNTRY_BASELINE = "countryBaseline"


# Fixed evaluation order. Reports and tie-breaks follow it.
SOURCE_ORDER = (
    RiskSource.SANCTIONS,
    RiskSource.PEP,
    RiskSource.ADVERSE_MEDIA,
    RiskSource.INTERNAL_HISTORY,
    RiskSource.COUNTRY_BASELINE,
)


SOURCE_DISPLAY_NAMES: Dict[RiskSource, str] = {
    RiskSource.SANCTIONS: "Sanctions screening",
    RiskSource.PEP: "PEP screening",
    RiskSource.ADVERSE_MEDIA: "Adverse media monitoring",
    RiskSource.INTERNAL_HISTORY: "Internal risk history",
    RiskSource.COUNTRY_BASELINE: "Country risk baseline",
}


SOURCE_DESCRIPTIONS: Dict[RiskSource, str] = {
    RiskSource.SANCTIONS: "Potential sanctions list matches requiring investigation and verification",
    RiskSource.PEP: "Politically Exposed Person status requiring enhanced due diligence",
    RiskSource.ADVERSE_MEDIA: "Negative media coverage indicating potential reputational risks",
    RiskSource.INTERNAL_HISTORY: "Previous compliance issues or risk factors in our records",
    RiskSource.COUNTRY_BASELINE: "Country-specific regulatory and compliance risks",
}


# Keys are normalised: lower case, no separators.
_SOURCE_ALIASES: Dict[str, RiskSource] = {
    "sanctions": RiskSource.SANCTIONS,
    "sanction": RiskSource.SANCTIONS,
    "pep": RiskSource.PEP,
    "adversemedia": RiskSource.ADVERSE_MEDIA,
    "media": RiskSource.ADVERSE_MEDIA,
    "internalhistory": RiskSource.INTERNAL_HISTORY,
    "history": RiskSource.INTERNAL_HISTORY,
    "countrybaseline": RiskSource.COUNTRY_BASELINE,
    "countrydata": RiskSource.COUNTRY_BASELINE,
    "country": RiskSource.COUNTRY_BASELINE,
}

_SUFFIXES = ("timeout", "error", "failed", "unavailable")


def parse_source(value: str) -> RiskSource:
    """Strict lookup used for breakdown entries: only the enum values are accepted."""
    try:
        return RiskSource(str(value))
    except ValueError:
        allowed = ", ".join(s.value for s in SOURCE_ORDER)
        raise ValueError(f"Unknown risk source: {value!r} (expected one of: {allowed})") from None


def source_for_partial_id(identifier: str) -> Optional[RiskSource]:
    """
    Map a partial-source identifier reported by the provider layer onto a source.

    Providers report identifiers such as ``sanctions-timeout``, ``adverse_media``
    or ``country-data-timeout``. Returns None when the identifier names nothing
    we score (for example ``compliance-timeout``).
    """
    text = str(identifier or "").strip()
    if not text:
        return None

    parts = [p for p in re.split(r"[-_\s]+", text) if p]
    if parts and parts[-1].lower() in _SUFFIXES:
        parts = parts[:-1]

    key = "".join(parts).lower()
    return _SOURCE_ALIASES.get(key)


def partial_display_name(identifier: str) -> str:
    source = source_for_partial_id(identifier)
    if source is not None:
        return SOURCE_DISPLAY_NAMES[source]
    text = str(identifier or "")
    return text.replace("-timeout", "").replace("-", " ").strip()
