import pytest

from risk_check.domain.sources import (
    RiskSource,
    parse_source,
    partial_display_name,
    source_for_partial_id,
)


@pytest.mark.parametrize(
    "identifier, source",
    [
        ("sanctions-timeout", RiskSource.SANCTIONS),
        ("sanctions", RiskSource.SANCTIONS),
        ("pep-timeout", RiskSource.PEP),
        ("adverse-media-timeout", RiskSource.ADVERSE_MEDIA),
        ("adverse_media", RiskSource.ADVERSE_MEDIA),
        ("adverseMedia", RiskSource.ADVERSE_MEDIA),
        ("internal_history", RiskSource.INTERNAL_HISTORY),
        ("country-data-timeout", RiskSource.COUNTRY_BASELINE),
        ("country_baseline", RiskSource.COUNTRY_BASELINE),
    ],
)
def test_partial_identifiers_map_to_sources(identifier, source):
    assert source_for_partial_id(identifier) == source


def test_unrelated_identifier_maps_to_nothing():
    assert source_for_partial_id("compliance-timeout") is None
    assert source_for_partial_id("") is None


def test_breakdown_sources_are_strict():
    assert parse_source("adverseMedia") == RiskSource.ADVERSE_MEDIA
    with pytest.raises(ValueError):
        parse_source("adverse_media")


def test_display_names():
    assert partial_display_name("sanctions-timeout") == "Sanctions screening"
    assert partial_display_name("compliance-timeout") == "compliance"
