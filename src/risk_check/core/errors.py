from __future__ import annotations


class ScoringError(ValueError):
    """Base class for everything the scoring core rejects."""


class InvalidScoreError(ScoringError):
    """A raw or overall score is non-finite or outside [0, 100]."""


class InvalidBreakdownError(ScoringError):
    """The breakdown is malformed (unknown or duplicated source)."""


class MissingSourceError(ScoringError):
    """
    A source is neither scored nor reported as partial.

    This is a contract violation by the provider-integration layer, not an
    outage, so it is never defaulted.
    """

    def __init__(self, missing):
        self.missing = tuple(missing)
        names = ", ".join(str(getattr(s, "value", s)) for s in self.missing)
        super().__init__(f"Breakdown is missing sources not reported as partial: {names}")


class ConfigurationError(ScoringError):
    """Weights, thresholds or fallback settings are invalid."""
