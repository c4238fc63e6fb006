from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class FactorScoreIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source: str = Field(..., min_length=1)
    raw_score: Optional[float] = Field(default=None, alias="rawScore")


class AssessmentRequest(BaseModel):
    """
    External JSON accepted by the CLI and the transparency app.

    Score ranges are left to the scoring core, which rejects rather than
    clamps; this model only checks shape.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    breakdown: Union[Dict[str, Optional[float]], List[FactorScoreIn]]
    partial_sources: List[str] = Field(default_factory=list, alias="partialSources")
    ruleset_version: Optional[int] = Field(default=None, ge=1, alias="rulesetVersion")
    country_iso: Optional[str] = Field(default=None, alias="countryIso")
    scoring_config: Optional[str] = Field(default=None, alias="scoringConfig")

    @field_validator("partial_sources")
    @classmethod
    def validate_partial_sources(cls, v: List[str]) -> List[str]:
        if any(not str(p).strip() for p in v):
            raise ValueError("Partial source identifiers must be non-empty.")
        return v

    @field_validator("country_iso")
    @classmethod
    def validate_country_iso(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        text = v.strip().upper()
        if not (2 <= len(text) <= 3 and text.isalpha()):
            raise ValueError("Country ISO code must be 2 or 3 letters.")
        return text

    @model_validator(mode="after")
    def validate_version_source(self) -> "AssessmentRequest":
        if self.ruleset_version is None and self.country_iso is None:
            raise ValueError("Either rulesetVersion or countryIso is required.")
        return self

    def breakdown_payload(self) -> Union[Dict[str, Optional[float]], List[Dict[str, object]]]:
        if isinstance(self.breakdown, dict):
            return dict(self.breakdown)
        return [{"source": f.source, "rawScore": f.raw_score} for f in self.breakdown]
