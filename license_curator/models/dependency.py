"""Dependency models consumed from a completed scan."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from license_curator.constants import NO_ASSERTION
from license_curator.models.base import CaseInsensitiveEnum


class AiConfidence(CaseInsensitiveEnum):
    """Confidence reported by the license suggestion engine."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class AiSuggestion(BaseModel):
    """An AI-suggested license for a dependency.

    Produced outside this package and consumed as opaque input.
    """

    model_config = {"extra": "forbid"}

    suggested_license: str = Field(description="Suggested license identifier")
    confidence: AiConfidence = Field(description="Confidence of the suggestion")
    reasoning: str = Field(default="", description="Why the license was suggested")
    spdx_id: Optional[str] = Field(
        default=None, description="SPDX identifier of the suggestion, if any"
    )
    alternatives: list[str] = Field(
        default_factory=list, description="Other plausible licenses"
    )


class Dependency(BaseModel):
    """A single dependency found by a scan.

    Read-only to the core: evaluation and curation never modify it.
    """

    model_config = {"extra": "forbid", "frozen": True}

    id: str = Field(description="Unique dependency identifier, e.g. 'PyPI::requests:2.31.0'")
    name: str = Field(description="Package name")
    version: str = Field(default="", description="Package version")
    scope: Optional[str] = Field(
        default=None, description="Dependency scope such as 'runtime' or 'test'"
    )
    declared_licenses: list[str] = Field(
        default_factory=list, description="Licenses declared in package metadata"
    )
    detected_licenses: list[str] = Field(
        default_factory=list, description="Licenses detected in source files"
    )
    concluded_license: Optional[str] = Field(
        default=None, description="License concluded by the scanner"
    )
    ai_suggestion: Optional[AiSuggestion] = Field(
        default=None, description="AI-suggested license, if requested"
    )

    @property
    def effective_license(self) -> str:
        """License representing this dependency.

        Precedence: concluded > first declared > first detected > NOASSERTION.
        """
        return effective_license(
            self.concluded_license, self.declared_licenses, self.detected_licenses
        )


def effective_license(
    concluded: Optional[str],
    declared: list[str],
    detected: list[str],
) -> str:
    """Pick the effective license from the scanner's license fields.

    Blank values are skipped.
    """
    if concluded and concluded.strip():
        return concluded.strip()
    for candidates in (declared, detected):
        for value in candidates:
            if value and value.strip():
                return value.strip()
    return NO_ASSERTION
