"""Models for violation explanations and license compatibility."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from license_curator.models.base import CaseInsensitiveEnum


class WhyNotType(CaseInsensitiveEnum):
    """Cause of a violation, as presented to curators."""

    UNRECOGNIZED_LICENSE = "UNRECOGNIZED_LICENSE"
    COPYLEFT_RISK = "COPYLEFT_RISK"
    LICENSE_CATEGORY = "LICENSE_CATEGORY"
    LICENSE_EXPRESSION = "LICENSE_EXPRESSION"
    UNKNOWN_LICENSE = "UNKNOWN_LICENSE"


class EffortLevel(CaseInsensitiveEnum):
    """Effort needed to meet an obligation or apply a resolution."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def rank(self) -> int:
        return ("LOW", "MEDIUM", "HIGH").index(self.value)


class ObligationType(CaseInsensitiveEnum):
    """Kinds of obligations a license imposes."""

    ATTRIBUTION = "ATTRIBUTION"
    SOURCE_DISCLOSURE = "SOURCE_DISCLOSURE"
    NETWORK_SOURCE_DISCLOSURE = "NETWORK_SOURCE_DISCLOSURE"
    PATENT_GRANT = "PATENT_GRANT"
    SAME_LICENSE = "SAME_LICENSE"
    VENDOR_TERMS = "VENDOR_TERMS"


class CompatibilityLevel(CaseInsensitiveEnum):
    """Result of a pairwise compatibility check."""

    FULL = "FULL"
    CONDITIONAL = "CONDITIONAL"
    INCOMPATIBLE = "INCOMPATIBLE"
    UNKNOWN = "UNKNOWN"


class ResolutionType(CaseInsensitiveEnum):
    """Ways to resolve a violation."""

    REPLACE_DEPENDENCY = "REPLACE_DEPENDENCY"
    ADD_EXCEPTION = "ADD_EXCEPTION"
    DOCUMENT_CHOICE = "DOCUMENT_CHOICE"
    ISOLATE_SERVICE = "ISOLATE_SERVICE"
    ACCEPT_OBLIGATIONS = "ACCEPT_OBLIGATIONS"
    REQUEST_EXCEPTION = "REQUEST_EXCEPTION"
    INVESTIGATE = "INVESTIGATE"


class WhyNotExplanation(BaseModel):
    """Explains why a license is a problem."""

    model_config = {"extra": "forbid"}

    type: WhyNotType = Field(description="Cause of the violation")
    summary: str = Field(description="One-line explanation")
    detail: str = Field(default="", description="Longer explanation")
    risk_level: int = Field(ge=0, le=6, description="Risk from 0 (info) to 6")


class Obligation(BaseModel):
    """An obligation triggered by using a license."""

    model_config = {"extra": "forbid"}

    type: ObligationType = Field(description="Kind of obligation")
    license: str = Field(description="License imposing the obligation")
    description: str = Field(description="What must be done")
    trigger: str = Field(default="distribution", description="When it applies")
    effort: EffortLevel = Field(description="Effort to comply")


class CompatibilityResult(BaseModel):
    """Result of a license compatibility check between two licenses."""

    model_config = {"extra": "forbid"}

    license_a: str = Field(description="First license identifier")
    license_b: str = Field(description="Second license identifier")
    level: CompatibilityLevel = Field(description="Compatibility level")
    reason: str = Field(description="Explanation of compatibility determination")

    @property
    def compatible(self) -> bool:
        """True if licenses can be combined without conditions."""
        return self.level == CompatibilityLevel.FULL


class CompatibilityIssue(BaseModel):
    """A non-FULL compatibility result against another dependency."""

    model_config = {"extra": "forbid"}

    other_dependency_id: str
    other_dependency_name: str
    license: str
    other_license: str
    level: CompatibilityLevel
    reason: str


class ResolutionSuggestion(BaseModel):
    """A suggested way to resolve a violation."""

    model_config = {"extra": "forbid"}

    type: ResolutionType
    title: str
    description: str
    effort: EffortLevel
    steps: list[str] = Field(default_factory=list)
    recommended: bool = False


class EnhancedExplanation(BaseModel):
    """Advisory bundle attached to a violation for curators."""

    model_config = {"extra": "forbid"}

    why_not: list[WhyNotExplanation] = Field(default_factory=list)
    obligations: list[Obligation] = Field(default_factory=list)
    compatibility_issues: list[CompatibilityIssue] = Field(default_factory=list)
    resolutions: list[ResolutionSuggestion] = Field(default_factory=list)

    @property
    def max_risk_level(self) -> int:
        return max((entry.risk_level for entry in self.why_not), default=0)

    @property
    def recommended(self) -> Optional[ResolutionSuggestion]:
        for resolution in self.resolutions:
            if resolution.recommended:
                return resolution
        return None
