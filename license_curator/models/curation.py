"""Curation item models.

A curation item records the decision on one dependency's license. Items are
never edited in place; workflow functions build new instances so the
constructor invariants are re-checked on every change.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from license_curator.models.base import CaseInsensitiveEnum
from license_curator.models.dependency import AiSuggestion, effective_license
from license_curator.models.license import LicenseCategory


class CurationStatus(CaseInsensitiveEnum):
    """Decision state of a curation item."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    MODIFIED = "MODIFIED"

    @property
    def is_decided(self) -> bool:
        return self is not CurationStatus.PENDING


# Statuses that carry a curated license
LICENSED_STATUSES = frozenset({CurationStatus.ACCEPTED, CurationStatus.MODIFIED})


class CurationAction(CaseInsensitiveEnum):
    """Decision a curator can take on an item."""

    ACCEPT = "ACCEPT"
    REJECT = "REJECT"
    MODIFY = "MODIFY"


class PriorityLevel(CaseInsensitiveEnum):
    """Discrete curation priority."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def threshold(self) -> float:
        """Lowest score that maps to this level."""
        return {"CRITICAL": 0.75, "HIGH": 0.5, "MEDIUM": 0.25, "LOW": 0.0}[self.value]

    @classmethod
    def from_score(cls, score: float) -> "PriorityLevel":
        for level in (cls.CRITICAL, cls.HIGH, cls.MEDIUM):
            if score >= level.threshold:
                return level
        return cls.LOW


class PriorityFactor(BaseModel):
    """One contribution to a priority score."""

    model_config = {"extra": "forbid"}

    name: str = Field(description="Factor name, e.g. 'severity'")
    weight: float = Field(description="Contribution of this factor to the score")
    description: str = Field(description="Explanation shown to curators")


class PriorityInfo(BaseModel):
    """Priority of a curation item with its factor breakdown."""

    model_config = {"extra": "forbid"}

    level: PriorityLevel
    score: float = Field(ge=0.0, le=1.0)
    factors: list[PriorityFactor] = Field(default_factory=list)


class JustificationType(CaseInsensitiveEnum):
    """Basis on which a license decision was made."""

    AI_ACCEPTED = "AI_ACCEPTED"
    MANUAL_OVERRIDE = "MANUAL_OVERRIDE"
    EVIDENCE_BASED = "EVIDENCE_BASED"
    POLICY_EXEMPTION = "POLICY_EXEMPTION"
    LEGAL_OPINION = "LEGAL_OPINION"


class EvidenceType(CaseInsensitiveEnum):
    """Kind of evidence supporting a justification."""

    LICENSE_FILE = "LICENSE_FILE"
    REPO_INSPECTION = "REPO_INSPECTION"
    VENDOR_CONFIRMATION = "VENDOR_CONFIRMATION"
    LEGAL_OPINION = "LEGAL_OPINION"
    PRIOR_AUDIT = "PRIOR_AUDIT"
    PACKAGE_METADATA = "PACKAGE_METADATA"


class DistributionScope(CaseInsensitiveEnum):
    """How the product containing the dependency is distributed."""

    INTERNAL = "INTERNAL"
    BINARY = "BINARY"
    SOURCE = "SOURCE"
    SAAS = "SAAS"
    EMBEDDED = "EMBEDDED"


class Justification(BaseModel):
    """Structured reason for accepting a non-permissive license."""

    model_config = {"extra": "forbid"}

    type: JustificationType
    text: str = Field(min_length=1, description="Justification text")
    license: Optional[str] = Field(
        default=None, description="License the justification was written for"
    )
    evidence_type: Optional[EvidenceType] = None
    evidence_reference: Optional[str] = Field(
        default=None, description="URL, file path or document reference"
    )
    distribution_scope: DistributionScope = DistributionScope.INTERNAL
    policy_rule_id: Optional[str] = None
    curator_id: Optional[str] = None
    created_at: Optional[datetime] = None


class OrLicenseState(BaseModel):
    """Choice between the alternatives of an OR license expression."""

    model_config = {"extra": "forbid"}

    expression: str = Field(description="Original license expression")
    options: list[str] = Field(min_length=2, description="Alternative licenses")
    chosen_license: Optional[str] = None
    choice_reason: Optional[str] = None
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _chosen_is_an_option(self) -> "OrLicenseState":
        if self.chosen_license is not None and self.chosen_license not in self.options:
            raise ValueError(
                f"chosen license '{self.chosen_license}' is not one of {self.options}"
            )
        return self

    @property
    def is_resolved(self) -> bool:
        return self.chosen_license is not None


class CurationItem(BaseModel):
    """Curation state of one dependency within a session."""

    model_config = {"extra": "forbid"}

    dependency_id: str
    dependency_name: str
    dependency_version: str = ""
    scope: Optional[str] = None
    original_license: Optional[str] = Field(
        default=None, description="License concluded by the scanner"
    )
    declared_licenses: list[str] = Field(default_factory=list)
    detected_licenses: list[str] = Field(default_factory=list)
    ai_suggestion: Optional[AiSuggestion] = None
    status: CurationStatus = CurationStatus.PENDING
    curated_license: Optional[str] = None
    license_category: Optional[LicenseCategory] = Field(
        default=None, description="Category of the curated license"
    )
    spdx_valid: Optional[bool] = Field(
        default=None, description="Whether the curated license only uses known SPDX ids"
    )
    curator_id: Optional[str] = None
    curator_comment: Optional[str] = None
    curated_at: Optional[datetime] = None
    priority: Optional[PriorityInfo] = None
    or_license: Optional[OrLicenseState] = None
    justification: Optional[Justification] = None
    blocking_rule_id: Optional[str] = Field(
        default=None, description="Policy rule that put this item up for curation"
    )
    revision_requested: bool = Field(
        default=False, description="Flagged by an approver for another look"
    )

    @model_validator(mode="after")
    def _check_invariants(self) -> "CurationItem":
        has_license = self.curated_license is not None
        if has_license != (self.status in LICENSED_STATUSES):
            raise ValueError(
                "curated_license must be set exactly when status is ACCEPTED or "
                f"MODIFIED (status={self.status.value})"
            )
        if (
            self.status == CurationStatus.ACCEPTED
            and self.or_license is not None
            and not self.or_license.is_resolved
        ):
            raise ValueError("an OR-license item cannot be ACCEPTED before resolution")
        return self

    @property
    def source_license(self) -> str:
        """Effective license reported by the scan."""
        return effective_license(
            self.original_license, self.declared_licenses, self.detected_licenses
        )

    @property
    def is_or_license(self) -> bool:
        return self.or_license is not None

    @property
    def requires_justification(self) -> bool:
        """True when the decision keeps a license that needs a justification."""
        if self.status not in LICENSED_STATUSES:
            return False
        category = self.license_category or LicenseCategory.UNKNOWN
        return category.requires_justification

    @property
    def justification_complete(self) -> bool:
        if not self.requires_justification:
            return True
        return self.justification is not None
