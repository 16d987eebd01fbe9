"""Curation session and approval models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from license_curator.exceptions import NotFoundError
from license_curator.models.audit import AuditEntry
from license_curator.models.base import CaseInsensitiveEnum
from license_curator.models.curation import CurationItem, CurationStatus
from license_curator.models.license import LicenseCategory


class SessionStatus(CaseInsensitiveEnum):
    """Lifecycle state of a curation session."""

    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    SUBMITTED_FOR_APPROVAL = "SUBMITTED_FOR_APPROVAL"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    RETURNED = "RETURNED"


class ApprovalDecision(CaseInsensitiveEnum):
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    RETURNED = "RETURNED"


class ApprovalRecord(BaseModel):
    """An approver's decision on a submitted session."""

    model_config = {"extra": "forbid"}

    approver_id: str
    approver_name: str
    approver_role: str
    decision: ApprovalDecision
    comment: Optional[str] = None
    return_reason: Optional[str] = None
    revision_items: list[str] = Field(default_factory=list)
    decided_at: datetime


class SessionStatistics(BaseModel):
    """Item counts of a session, always derived from the items."""

    model_config = {"extra": "forbid"}

    total: int = 0
    pending: int = 0
    accepted: int = 0
    rejected: int = 0
    modified: int = 0

    @classmethod
    def from_items(cls, items: list[CurationItem]) -> "SessionStatistics":
        counts = {status: 0 for status in CurationStatus}
        for item in items:
            counts[item.status] += 1
        return cls(
            total=len(items),
            pending=counts[CurationStatus.PENDING],
            accepted=counts[CurationStatus.ACCEPTED],
            rejected=counts[CurationStatus.REJECTED],
            modified=counts[CurationStatus.MODIFIED],
        )

    @property
    def completion_percent(self) -> float:
        if self.total == 0:
            return 100.0
        return round((self.total - self.pending) * 100.0 / self.total, 1)


class CurationSession(BaseModel):
    """All curation items for one scan plus submission and approval state.

    Statistics are computed from ``items`` on every read; stored values are
    ignored when a session is loaded.
    """

    model_config = {"extra": "ignore"}

    id: str
    scan_id: str
    curator_id: str
    policy_name: Optional[str] = None
    license_categories: dict[str, LicenseCategory] = Field(
        default_factory=dict,
        description="Policy category lists keyed by lower-cased license id",
    )
    status: SessionStatus = SessionStatus.IN_PROGRESS
    items: list[CurationItem] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None
    submitted_by: Optional[str] = None
    submitted_at: Optional[datetime] = None
    submission_comment: Optional[str] = None
    approval: Optional[ApprovalRecord] = Field(
        default=None, description="Active approval record, set once APPROVED"
    )
    approval_history: list[ApprovalRecord] = Field(default_factory=list)
    return_reason: Optional[str] = None
    revision_items: list[str] = Field(default_factory=list)
    audit_log: list[AuditEntry] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def statistics(self) -> SessionStatistics:
        return SessionStatistics.from_items(self.items)

    @property
    def is_frozen(self) -> bool:
        """Items cannot change while submitted or after approval."""
        return self.status in (
            SessionStatus.SUBMITTED_FOR_APPROVAL,
            SessionStatus.APPROVED,
        )

    def item(self, dependency_id: str) -> CurationItem:
        """Look up an item by dependency id.

        Raises:
            NotFoundError: If the session has no item for the dependency.
        """
        for item in self.items:
            if item.dependency_id == dependency_id:
                return item
        raise NotFoundError(
            f"Dependency '{dependency_id}' is not part of session '{self.id}'"
        )


class ReadinessBlockerType(CaseInsensitiveEnum):
    PENDING_ITEMS = "PENDING_ITEMS"
    UNRESOLVED_OR = "UNRESOLVED_OR"
    MISSING_JUSTIFICATION = "MISSING_JUSTIFICATION"


class ReadinessBlocker(BaseModel):
    """Something that keeps a session from being submitted."""

    model_config = {"extra": "forbid"}

    type: ReadinessBlockerType
    count: int = Field(ge=1)
    message: str
    affected_items: list[str] = Field(default_factory=list)


class ApprovalReadiness(BaseModel):
    """Whether a session can be submitted for approval."""

    model_config = {"extra": "forbid"}

    is_ready: bool
    total_items: int
    pending_items: int
    unresolved_or_licenses: int
    pending_justifications: int
    blockers: list[ReadinessBlocker] = Field(default_factory=list)
