"""Audit trail models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field

from license_curator.models.base import CaseInsensitiveEnum


class AuditPhase(CaseInsensitiveEnum):
    """Compliance phase an audit entry belongs to."""

    SCAN = "SCAN"
    POLICY = "POLICY"
    CURATION = "CURATION"
    APPROVAL = "APPROVAL"


class AuditAction(CaseInsensitiveEnum):
    CREATE = "CREATE"
    EVALUATE = "EVALUATE"
    DECIDE = "DECIDE"
    JUSTIFY = "JUSTIFY"
    RESOLVE_OR = "RESOLVE_OR"
    APPLY_TEMPLATE = "APPLY_TEMPLATE"
    CARRY_OVER = "CARRY_OVER"
    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    RETURN = "RETURN"


class ActorRole(CaseInsensitiveEnum):
    CURATOR = "CURATOR"
    APPROVER = "APPROVER"
    SYSTEM = "SYSTEM"


class AuditEntityType(CaseInsensitiveEnum):
    SCAN = "SCAN"
    POLICY_REPORT = "POLICY_REPORT"
    SESSION = "SESSION"
    CURATION = "CURATION"
    JUSTIFICATION = "JUSTIFICATION"
    OR_LICENSE = "OR_LICENSE"
    TEMPLATE = "TEMPLATE"
    APPROVAL = "APPROVAL"


class AuditEntry(BaseModel):
    """One append-only record of something that happened to a session."""

    model_config = {"extra": "forbid"}

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    phase: AuditPhase
    action: AuditAction
    actor: str
    actor_role: ActorRole
    description: str
    entity_type: AuditEntityType
    entity_id: str
    previous_state: Optional[dict[str, Any]] = None
    new_state: Optional[dict[str, Any]] = None
