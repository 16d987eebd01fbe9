"""Curation item state machine.

Items move from PENDING to ACCEPTED, REJECTED or MODIFIED and may be
re-decided until their session is approved. Every function here returns a
new item and leaves its input untouched; invalid requests raise
ValidationError.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from license_curator.analysis.categorizer import classify
from license_curator.analysis.expressions import is_valid_spdx
from license_curator.exceptions import ValidationError
from license_curator.models.curation import (
    LICENSED_STATUSES,
    CurationAction,
    CurationItem,
    CurationStatus,
    Justification,
    PriorityInfo,
)
from license_curator.models.license import LicenseCategory


class DecisionRequest(BaseModel):
    """A curator's decision on one item."""

    model_config = {"extra": "forbid"}

    action: CurationAction
    license: Optional[str] = Field(default=None, description="Required for MODIFY")
    comment: Optional[str] = None
    justification: Optional[Justification] = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


def rebuild_item(item: CurationItem, **changes: Any) -> CurationItem:
    """Build a changed copy of an item, re-checking its invariants.

    Raises:
        ValidationError: If the changed item violates an invariant.
    """
    data = {name: getattr(item, name) for name in CurationItem.model_fields}
    data.update(changes)
    try:
        return CurationItem.model_validate(data)
    except PydanticValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise ValidationError(f"Invalid change to '{item.dependency_id}': {messages}") from e


def _license_to_accept(item: CurationItem) -> str:
    if item.or_license is not None:
        if not item.or_license.is_resolved:
            raise ValidationError(
                f"OR-license '{item.or_license.expression}' of "
                f"'{item.dependency_id}' must be resolved before it can be accepted"
            )
        return item.or_license.chosen_license  # type: ignore[return-value]
    if item.ai_suggestion is not None:
        return item.ai_suggestion.suggested_license
    if item.original_license:
        return item.original_license
    raise ValidationError(
        f"'{item.dependency_id}' has no suggested or concluded license to accept; "
        "use MODIFY with an explicit license"
    )


def _stamp_justification(
    justification: Justification,
    license_id: Optional[str],
    curator_id: str,
    now: datetime,
) -> Justification:
    if (
        justification.license is not None
        and license_id is not None
        and justification.license != license_id
    ):
        raise ValidationError(
            f"Justification was written for '{justification.license}', "
            f"not for '{license_id}'"
        )
    return justification.model_copy(
        update={
            "license": justification.license or license_id,
            "curator_id": justification.curator_id or curator_id,
            "created_at": justification.created_at or now,
        }
    )


def append_comment(existing: Optional[str], comment: str) -> str:
    """Add a comment below an existing one."""
    return f"{existing}\n{comment}" if existing else comment


def _license_fields(
    license_id: Optional[str], categories: Optional[dict[str, LicenseCategory]]
) -> dict[str, Any]:
    if license_id is None:
        return {"license_category": None, "spdx_valid": None}
    return {
        "license_category": classify(license_id, categories),
        "spdx_valid": is_valid_spdx(license_id),
    }


def _kept_justification(
    item: CurationItem, license_id: Optional[str]
) -> Optional[Justification]:
    """A previous justification survives only while the license is unchanged."""
    if item.justification is None or license_id is None:
        return None
    if item.status in LICENSED_STATUSES and item.curated_license == license_id:
        return item.justification
    return None


def decide_item(
    item: CurationItem,
    request: DecisionRequest,
    curator_id: str,
    now: Optional[datetime] = None,
    categories: Optional[dict[str, LicenseCategory]] = None,
) -> CurationItem:
    """Apply a curator decision to an item.

    Args:
        item: The item to decide.
        request: ACCEPT, REJECT or MODIFY with optional license, comment and
            justification.
        curator_id: Who made the decision.
        now: Decision time; defaults to now.
        categories: Policy category lists used to categorize the curated
            license before keyword matching.

    Returns:
        The decided item.

    Raises:
        ValidationError: MODIFY without a license, ACCEPT on an unresolved
            OR-license or with nothing to accept, or a justification for a
            different license.
    """
    now = now or _now()

    if request.action == CurationAction.ACCEPT:
        status = CurationStatus.ACCEPTED
        license_id: Optional[str] = _license_to_accept(item)
    elif request.action == CurationAction.MODIFY:
        license_id = (request.license or "").strip()
        if not license_id:
            raise ValidationError(
                f"MODIFY on '{item.dependency_id}' requires a license"
            )
        status = CurationStatus.MODIFIED
    else:
        status = CurationStatus.REJECTED
        license_id = None

    if request.justification is not None:
        justification: Optional[Justification] = _stamp_justification(
            request.justification, license_id, curator_id, now
        )
    else:
        justification = _kept_justification(item, license_id)

    return rebuild_item(
        item,
        status=status,
        curated_license=license_id,
        curator_id=curator_id,
        curator_comment=request.comment,
        curated_at=now,
        justification=justification,
        revision_requested=False,
        **_license_fields(license_id, categories),
    )


def resolve_or_item(
    item: CurationItem,
    chosen_license: str,
    reason: Optional[str],
    curator_id: str,
    now: Optional[datetime] = None,
    categories: Optional[dict[str, LicenseCategory]] = None,
) -> CurationItem:
    """Choose one alternative of an OR-license item.

    Re-resolving overwrites the previous choice. An already accepted item
    follows the new choice.

    Raises:
        ValidationError: If the item is not an OR-license or the choice is
            not one of its options.
    """
    now = now or _now()
    state = item.or_license
    if state is None:
        raise ValidationError(f"'{item.dependency_id}' is not an OR-license item")
    if chosen_license not in state.options:
        raise ValidationError(
            f"'{chosen_license}' is not one of the options {state.options} "
            f"of '{item.dependency_id}'"
        )

    resolved = state.model_copy(
        update={
            "chosen_license": chosen_license,
            "choice_reason": reason,
            "resolved_by": curator_id,
            "resolved_at": now,
        }
    )
    changes: dict[str, Any] = {"or_license": resolved}
    if item.status == CurationStatus.ACCEPTED:
        changes.update(
            curated_license=chosen_license,
            justification=_kept_justification(item, chosen_license),
            **_license_fields(chosen_license, categories),
        )
    return rebuild_item(item, **changes)


def attach_justification_item(
    item: CurationItem,
    justification: Justification,
    curator_id: str,
    now: Optional[datetime] = None,
) -> CurationItem:
    """Attach a justification to an accepted or modified item.

    Raises:
        ValidationError: If the item carries no curated license or the
            justification names a different license.
    """
    if item.status not in LICENSED_STATUSES:
        raise ValidationError(
            f"'{item.dependency_id}' is {item.status.value}; only accepted or "
            "modified items take a justification"
        )
    stamped = _stamp_justification(
        justification, item.curated_license, curator_id, now or _now()
    )
    return rebuild_item(item, justification=stamped)


def reset_item(item: CurationItem) -> CurationItem:
    """Return an item to PENDING, dropping its decision."""
    return rebuild_item(
        item,
        status=CurationStatus.PENDING,
        curated_license=None,
        justification=None,
        curated_at=None,
        license_category=None,
        spdx_valid=None,
    )


def set_priority_item(item: CurationItem, priority: PriorityInfo) -> CurationItem:
    return rebuild_item(item, priority=priority)


def add_comment_item(item: CurationItem, comment: str) -> CurationItem:
    """Append a comment to the item's curator comment."""
    return rebuild_item(item, curator_comment=append_comment(item.curator_comment, comment))
