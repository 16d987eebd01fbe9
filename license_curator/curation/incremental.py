"""Incremental curation between two scans.

Classifies dependencies as added, updated or removed and carries forward
decisions from an approved session for dependencies that did not change.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import NamedTuple, Optional

from packaging.version import InvalidVersion, Version

from license_curator.constants import SYSTEM_ACTOR
from license_curator.curation.items import rebuild_item
from license_curator.curation.session import derived_status, ensure_editable
from license_curator.exceptions import PreconditionError
from license_curator.models.audit import (
    ActorRole,
    AuditAction,
    AuditEntityType,
    AuditEntry,
    AuditPhase,
)
from license_curator.models.curation import CurationItem, CurationStatus
from license_curator.models.dependency import Dependency
from license_curator.models.incremental import (
    ChangeType,
    DependencyChange,
    IncrementalChanges,
    VersionDirection,
)
from license_curator.models.session import CurationSession, SessionStatus

logger = logging.getLogger(__name__)

CARRY_OVER_PREFIX = "Carried over from previous curation"


class CarryOverResult(NamedTuple):
    """Result of carrying decisions into a new session.

    Attributes:
        session: The session with carried decisions applied.
        carried_over: Dependency ids whose decision was copied.
    """

    session: CurationSession
    carried_over: list[str]


def version_direction(previous: str, current: str) -> VersionDirection:
    """Compare two versions using PEP 440 ordering where both parse."""
    if previous == current:
        return VersionDirection.UNCHANGED
    try:
        old, new = Version(previous), Version(current)
    except InvalidVersion:
        return VersionDirection.UNKNOWN
    if new > old:
        return VersionDirection.UPGRADE
    if new < old:
        return VersionDirection.DOWNGRADE
    return VersionDirection.UNCHANGED


def diff(previous: list[Dependency], current: list[Dependency]) -> IncrementalChanges:
    """Diff two scans by dependency id.

    A dependency present in both scans is UPDATED when its version or
    effective license changed and unchanged otherwise.

    Args:
        previous: Dependencies of the earlier scan.
        current: Dependencies of the later scan.

    Returns:
        IncrementalChanges; added, updated and unchanged follow the current
        scan's order and removed follows the previous scan's order.
    """
    previous_by_id = {dep.id: dep for dep in previous}
    current_ids = {dep.id for dep in current}

    changes = IncrementalChanges()
    for dep in current:
        old = previous_by_id.get(dep.id)
        if old is None:
            changes.added.append(
                DependencyChange(
                    dependency_id=dep.id,
                    dependency_name=dep.name,
                    change_type=ChangeType.ADDED,
                    current_version=dep.version,
                    current_license=dep.effective_license,
                )
            )
        elif old.version != dep.version or old.effective_license != dep.effective_license:
            changes.updated.append(
                DependencyChange(
                    dependency_id=dep.id,
                    dependency_name=dep.name,
                    change_type=ChangeType.UPDATED,
                    previous_version=old.version,
                    current_version=dep.version,
                    previous_license=old.effective_license,
                    current_license=dep.effective_license,
                    version_direction=version_direction(old.version, dep.version),
                )
            )
        else:
            changes.unchanged.append(dep.id)

    for dep in previous:
        if dep.id not in current_ids:
            changes.removed.append(
                DependencyChange(
                    dependency_id=dep.id,
                    dependency_name=dep.name,
                    change_type=ChangeType.REMOVED,
                    previous_version=dep.version,
                    previous_license=dep.effective_license,
                )
            )

    logger.info(
        "Scan diff: %d added, %d updated, %d removed, %d unchanged",
        len(changes.added),
        len(changes.updated),
        len(changes.removed),
        len(changes.unchanged),
    )
    return changes


def _carry(previous: CurationItem, item: CurationItem) -> CurationItem:
    comment = CARRY_OVER_PREFIX
    if previous.curator_comment:
        comment = f"{comment}: {previous.curator_comment}"
    or_license = item.or_license
    if (
        previous.or_license is not None
        and or_license is not None
        and previous.or_license.options == or_license.options
    ):
        or_license = previous.or_license
    return rebuild_item(
        item,
        status=previous.status,
        curated_license=previous.curated_license,
        license_category=previous.license_category,
        spdx_valid=previous.spdx_valid,
        curator_id=previous.curator_id,
        curator_comment=comment,
        curated_at=previous.curated_at,
        justification=previous.justification,
        or_license=or_license,
    )


def apply_previous_curations(
    session: CurationSession,
    previous_session: CurationSession,
    changes: IncrementalChanges,
    now: Optional[datetime] = None,
) -> CarryOverResult:
    """Copy decisions of an approved session into a new one.

    Only unchanged dependencies whose source license is identical in both
    sessions and whose current item is still PENDING receive the previous
    decision. Updated dependencies are never carried over.

    Raises:
        PreconditionError: If the previous session is not approved or the
            new session cannot change.
    """
    if previous_session.status != SessionStatus.APPROVED:
        raise PreconditionError(
            f"Decisions can only be carried over from an approved session; "
            f"'{previous_session.id}' is {previous_session.status.value}"
        )
    ensure_editable(session)
    now = now or datetime.now(timezone.utc)

    unchanged = set(changes.unchanged)
    previous_items = {item.dependency_id: item for item in previous_session.items}

    items: list[CurationItem] = []
    entries: list[AuditEntry] = []
    carried: list[str] = []
    for item in session.items:
        previous = previous_items.get(item.dependency_id)
        if (
            item.dependency_id in unchanged
            and item.status == CurationStatus.PENDING
            and previous is not None
            and previous.status != CurationStatus.PENDING
            and previous.source_license == item.source_license
        ):
            item = _carry(previous, item)
            carried.append(item.dependency_id)
            entries.append(
                AuditEntry(
                    timestamp=now,
                    phase=AuditPhase.CURATION,
                    action=AuditAction.CARRY_OVER,
                    actor=SYSTEM_ACTOR,
                    actor_role=ActorRole.SYSTEM,
                    description=f"{item.status.value} decision for "
                    f"{item.dependency_name} carried over from session "
                    f"'{previous_session.id}'",
                    entity_type=AuditEntityType.CURATION,
                    entity_id=item.dependency_id,
                    new_state={
                        "status": item.status.value,
                        "curated_license": item.curated_license,
                    },
                )
            )
        items.append(item)

    logger.info(
        "Carried over %d decision(s) from session %s into %s",
        len(carried),
        previous_session.id,
        session.id,
    )
    updated = session.model_copy(
        update={
            "items": items,
            "status": derived_status(items),
            "audit_log": [*session.audit_log, *entries],
            "updated_at": now,
        }
    )
    return CarryOverResult(session=updated, carried_over=carried)
