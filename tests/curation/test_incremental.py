"""Tests for incremental curation between scans."""
from datetime import datetime

import pytest

from license_curator.curation.incremental import (
    CARRY_OVER_PREFIX,
    apply_previous_curations,
    diff,
    version_direction,
)
from license_curator.curation.items import DecisionRequest
from license_curator.curation.session import (
    decide,
    decide_approval,
    start_session,
    submit_for_approval,
)
from license_curator.exceptions import PreconditionError
from license_curator.models.audit import AuditAction
from license_curator.models.curation import CurationStatus
from license_curator.models.dependency import Dependency
from license_curator.models.incremental import ChangeType, VersionDirection
from license_curator.models.session import ApprovalDecision, CurationSession


def _dep(dep_id: str, version: str = "1.0", license_id: str = "MIT") -> Dependency:
    return Dependency(id=dep_id, name=dep_id, version=version, concluded_license=license_id)


def _approved(dependencies: list[Dependency], now: datetime) -> CurationSession:
    session = start_session("scan-1", dependencies, "alice", session_id="old", now=now)
    for item in session.items:
        session = decide(
            session,
            item.dependency_id,
            DecisionRequest(action="ACCEPT", comment="checked"),
            "alice",
            now,
        )
    session = submit_for_approval(session, "alice", now=now)
    return decide_approval(
        session, "carol", "Carol", "Legal", ApprovalDecision.APPROVED, now=now
    )


class TestDiff:
    """Tests for diff function."""

    def test_added_updated_removed(self) -> None:
        """Test a version bump and a new dependency."""
        changes = diff([_dep("a", "1.0")], [_dep("a", "1.1"), _dep("b")])

        assert [c.dependency_id for c in changes.added] == ["b"]
        assert [c.dependency_id for c in changes.updated] == ["a"]
        assert changes.removed == []
        assert changes.unchanged == []
        update = changes.updated[0]
        assert update.change_type == ChangeType.UPDATED
        assert (update.previous_version, update.current_version) == ("1.0", "1.1")
        assert update.version_direction == VersionDirection.UPGRADE
        assert not update.license_changed

    def test_removed_and_unchanged(self) -> None:
        """Test removed dependencies and identical ones."""
        changes = diff([_dep("a"), _dep("gone")], [_dep("a")])
        assert [c.dependency_id for c in changes.removed] == ["gone"]
        assert changes.removed[0].previous_license == "MIT"
        assert changes.unchanged == ["a"]
        assert changes.has_changes

    def test_license_change_is_update(self) -> None:
        """Test a license change alone counts as an update."""
        changes = diff([_dep("a", license_id="MIT")], [_dep("a", license_id="GPL-3.0-only")])
        assert changes.updated[0].license_changed
        assert changes.updated[0].version_direction == VersionDirection.UNCHANGED

    def test_identical_scans(self) -> None:
        """Test identical scans have no changes."""
        changes = diff([_dep("a"), _dep("b")], [_dep("a"), _dep("b")])
        assert not changes.has_changes
        assert changes.unchanged == ["a", "b"]


class TestVersionDirection:
    """Tests for version_direction function."""

    def test_directions(self) -> None:
        """Test upgrades, downgrades and unparseable versions."""
        assert version_direction("1.9", "1.10") == VersionDirection.UPGRADE
        assert version_direction("2.0", "1.0") == VersionDirection.DOWNGRADE
        assert version_direction("1.0", "1.0.0") == VersionDirection.UNCHANGED
        assert version_direction("main", "dev-branch") == VersionDirection.UNKNOWN


class TestApplyPreviousCurations:
    """Tests for carrying decisions into a new session."""

    def test_unchanged_decisions_carried(self, now: datetime) -> None:
        """Test only unchanged dependencies receive the old decision."""
        previous_deps = [_dep("a", "1.0"), _dep("c")]
        current_deps = [_dep("a", "1.1"), _dep("b"), _dep("c")]
        previous = _approved(previous_deps, now)
        changes = diff(previous_deps, current_deps)
        session = start_session("scan-2", current_deps, "alice", now=now)

        result = apply_previous_curations(session, previous, changes, now=now)

        assert result.carried_over == ["c"]
        carried = result.session.item("c")
        assert carried.status == CurationStatus.ACCEPTED
        assert carried.curated_license == "MIT"
        assert carried.curator_comment == f"{CARRY_OVER_PREFIX}: checked"
        assert result.session.item("a").status == CurationStatus.PENDING
        assert result.session.item("b").status == CurationStatus.PENDING
        assert result.session.audit_log[-1].action == AuditAction.CARRY_OVER
        assert session.item("c").status == CurationStatus.PENDING

    def test_requires_approved_previous(self, now: datetime) -> None:
        """Test decisions are only carried from approved sessions."""
        deps = [_dep("a")]
        unapproved = start_session("scan-1", deps, "alice", now=now)
        session = start_session("scan-2", deps, "alice", now=now)
        with pytest.raises(PreconditionError, match="approved"):
            apply_previous_curations(session, unapproved, diff(deps, deps))

    def test_decided_items_kept(self, now: datetime) -> None:
        """Test items already decided in the new session are not overwritten."""
        deps = [_dep("a")]
        previous = _approved(deps, now)
        session = start_session("scan-2", deps, "alice", now=now)
        session = decide(session, "a", DecisionRequest(action="REJECT"), "alice", now)

        result = apply_previous_curations(session, previous, diff(deps, deps), now=now)
        assert result.carried_over == []
        assert result.session.item("a").status == CurationStatus.REJECTED
