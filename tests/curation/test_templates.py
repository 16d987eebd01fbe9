"""Tests for curation template matching and application."""
from typing import Any, Optional

import pytest

from license_curator.curation.templates import (
    apply_template,
    condition_matches,
    match_items,
)
from license_curator.exceptions import ValidationError
from license_curator.models.curation import CurationItem, CurationStatus, PriorityLevel
from license_curator.models.license import LicenseCategory
from license_curator.models.template import CurationTemplate, TemplateCondition


def _item(name: str, license_id: Optional[str], scope: str = "runtime") -> CurationItem:
    return CurationItem(
        dependency_id=f"PyPI::{name}:1.0",
        dependency_name=name,
        dependency_version="1.0",
        scope=scope,
        original_license=license_id,
    )


def _template(conditions: list[dict[str, Any]], actions: list[dict[str, Any]]) -> CurationTemplate:
    return CurationTemplate.model_validate(
        {"id": "t1", "name": "Bulk", "conditions": conditions, "actions": actions}
    )


class TestConditionMatches:
    """Tests for single condition evaluation."""

    def _check(self, operator: str, value: Optional[str], item: CurationItem) -> bool:
        condition = TemplateCondition(field="DEPENDENCY_NAME", operator=operator, value=value)
        return condition_matches(condition, item)

    def test_equals_is_case_sensitive(self) -> None:
        """Test EQUALS compares exactly."""
        item = _item("Requests", "MIT")
        assert self._check("EQUALS", "Requests", item)
        assert not self._check("EQUALS", "requests", item)
        assert self._check("NOT_EQUALS", "requests", item)

    def test_substring_operators_ignore_case(self) -> None:
        """Test CONTAINS, STARTS_WITH and ENDS_WITH ignore case."""
        item = _item("django-rest-framework", "BSD-3-Clause")
        assert self._check("CONTAINS", "REST", item)
        assert self._check("STARTS_WITH", "Django", item)
        assert self._check("ENDS_WITH", "FRAMEWORK", item)

    def test_matches_is_full_match(self) -> None:
        """Test MATCHES must cover the whole value."""
        item = _item("pytest-cov", "MIT")
        assert self._check("MATCHES", r"pytest(-\w+)?", item)
        assert not self._check("MATCHES", "pytest", item)

    def test_empty_checks(self) -> None:
        """Test IS_EMPTY and IS_NOT_EMPTY on an optional field."""
        item = _item("foo", None)
        empty = TemplateCondition(field="ORIGINAL_LICENSE", operator="IS_EMPTY")
        not_empty = TemplateCondition(field="ORIGINAL_LICENSE", operator="IS_NOT_EMPTY")
        assert condition_matches(empty, item)
        assert not condition_matches(not_empty, item)

    def test_effective_license_field(self) -> None:
        """Test the effective license falls back to NOASSERTION."""
        condition = TemplateCondition(
            field="EFFECTIVE_LICENSE", operator="EQUALS", value="NOASSERTION"
        )
        assert condition_matches(condition, _item("foo", None))


class TestMatchItems:
    """Tests for matching whole templates."""

    def test_all_conditions_must_hold(self) -> None:
        """Test conditions are combined with AND."""
        items = [
            _item("a", "MIT", scope="test"),
            _item("b", "MIT"),
            _item("c", "GPL-3.0-only", scope="test"),
        ]
        template = _template(
            [
                {"field": "SCOPE", "operator": "EQUALS", "value": "test"},
                {"field": "ORIGINAL_LICENSE", "operator": "EQUALS", "value": "MIT"},
            ],
            [{"type": "ADD_COMMENT", "comment": "x"}],
        )
        assert [i.dependency_name for i in match_items(template, items)] == ["a"]


class TestApplyTemplate:
    """Tests for apply_template function."""

    def test_dry_run_changes_nothing(self) -> None:
        """Test a dry run reports matches and leaves items and usage alone."""
        items = [_item("a", "MIT"), _item("b", "GPL-3.0-only")]
        template = _template(
            [{"field": "ORIGINAL_LICENSE", "operator": "EQUALS", "value": "MIT"}],
            [{"type": "SET_STATUS", "status": "ACCEPTED"}],
        )
        first = apply_template(template, items, actor_id="alice", dry_run=True)
        second = apply_template(first.template, first.items, actor_id="alice", dry_run=True)

        assert first.result.matched_items == ["PyPI::a:1.0"]
        assert first.result.dry_run is True
        assert first.items == items
        assert second.result == first.result
        assert second.template.usage_count == 0

    def test_actions_applied_in_order(self) -> None:
        """Test each action runs on every matching item."""
        items = [_item("a", "MIT"), _item("b", "GPL-3.0-only")]
        template = _template(
            [{"field": "ORIGINAL_LICENSE", "operator": "EQUALS", "value": "MIT"}],
            [
                {"type": "SET_STATUS", "status": "ACCEPTED"},
                {"type": "ADD_COMMENT", "comment": "Reviewed in bulk"},
                {"type": "SET_PRIORITY", "level": "LOW"},
            ],
        )
        application = apply_template(template, items, actor_id="alice")

        accepted = application.items[0]
        assert accepted.status == CurationStatus.ACCEPTED
        assert accepted.curated_license == "MIT"
        assert accepted.curator_id == "alice"
        assert accepted.curator_comment is not None
        assert accepted.curator_comment.endswith("Reviewed in bulk")
        assert accepted.priority is not None
        assert accepted.priority.level == PriorityLevel.LOW
        assert application.items[1].status == CurationStatus.PENDING
        assert application.template.usage_count == 1

    def test_set_license(self) -> None:
        """Test SET_LICENSE modifies matching items."""
        template = _template(
            [{"field": "ORIGINAL_LICENSE", "operator": "IS_EMPTY"}],
            [{"type": "SET_LICENSE", "license": "Apache-2.0"}],
        )
        application = apply_template(template, [_item("a", None)], actor_id="alice")
        assert application.items[0].status == CurationStatus.MODIFIED
        assert application.items[0].curated_license == "Apache-2.0"

    def test_set_status_pending_resets(self) -> None:
        """Test SET_STATUS PENDING undoes a decision."""
        accept = _template(
            [{"field": "DEPENDENCY_NAME", "operator": "EQUALS", "value": "a"}],
            [{"type": "SET_STATUS", "status": "ACCEPTED"}],
        )
        reset = _template(
            [{"field": "STATUS", "operator": "EQUALS", "value": "ACCEPTED"}],
            [{"type": "SET_STATUS", "status": "PENDING"}],
        )
        accepted = apply_template(accept, [_item("a", "MIT")], actor_id="alice").items
        pending = apply_template(reset, accepted, actor_id="alice").items
        assert pending[0].status == CurationStatus.PENDING
        assert pending[0].curated_license is None

    def test_failure_is_atomic(self) -> None:
        """Test one failing item prevents every change."""
        items = [_item("a", "MIT"), _item("b", None)]
        template = _template(
            [{"field": "SCOPE", "operator": "EQUALS", "value": "runtime"}],
            [{"type": "SET_STATUS", "status": "ACCEPTED"}],
        )
        with pytest.raises(ValidationError, match="failed on 'PyPI::b:1.0'"):
            apply_template(template, items, actor_id="alice")
        assert items[0].status == CurationStatus.PENDING

    def test_comment_before_decision_kept(self) -> None:
        """Test a decision keeps a comment added earlier by the same template."""
        template = _template(
            [{"field": "ORIGINAL_LICENSE", "operator": "EQUALS", "value": "MIT"}],
            [
                {"type": "ADD_COMMENT", "comment": "Reviewed by legal"},
                {"type": "SET_STATUS", "status": "ACCEPTED"},
            ],
        )
        item = apply_template(template, [_item("a", "MIT")], actor_id="alice").items[0]
        assert item.status == CurationStatus.ACCEPTED
        assert item.curator_comment == "Reviewed by legal\nApplied template 'Bulk'"

    def test_existing_curator_note_kept(self) -> None:
        """Test template decisions append to the curator's existing note."""
        noted = _item("a", None).model_copy(update={"curator_comment": "curator note"})
        template = _template(
            [{"field": "DEPENDENCY_NAME", "operator": "EQUALS", "value": "a"}],
            [{"type": "SET_LICENSE", "license": "MIT"}],
        )
        item = apply_template(template, [noted], actor_id="alice").items[0]
        assert item.curator_comment == "curator note\nApplied template 'Bulk'"

    def test_policy_categories_used(self) -> None:
        """Test curated licenses are categorized with the given category lists."""
        template = _template(
            [{"field": "DEPENDENCY_NAME", "operator": "EQUALS", "value": "a"}],
            [{"type": "SET_LICENSE", "license": "Acme-1.0"}],
        )
        item = apply_template(
            template,
            [_item("a", None)],
            actor_id="alice",
            categories={"acme-1.0": LicenseCategory.PERMISSIVE},
        ).items[0]
        assert item.license_category == LicenseCategory.PERMISSIVE
