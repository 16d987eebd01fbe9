"""Tests for curation template models."""
import pytest
from pydantic import ValidationError

from license_curator.models.template import (
    AddCommentAction,
    CurationTemplate,
    SetLicenseAction,
    SetStatusAction,
    TemplateCondition,
)


class TestTemplateCondition:
    """Tests for condition validation."""

    def test_value_required(self) -> None:
        """Test that comparison operators need a value."""
        with pytest.raises(ValidationError, match="requires a value"):
            TemplateCondition(field="DEPENDENCY_NAME", operator="EQUALS")

    def test_empty_checks_take_no_value(self) -> None:
        """Test that IS_EMPTY works without a value."""
        condition = TemplateCondition(field="scope", operator="is_empty")
        assert condition.value is None

    def test_invalid_regex_rejected(self) -> None:
        """Test that MATCHES patterns are compiled on load."""
        with pytest.raises(ValidationError, match="invalid regular expression"):
            TemplateCondition(field="DEPENDENCY_NAME", operator="MATCHES", value="(")


class TestTemplateActions:
    """Tests for the action variants."""

    def test_discriminated_actions(self) -> None:
        """Test that actions are parsed by their type."""
        template = CurationTemplate.model_validate(
            {
                "id": "t1",
                "name": "Accept MIT",
                "conditions": [{"field": "EFFECTIVE_LICENSE", "operator": "EQUALS", "value": "MIT"}],
                "actions": [
                    {"type": "SET_STATUS", "status": "ACCEPTED"},
                    {"type": "SET_LICENSE", "license": "MIT"},
                    {"type": "ADD_COMMENT", "comment": "bulk"},
                ],
            }
        )
        assert [type(a) for a in template.actions] == [
            SetStatusAction,
            SetLicenseAction,
            AddCommentAction,
        ]

    def test_modified_status_rejected(self) -> None:
        """Test that SET_STATUS cannot set MODIFIED."""
        with pytest.raises(ValidationError, match="SET_LICENSE"):
            SetStatusAction(status="MODIFIED")

    def test_conditions_and_actions_required(self) -> None:
        """Test that a template needs at least one condition and action."""
        with pytest.raises(ValidationError):
            CurationTemplate(id="t1", name="empty", conditions=[], actions=[])
