"""Tests for curation item models."""
import pytest
from pydantic import ValidationError

from license_curator.models.curation import (
    CurationItem,
    CurationStatus,
    Justification,
    JustificationType,
    OrLicenseState,
    PriorityLevel,
)
from license_curator.models.license import LicenseCategory


def _item(**overrides: object) -> CurationItem:
    data: dict[str, object] = {
        "dependency_id": "PyPI::foo:1.0",
        "dependency_name": "foo",
        "dependency_version": "1.0",
        "original_license": "GPL-3.0-only",
    }
    data.update(overrides)
    return CurationItem.model_validate(data)


class TestCurationItemInvariants:
    """Tests for the constructor invariants of curation items."""

    def test_pending_without_license(self) -> None:
        """Test that a pending item has no curated license."""
        item = _item()
        assert item.status == CurationStatus.PENDING
        assert item.curated_license is None

    def test_accepted_requires_license(self) -> None:
        """Test that ACCEPTED without a curated license is rejected."""
        with pytest.raises(ValidationError, match="curated_license"):
            _item(status="ACCEPTED")

    def test_rejected_forbids_license(self) -> None:
        """Test that REJECTED with a curated license is rejected."""
        with pytest.raises(ValidationError, match="curated_license"):
            _item(status="REJECTED", curated_license="MIT")

    def test_unresolved_or_cannot_be_accepted(self) -> None:
        """Test that an OR item must be resolved before acceptance."""
        with pytest.raises(ValidationError, match="OR-license"):
            _item(
                status="ACCEPTED",
                curated_license="MIT",
                or_license={"expression": "MIT OR GPL-2.0-only", "options": ["MIT", "GPL-2.0-only"]},
            )

    def test_resolved_or_can_be_accepted(self) -> None:
        """Test that a resolved OR item may be accepted."""
        item = _item(
            status="ACCEPTED",
            curated_license="MIT",
            or_license={
                "expression": "MIT OR GPL-2.0-only",
                "options": ["MIT", "GPL-2.0-only"],
                "chosen_license": "MIT",
            },
        )
        assert item.is_or_license
        assert item.or_license is not None and item.or_license.is_resolved


class TestOrLicenseState:
    """Tests for OR-license state validation."""

    def test_needs_two_options(self) -> None:
        """Test that an OR state needs at least two alternatives."""
        with pytest.raises(ValidationError):
            OrLicenseState(expression="MIT", options=["MIT"])

    def test_chosen_must_be_option(self) -> None:
        """Test that the chosen license must be one of the options."""
        with pytest.raises(ValidationError, match="not one of"):
            OrLicenseState(
                expression="MIT OR Apache-2.0",
                options=["MIT", "Apache-2.0"],
                chosen_license="BSD-3-Clause",
            )


class TestJustificationRequirement:
    """Tests for when a decision needs a justification."""

    def test_permissive_needs_none(self) -> None:
        """Test that accepting a permissive license needs no justification."""
        item = _item(
            status="ACCEPTED",
            curated_license="MIT",
            license_category=LicenseCategory.PERMISSIVE,
        )
        assert not item.requires_justification
        assert item.justification_complete

    def test_copyleft_needs_one(self) -> None:
        """Test that accepting a copyleft license needs a justification."""
        item = _item(
            status="ACCEPTED",
            curated_license="GPL-3.0-only",
            license_category=LicenseCategory.STRONG_COPYLEFT,
        )
        assert item.requires_justification
        assert not item.justification_complete

        justified = item.model_copy(
            update={
                "justification": Justification(
                    type=JustificationType.LEGAL_OPINION, text="Cleared by legal"
                )
            }
        )
        assert justified.justification_complete

    def test_rejected_needs_none(self) -> None:
        """Test that rejected items never need a justification."""
        item = _item(status="REJECTED")
        assert not item.requires_justification

    def test_missing_category_treated_as_unknown(self) -> None:
        """Test that an uncategorized curated license needs a justification."""
        item = _item(status="MODIFIED", curated_license="Custom")
        assert item.requires_justification


class TestSourceLicense:
    """Tests for the effective license recorded on an item."""

    def test_prefers_original(self) -> None:
        """Test that the concluded license wins."""
        item = _item(declared_licenses=["MIT"])
        assert item.source_license == "GPL-3.0-only"

    def test_falls_back_to_declared(self) -> None:
        """Test the fallback to the first declared license."""
        item = _item(original_license=None, declared_licenses=["", "MIT"])
        assert item.source_license == "MIT"

    def test_noassertion_when_empty(self) -> None:
        """Test the placeholder when there is no license information."""
        item = _item(original_license=None)
        assert item.source_license == "NOASSERTION"


class TestPriorityLevel:
    """Tests for score to level mapping."""

    @pytest.mark.parametrize(
        ("score", "level"),
        [
            (1.0, PriorityLevel.CRITICAL),
            (0.75, PriorityLevel.CRITICAL),
            (0.74, PriorityLevel.HIGH),
            (0.5, PriorityLevel.HIGH),
            (0.25, PriorityLevel.MEDIUM),
            (0.1, PriorityLevel.LOW),
            (0.0, PriorityLevel.LOW),
        ],
    )
    def test_from_score(self, score: float, level: PriorityLevel) -> None:
        """Test the level thresholds."""
        assert PriorityLevel.from_score(score) == level
