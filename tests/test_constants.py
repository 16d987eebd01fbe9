"""Tests for constants module."""
from license_curator.constants import (
    EXIT_ERROR,
    EXIT_ISSUES,
    EXIT_SUCCESS,
    LEGAL_DISCLAIMER_SHORT,
    NO_ASSERTION,
    SYSTEM_ACTOR,
)


class TestExitCodes:
    """Tests for exit code constants."""

    def test_exit_codes_are_distinct(self) -> None:
        """Test that success, issues and error codes differ."""
        assert (EXIT_SUCCESS, EXIT_ISSUES, EXIT_ERROR) == (0, 1, 2)


class TestMarkers:
    """Tests for marker constants."""

    def test_no_assertion(self) -> None:
        """Test the placeholder for a missing license."""
        assert NO_ASSERTION == "NOASSERTION"

    def test_system_actor(self) -> None:
        """Test the actor id used for automated decisions."""
        assert SYSTEM_ACTOR == "system"

    def test_disclaimer_mentions_legal_advice(self) -> None:
        """Test the short disclaimer says it is not legal advice."""
        assert "legal advice" in LEGAL_DISCLAIMER_SHORT
