"""Tests for policy exemption filtering."""
from typing import Callable

from license_curator.analysis.filtering import filter_exempted, find_exemption
from license_curator.models.dependency import Dependency
from license_curator.models.policy import Exemption


class TestFindExemption:
    """Tests for matching exemption patterns."""

    def test_glob_match(self) -> None:
        """Test that a glob matches the whole dependency id."""
        exemptions = [Exemption(dependency="PyPI::internal-*", reason="in-house")]
        assert find_exemption("PyPI::internal-tools:1.0", exemptions) is not None
        assert find_exemption("PyPI::requests:2.0", exemptions) is None

    def test_case_sensitive(self) -> None:
        """Test that patterns are case-sensitive."""
        exemptions = [Exemption(dependency="PyPI::Foo*", reason="r")]
        assert find_exemption("PyPI::foo:1.0", exemptions) is None

    def test_first_match_wins(self) -> None:
        """Test the first matching exemption is returned."""
        exemptions = [
            Exemption(dependency="PyPI::*", reason="first"),
            Exemption(dependency="PyPI::foo*", reason="second"),
        ]
        found = find_exemption("PyPI::foo:1.0", exemptions)
        assert found is not None and found.reason == "first"


class TestFilterExempted:
    """Tests for splitting dependencies by exemption."""

    def test_no_exemptions(self, make_dependency: Callable[..., Dependency]) -> None:
        """Test that everything is evaluated without exemptions."""
        deps = [make_dependency("a", "MIT"), make_dependency("b", "GPL-3.0-only")]
        result = filter_exempted(deps, [])
        assert result.dependencies == deps
        assert result.exempted == []

    def test_records_exempted(self, make_dependency: Callable[..., Dependency]) -> None:
        """Test exempted dependencies are recorded with the exemption."""
        deps = [make_dependency("a", "MIT"), make_dependency("b", "GPL-3.0-only")]
        exemptions = [
            Exemption(dependency="PyPI::b:*", reason="build only", approved_by="legal")
        ]
        result = filter_exempted(deps, exemptions)

        assert [d.id for d in result.dependencies] == ["PyPI::a:1.0.0"]
        assert len(result.exempted) == 1
        record = result.exempted[0]
        assert record.dependency_id == "PyPI::b:1.0.0"
        assert record.pattern == "PyPI::b:*"
        assert record.reason == "build only"
        assert record.approved_by == "legal"
