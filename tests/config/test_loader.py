"""Tests for policy, template, scan and session file loading."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from license_curator.config.defaults import get_default_policy
from license_curator.config.loader import (
    find_policy_file,
    load_policy,
    load_policy_file,
    load_scan_file,
    load_session_file,
    load_templates_file,
    save_templates_file,
)
from license_curator.curation.session import start_session
from license_curator.exceptions import ConfigurationError
from license_curator.models.license import LicenseCategory
from license_curator.models.policy import CategoryMatch, DenylistMatch, Severity
from license_curator.models.template import CurationTemplate, SetStatusAction

POLICY_YAML = """\
name: Company Policy
version: "3.1"
categories:
  permissive:
    licenses: [Custom-Permissive]
rules:
  - id: no-gpl
    name: No GPL
    severity: error
    action: deny
    category: [strong-copyleft]
  - id: banned
    severity: warning
    denylist: [SSPL-1.0]
settings:
  fail_on:
    warnings: true
  exemptions:
    - dependency: "PyPI::internal-*"
      reason: Internal package
      approved_by: legal
      approved_date: 2024-01-15
"""


class TestFindPolicyFile:
    """Tests for find_policy_file function."""

    def test_finds_yaml(self, tmp_path: Path) -> None:
        """Test that .yaml extension is found."""
        policy_file = tmp_path / ".license-policy.yaml"
        policy_file.write_text(POLICY_YAML)
        assert find_policy_file(tmp_path) == policy_file

    def test_yaml_takes_precedence_over_yml(self, tmp_path: Path) -> None:
        """Test that .yaml wins over .yml."""
        yaml_file = tmp_path / ".license-policy.yaml"
        (tmp_path / ".license-policy.yml").write_text(POLICY_YAML)
        yaml_file.write_text(POLICY_YAML)
        assert find_policy_file(tmp_path) == yaml_file

    def test_returns_none(self, tmp_path: Path) -> None:
        """Test None when there is no policy file."""
        assert find_policy_file(tmp_path) is None


class TestLoadPolicyFile:
    """Tests for load_policy_file function."""

    def test_full_policy(self, tmp_path: Path) -> None:
        """Test every section of a policy file is loaded."""
        path = tmp_path / "policy.yaml"
        path.write_text(POLICY_YAML)
        policy = load_policy_file(path)

        assert policy.name == "Company Policy"
        assert policy.version == "3.1"
        assert policy.categories[LicenseCategory.PERMISSIVE].licenses == ["Custom-Permissive"]
        assert isinstance(policy.rules[0].match, CategoryMatch)
        assert policy.rules[0].match.categories == [LicenseCategory.STRONG_COPYLEFT]
        assert isinstance(policy.rules[1].match, DenylistMatch)
        assert policy.rules[1].severity == Severity.WARNING
        assert policy.settings.fail_on.warnings is True
        assert policy.settings.exemptions[0].approved_by == "legal"

    def test_empty_file_gives_default(self, tmp_path: Path) -> None:
        """Test an empty policy file falls back to the default policy."""
        path = tmp_path / "policy.yaml"
        path.write_text("   \n")
        assert load_policy_file(path) == get_default_policy()

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Test YAML syntax errors are configuration errors."""
        path = tmp_path / "policy.yaml"
        path.write_text("name: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML syntax"):
            load_policy_file(path)

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        """Test a list at root level is rejected."""
        path = tmp_path / "policy.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="expected a mapping"):
            load_policy_file(path)

    def test_validation_errors_located(self, tmp_path: Path) -> None:
        """Test validation errors name the offending field."""
        path = tmp_path / "policy.yaml"
        path.write_text("name: p\nrules:\n  - id: r1\n    severity: fatal\n    allowlist: [MIT]\n")
        with pytest.raises(ConfigurationError, match="rules.0.severity"):
            load_policy_file(path)

    def test_json_policy(self, tmp_path: Path) -> None:
        """Test JSON policy files are accepted."""
        path = tmp_path / "policy.json"
        path.write_text(json.dumps({"name": "json", "rules": []}))
        assert load_policy_file(path).name == "json"

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test unreadable files are configuration errors."""
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_policy_file(tmp_path / "missing.yaml")


class TestLoadPolicy:
    """Tests for load_policy function."""

    def test_explicit_path(self, tmp_path: Path) -> None:
        """Test an explicit path is loaded."""
        path = tmp_path / "custom.yaml"
        path.write_text(POLICY_YAML)
        assert load_policy(str(path)).name == "Company Policy"

    def test_discovers_in_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the policy file in the working directory is used."""
        (tmp_path / ".license-policy.yml").write_text(POLICY_YAML)
        monkeypatch.chdir(tmp_path)
        assert load_policy().name == "Company Policy"

    def test_default_when_missing(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the built-in policy is used without a policy file."""
        monkeypatch.chdir(tmp_path)
        policy = load_policy()
        assert policy.id == "default"
        assert [rule.id for rule in policy.rules] == [
            "no-unknown",
            "no-network-copyleft",
            "strong-copyleft-review",
            "weak-copyleft-info",
        ]


class TestLoadOtherFiles:
    """Tests for templates, scans and sessions."""

    def test_templates_under_key(self, tmp_path: Path) -> None:
        """Test templates listed under a 'templates' key."""
        path = tmp_path / "templates.yaml"
        path.write_text(
            "templates:\n"
            "  - id: accept-mit\n"
            "    name: Accept MIT\n"
            "    conditions:\n"
            "      - {field: effective_license, operator: equals, value: MIT}\n"
            "    actions:\n"
            "      - {type: SET_STATUS, status: ACCEPTED}\n"
        )
        templates = load_templates_file(path)
        assert [t.id for t in templates] == ["accept-mit"]
        assert isinstance(templates[0].actions[0], SetStatusAction)

    def test_invalid_template(self, tmp_path: Path) -> None:
        """Test template validation errors are configuration errors."""
        path = tmp_path / "templates.yaml"
        path.write_text("- id: t\n  name: t\n  conditions: []\n  actions: []\n")
        with pytest.raises(ConfigurationError, match="Invalid templates"):
            load_templates_file(path)

    @pytest.mark.parametrize("name", ["templates.yaml", "templates.json"])
    def test_saved_templates_reload(self, tmp_path: Path, name: str) -> None:
        """Test saved templates keep their usage count."""
        path = tmp_path / name
        template = CurationTemplate(
            id="accept-mit",
            name="Accept MIT",
            conditions=[{"field": "effective_license", "operator": "equals", "value": "MIT"}],
            actions=[{"type": "SET_STATUS", "status": "ACCEPTED"}],
            usage_count=3,
        )
        save_templates_file(path, [template])

        reloaded = load_templates_file(path)
        assert reloaded == [template]
        assert reloaded[0].usage_count == 3

    def test_save_to_missing_directory(self, tmp_path: Path) -> None:
        """Test an unwritable templates path is a configuration error."""
        template = CurationTemplate(
            id="t",
            name="t",
            conditions=[{"field": "effective_license", "operator": "equals", "value": "MIT"}],
            actions=[{"type": "SET_STATUS", "status": "ACCEPTED"}],
        )
        with pytest.raises(ConfigurationError, match="Cannot write"):
            save_templates_file(tmp_path / "missing" / "templates.yaml", [template])

    def test_scan_as_list(self, tmp_path: Path) -> None:
        """Test a scan file holding a bare list of dependencies."""
        path = tmp_path / "scan.json"
        path.write_text(
            json.dumps(
                [
                    {"id": "PyPI::a:1", "name": "a", "version": "1", "concluded_license": "MIT"},
                    {"id": "PyPI::b:2", "name": "b", "declared_licenses": ["GPL-3.0-only"]},
                ]
            )
        )
        deps = load_scan_file(path)
        assert [d.effective_license for d in deps] == ["MIT", "GPL-3.0-only"]

    def test_scan_wrong_shape(self, tmp_path: Path) -> None:
        """Test a scan that is neither a list nor a mapping of dependencies."""
        path = tmp_path / "scan.json"
        path.write_text(json.dumps({"dependencies": "nope"}))
        with pytest.raises(ConfigurationError, match="expected a list"):
            load_scan_file(path)

    def test_session_round_trip(self, tmp_path: Path, make_dependency) -> None:
        """Test a stored session loads back with its computed fields ignored."""
        session = start_session("scan", [make_dependency("a", "MIT")], "alice")
        path = tmp_path / "session.json"
        path.write_text(session.model_dump_json(indent=2))

        loaded = load_session_file(path)
        assert loaded == session
        assert loaded.statistics.total == 1
