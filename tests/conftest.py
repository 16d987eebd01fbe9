"""Shared fixtures for license-curator tests."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

import pytest
from click.testing import CliRunner

from license_curator.models.dependency import AiConfidence, AiSuggestion, Dependency
from license_curator.models.policy import PolicyConfig

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def now() -> datetime:
    """A fixed timestamp so results can be compared."""
    return FIXED_NOW


@pytest.fixture
def make_dependency() -> Callable[..., Dependency]:
    """Factory building a dependency with an id derived from its name."""

    def _make(
        name: str,
        license_id: Optional[str] = None,
        *,
        version: str = "1.0.0",
        scope: Optional[str] = "runtime",
        declared: Optional[list[str]] = None,
        ai_license: Optional[str] = None,
        ai_confidence: AiConfidence = AiConfidence.HIGH,
    ) -> Dependency:
        suggestion = (
            AiSuggestion(suggested_license=ai_license, confidence=ai_confidence)
            if ai_license
            else None
        )
        return Dependency(
            id=f"PyPI::{name}:{version}",
            name=name,
            version=version,
            scope=scope,
            declared_licenses=declared or [],
            concluded_license=license_id,
            ai_suggestion=suggestion,
        )

    return _make


@pytest.fixture
def strict_policy() -> PolicyConfig:
    """Policy denying strong and network copyleft, warning on unknown licenses."""
    return PolicyConfig.model_validate(
        {
            "name": "Strict",
            "version": "2.0",
            "rules": [
                {
                    "id": "no-copyleft",
                    "name": "No strong copyleft",
                    "severity": "ERROR",
                    "action": "DENY",
                    "category": ["STRONG_COPYLEFT", "NETWORK_COPYLEFT"],
                    "message": "{{dependency}} uses {{license}}",
                },
                {
                    "id": "no-unknown",
                    "severity": "WARNING",
                    "action": "REVIEW",
                    "category": "UNKNOWN",
                },
            ],
        }
    )
