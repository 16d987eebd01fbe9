"""Configuration handling for license-curator."""
from __future__ import annotations

from license_curator.config.defaults import DEFAULT_POLICY_NAMES, get_default_policy
from license_curator.config.loader import (
    find_policy_file,
    load_policy,
    load_policy_file,
    load_scan_file,
    load_session_file,
    load_templates_file,
    save_templates_file,
)

__all__ = [
    "DEFAULT_POLICY_NAMES",
    "find_policy_file",
    "get_default_policy",
    "load_policy",
    "load_policy_file",
    "load_scan_file",
    "load_session_file",
    "load_templates_file",
    "save_templates_file",
]
