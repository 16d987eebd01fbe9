"""Policy, template, scan and session file loading for license-curator."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from license_curator.config.defaults import DEFAULT_POLICY_NAMES, get_default_policy
from license_curator.exceptions import ConfigurationError
from license_curator.models.dependency import Dependency
from license_curator.models.policy import PolicyConfig
from license_curator.models.session import CurationSession
from license_curator.models.template import CurationTemplate

_dependency_list = TypeAdapter(list[Dependency])
_template_list = TypeAdapter(list[CurationTemplate])


def find_policy_file(start_dir: Path | None = None) -> Path | None:
    """Find a policy file in the specified directory.

    Searches for `.license-policy.yaml` first, then `.license-policy.yml`.

    Args:
        start_dir: Directory to search. Defaults to current working directory.

    Returns:
        Path to the policy file if found, None otherwise.
    """
    search_dir = start_dir or Path.cwd()
    for name in DEFAULT_POLICY_NAMES:
        policy_path = search_dir / name
        if policy_path.exists():
            return policy_path
    return None


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Cannot read file '{path}': {e}") from e


def _parse(path: Path, content: str) -> Any:
    """Parse JSON files with json and everything else as YAML."""
    if path.suffix.lower() == ".json":
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON syntax in '{path}': {e}") from e
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML syntax in '{path}': {e}") from e


def _format_validation_errors(error: PydanticValidationError) -> str:
    """Format Pydantic validation errors into a readable string.

    Args:
        error: The Pydantic ValidationError.

    Returns:
        Formatted error message string.
    """
    messages: list[str] = []
    for err in error.errors():
        loc = ".".join(str(x) for x in err["loc"]) if err["loc"] else "root"
        msg = err["msg"]
        messages.append(f"{loc}: {msg}")
    return "; ".join(messages)


def load_policy_file(path: Path) -> PolicyConfig:
    """Load and validate a policy from a YAML file.

    Args:
        path: Path to the policy file.

    Returns:
        Validated PolicyConfig. An empty file yields the default policy.

    Raises:
        ConfigurationError: If the file cannot be read, has invalid YAML,
            or fails validation.
    """
    content = _read_text(path)
    if not content.strip():
        return get_default_policy()

    data = _parse(path, content)
    if data is None:
        return get_default_policy()

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Invalid policy in '{path}': "
            f"expected a mapping at root level, got {type(data).__name__}"
        )

    try:
        return PolicyConfig.model_validate(data)
    except PydanticValidationError as e:
        error_messages = _format_validation_errors(e)
        raise ConfigurationError(f"Invalid policy in '{path}': {error_messages}") from e


def load_policy(policy_path: str | None = None) -> PolicyConfig:
    """Load a policy from file or use the default policy.

    If a policy_path is provided, loads from that file. Otherwise searches
    the current directory for a policy file; if none is found the built-in
    default policy is returned.

    Args:
        policy_path: Optional path to a policy file.

    Raises:
        ConfigurationError: If the policy file is invalid.
    """
    if policy_path is not None:
        return load_policy_file(Path(policy_path))

    discovered = find_policy_file()
    if discovered is not None:
        return load_policy_file(discovered)

    return get_default_policy()


def _unwrap_list(path: Path, data: Any, key: str) -> list[Any]:
    """Accept either a bare list or a mapping holding the list under ``key``."""
    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get(key, [])
    if not isinstance(data, list):
        raise ConfigurationError(
            f"Invalid file '{path}': expected a list of {key}, "
            f"got {type(data).__name__}"
        )
    return data


def load_templates_file(path: Path) -> list[CurationTemplate]:
    """Load curation templates from a YAML or JSON file.

    Raises:
        ConfigurationError: If the file cannot be read or a template is
            invalid.
    """
    data = _unwrap_list(path, _parse(path, _read_text(path)), "templates")
    try:
        return _template_list.validate_python(data)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid templates in '{path}': {_format_validation_errors(e)}"
        ) from e


def load_scan_file(path: Path) -> list[Dependency]:
    """Load the dependencies of a scan from a JSON or YAML file.

    Raises:
        ConfigurationError: If the file cannot be read or a dependency is
            invalid.
    """
    data = _unwrap_list(path, _parse(path, _read_text(path)), "dependencies")
    try:
        return _dependency_list.validate_python(data)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid scan in '{path}': {_format_validation_errors(e)}"
        ) from e


def load_session_file(path: Path) -> CurationSession:
    """Load a stored curation session.

    Raises:
        ConfigurationError: If the file cannot be read or is not a valid
            session.
    """
    data = _parse(path, _read_text(path))
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Invalid session in '{path}': expected a mapping at root level"
        )
    try:
        return CurationSession.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid session in '{path}': {_format_validation_errors(e)}"
        ) from e


def save_templates_file(path: Path, templates: list[CurationTemplate]) -> None:
    """Write templates back, as JSON for .json files and YAML otherwise.

    Raises:
        ConfigurationError: If the file cannot be written.
    """
    data = {
        "templates": [
            template.model_dump(mode="json", exclude_none=True) for template in templates
        ]
    }
    if path.suffix.lower() == ".json":
        content = json.dumps(data, indent=2)
    else:
        content = yaml.safe_dump(data, sort_keys=False)
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot write to file '{path}': {e}") from e
