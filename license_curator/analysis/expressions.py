"""SPDX license expression helpers.

Uses the license-expression library both for SPDX normalization and for
splitting OR expressions into the alternatives a curator chooses between.
"""

from __future__ import annotations

import re
from typing import Optional

from license_expression import ExpressionError, Licensing, get_spdx_licensing

# Initialize SPDX licensing for normalization
_spdx_licensing = get_spdx_licensing()

# Plain licensing keeps license keys as written when splitting expressions
_licensing = Licensing()

_OR_PATTERN = re.compile(r"\s+OR\s+", re.IGNORECASE)


def normalize_license_id(license_id: Optional[str]) -> Optional[str]:
    """Normalize a license ID using the SPDX license list.

    Handles common variations like GPL-3.0 -> GPL-3.0-only.

    Args:
        license_id: SPDX license identifier or None.

    Returns:
        Normalized SPDX license key, the stripped input if it is not a
        known SPDX id or a compound expression, or None for empty input.
    """
    if license_id is None:
        return None

    license_id = license_id.strip()
    if not license_id:
        return None

    try:
        parsed = _spdx_licensing.parse(license_id, validate=True)
    except ExpressionError:
        return license_id

    if hasattr(parsed, "key"):
        return str(parsed.key)
    return license_id


def is_valid_spdx(license_id: str) -> bool:
    """Check if a license ID or expression only uses known SPDX ids."""
    try:
        _spdx_licensing.parse(license_id, validate=True)
        return True
    except ExpressionError:
        return False


def split_or_options(expression: Optional[str]) -> list[str]:
    """Split an expression into its top-level OR alternatives.

    Compound alternatives stay together: "(MIT AND BSD-2-Clause) OR GPL-2.0"
    gives ["MIT AND BSD-2-Clause", "GPL-2.0"]. Text the parser rejects is
    split on the OR keyword instead. Duplicates are dropped, order kept.

    Args:
        expression: License expression.

    Returns:
        The alternatives, or a single-element list when there is no OR.
    """
    if expression is None or not expression.strip():
        return []

    try:
        parsed = _licensing.parse(expression)
    except ExpressionError:
        options = [_strip_parentheses(part) for part in _OR_PATTERN.split(expression)]
    else:
        if parsed is None:
            return []
        if isinstance(parsed, _licensing.OR):
            options = [str(arg) for arg in _flatten_or(parsed)]
        else:
            options = [expression.strip()]

    return _unique([option for option in options if option])


def is_or_expression(expression: Optional[str]) -> bool:
    """True when the expression offers a choice between licenses."""
    return len(split_or_options(expression)) > 1


def _flatten_or(expression: object) -> list[object]:
    args: list[object] = []
    for arg in expression.args:  # type: ignore[attr-defined]
        if isinstance(arg, _licensing.OR):
            args.extend(_flatten_or(arg))
        else:
            args.append(arg)
    return args


def _strip_parentheses(text: str) -> str:
    text = text.strip()
    while text.startswith("(") and text.endswith(")"):
        text = text[1:-1].strip()
    return text


def _unique(values: list[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result
