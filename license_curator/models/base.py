"""Shared enum base for license-curator models."""

from enum import Enum
from typing import Optional


def normalize_enum_key(value: str) -> str:
    """Normalize a user supplied enum value ("strong-copyleft" -> "STRONG_COPYLEFT")."""
    return value.strip().upper().replace("-", "_").replace(" ", "_")


class CaseInsensitiveEnum(str, Enum):
    """String enum whose values parse case-insensitively.

    Values are stored upper-case. Lookups such as ``Severity("error")`` or a
    YAML ``severity: warning`` resolve to the matching member.
    """

    @classmethod
    def _missing_(cls, value: object) -> Optional["CaseInsensitiveEnum"]:
        if not isinstance(value, str):
            return None
        key = normalize_enum_key(value)
        for member in cls:
            if member.value == key:
                return member
        return None
