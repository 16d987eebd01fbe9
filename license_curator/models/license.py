"""License category model shared by policy evaluation and curation."""

from typing import Optional

from license_curator.models.base import CaseInsensitiveEnum, normalize_enum_key

# Alternative spellings accepted in policy files
_CATEGORY_ALIASES = {
    "COPYLEFT": "STRONG_COPYLEFT",
    "STRONG": "STRONG_COPYLEFT",
    "WEAK": "WEAK_COPYLEFT",
    "COPYLEFT_LIMITED": "WEAK_COPYLEFT",
    "NETWORK": "NETWORK_COPYLEFT",
    "PUBLIC": "PUBLIC_DOMAIN",
    "COMMERCIAL": "PROPRIETARY",
}

_RISK_LEVELS = {
    "PUBLIC_DOMAIN": 0,
    "PERMISSIVE": 1,
    "WEAK_COPYLEFT": 2,
    "OTHER": 3,
    "STRONG_COPYLEFT": 4,
    "PROPRIETARY": 5,
    "UNKNOWN": 5,
    "NETWORK_COPYLEFT": 6,
}


class LicenseCategory(CaseInsensitiveEnum):
    """Categories of licenses by restriction level."""

    PERMISSIVE = "PERMISSIVE"
    PUBLIC_DOMAIN = "PUBLIC_DOMAIN"
    WEAK_COPYLEFT = "WEAK_COPYLEFT"
    STRONG_COPYLEFT = "STRONG_COPYLEFT"
    NETWORK_COPYLEFT = "NETWORK_COPYLEFT"
    PROPRIETARY = "PROPRIETARY"
    UNKNOWN = "UNKNOWN"
    OTHER = "OTHER"

    @classmethod
    def _missing_(cls, value: object) -> Optional["LicenseCategory"]:
        if not isinstance(value, str):
            return None
        key = normalize_enum_key(value)
        key = _CATEGORY_ALIASES.get(key, key)
        for member in cls:
            if member.value == key:
                return member
        return None

    @property
    def display_name(self) -> str:
        """Human readable name, e.g. "Strong copyleft"."""
        return self.value.replace("_", " ").capitalize()

    @property
    def risk_level(self) -> int:
        """Risk on a 0-6 scale; 6 is network copyleft contamination."""
        return _RISK_LEVELS[self.value]

    @property
    def is_copyleft(self) -> bool:
        return self in (
            LicenseCategory.WEAK_COPYLEFT,
            LicenseCategory.STRONG_COPYLEFT,
            LicenseCategory.NETWORK_COPYLEFT,
        )

    @property
    def requires_justification(self) -> bool:
        """Accepting anything but a permissive license needs a justification."""
        return self is not LicenseCategory.PERMISSIVE
