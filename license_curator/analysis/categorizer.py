"""License categorization by keyword matching.

Maps a license identifier to a LicenseCategory. Matching is a
case-insensitive substring test; weak copyleft is checked before AGPL and
AGPL before GPL so that "LGPL-2.1" is not taken for strong copyleft.
"""

from __future__ import annotations

from typing import Optional

from license_curator.constants import NO_ASSERTION
from license_curator.models.license import LicenseCategory
from license_curator.models.policy import PolicyConfig

UNKNOWN_MARKERS: frozenset[str] = frozenset({"", NO_ASSERTION.upper(), "UNKNOWN", "NONE"})

PERMISSIVE_KEYWORDS: tuple[str, ...] = (
    "MIT",
    "APACHE",
    "BSD",
    "ISC",
    "UNLICENSE",
    "CC0",
    "ZLIB",
    "BSL-1.0",
    "WTFPL",
)

PUBLIC_DOMAIN_KEYWORDS: tuple[str, ...] = ("PUBLIC DOMAIN", "PUBLIC-DOMAIN")

WEAK_COPYLEFT_KEYWORDS: tuple[str, ...] = ("LGPL", "MPL", "EPL", "CDDL")

NETWORK_COPYLEFT_KEYWORDS: tuple[str, ...] = ("AGPL", "SSPL")

STRONG_COPYLEFT_KEYWORDS: tuple[str, ...] = ("GPL",)

PROPRIETARY_KEYWORDS: tuple[str, ...] = ("PROPRIETARY", "COMMERCIAL")

_KEYWORD_ORDER: tuple[tuple[tuple[str, ...], LicenseCategory], ...] = (
    (PERMISSIVE_KEYWORDS, LicenseCategory.PERMISSIVE),
    (PUBLIC_DOMAIN_KEYWORDS, LicenseCategory.PUBLIC_DOMAIN),
    (WEAK_COPYLEFT_KEYWORDS, LicenseCategory.WEAK_COPYLEFT),
    (NETWORK_COPYLEFT_KEYWORDS, LicenseCategory.NETWORK_COPYLEFT),
    (STRONG_COPYLEFT_KEYWORDS, LicenseCategory.STRONG_COPYLEFT),
    (PROPRIETARY_KEYWORDS, LicenseCategory.PROPRIETARY),
)


def categorize(license_id: Optional[str]) -> LicenseCategory:
    """Categorize a license identifier.

    Never raises; anything that matches no keyword list is OTHER.

    Args:
        license_id: License identifier or expression, or None.

    Returns:
        The license category.
    """
    normalized = (license_id or "").strip().upper()
    if normalized in UNKNOWN_MARKERS:
        return LicenseCategory.UNKNOWN

    for keywords, category in _KEYWORD_ORDER:
        if any(keyword in normalized for keyword in keywords):
            return category

    return LicenseCategory.OTHER


def category_index(config: Optional[PolicyConfig]) -> dict[str, LicenseCategory]:
    """Build a lookup of the license ids a policy assigns to categories.

    Keys are lower-cased. When a license is listed under several
    categories the first one wins.
    """
    index: dict[str, LicenseCategory] = {}
    if config is None:
        return index
    for category, definition in config.categories.items():
        for license_id in definition.licenses:
            index.setdefault(license_id.strip().lower(), category)
    return index


def classify(
    license_id: Optional[str],
    index: Optional[dict[str, LicenseCategory]] = None,
) -> LicenseCategory:
    """Categorize a license, preferring the policy's explicit category lists."""
    if index and license_id:
        listed = index.get(license_id.strip().lower())
        if listed is not None:
            return listed
    return categorize(license_id)
