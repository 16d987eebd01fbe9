"""License compatibility checking for license-curator.

Applies a fixed compatibility lattice over license categories:

- permissive / public domain with each other: FULL
- permissive with copyleft or proprietary: CONDITIONAL
- copyleft with copyleft of a different strength: INCOMPATIBLE
- GPL-2.0-only with GPL-3.0: INCOMPATIBLE
- copyleft with copyleft of the same strength: CONDITIONAL
- proprietary with strong or network copyleft: INCOMPATIBLE
- anything involving an unknown or unrecognized license: UNKNOWN
"""

from __future__ import annotations

from typing import Optional

from license_curator.analysis.categorizer import categorize
from license_curator.analysis.expressions import normalize_license_id
from license_curator.models.explanation import CompatibilityLevel, CompatibilityResult
from license_curator.models.license import LicenseCategory

# Categories with no conditions on reuse
OPEN_CATEGORIES: frozenset[LicenseCategory] = frozenset(
    {LicenseCategory.PERMISSIVE, LicenseCategory.PUBLIC_DOMAIN}
)

UNDETERMINED_CATEGORIES: frozenset[LicenseCategory] = frozenset(
    {LicenseCategory.UNKNOWN, LicenseCategory.OTHER}
)

GPL_2_ONLY_LICENSES: set[str] = {"GPL-2.0-only"}

GPL_3_LICENSES: set[str] = {
    "GPL-3.0-only",
    "GPL-3.0-or-later",
}


def _result(
    license_a: str, license_b: str, level: CompatibilityLevel, reason: str
) -> CompatibilityResult:
    return CompatibilityResult(
        license_a=license_a, license_b=license_b, level=level, reason=reason
    )


def _is_gpl2_gpl3_pair(norm_a: Optional[str], norm_b: Optional[str]) -> bool:
    return (norm_a in GPL_2_ONLY_LICENSES and norm_b in GPL_3_LICENSES) or (
        norm_b in GPL_2_ONLY_LICENSES and norm_a in GPL_3_LICENSES
    )


def check_license_compatibility(
    license_a: Optional[str], license_b: Optional[str]
) -> CompatibilityResult:
    """Check if two licenses can be combined.

    Args:
        license_a: First license identifier.
        license_b: Second license identifier.

    Returns:
        CompatibilityResult with level and reason.
    """
    if not license_a or not license_b:
        return _result(
            license_a or "Unknown",
            license_b or "Unknown",
            CompatibilityLevel.UNKNOWN,
            "Cannot determine compatibility with unknown license",
        )

    cat_a = categorize(license_a)
    cat_b = categorize(license_b)

    if cat_a in UNDETERMINED_CATEGORIES or cat_b in UNDETERMINED_CATEGORIES:
        unknown = license_a if cat_a in UNDETERMINED_CATEGORIES else license_b
        return _result(
            license_a,
            license_b,
            CompatibilityLevel.UNKNOWN,
            f"{unknown} is not a recognized license",
        )

    norm_a = normalize_license_id(license_a)
    norm_b = normalize_license_id(license_b)

    if norm_a == norm_b:
        return _result(license_a, license_b, CompatibilityLevel.FULL, "Same license")

    if cat_a in OPEN_CATEGORIES and cat_b in OPEN_CATEGORIES:
        return _result(
            license_a,
            license_b,
            CompatibilityLevel.FULL,
            "Both licenses are permissive",
        )

    if cat_a in OPEN_CATEGORIES or cat_b in OPEN_CATEGORIES:
        permissive, other = (
            (license_a, license_b) if cat_a in OPEN_CATEGORIES else (license_b, license_a)
        )
        return _result(
            license_a,
            license_b,
            CompatibilityLevel.CONDITIONAL,
            f"{permissive} code can be combined with {other} if {other}'s terms "
            "are met for the combined work",
        )

    if cat_a == LicenseCategory.PROPRIETARY or cat_b == LicenseCategory.PROPRIETARY:
        other_cat = cat_b if cat_a == LicenseCategory.PROPRIETARY else cat_a
        if other_cat in (
            LicenseCategory.STRONG_COPYLEFT,
            LicenseCategory.NETWORK_COPYLEFT,
        ):
            return _result(
                license_a,
                license_b,
                CompatibilityLevel.INCOMPATIBLE,
                f"{other_cat.display_name} terms conflict with proprietary terms",
            )
        return _result(
            license_a,
            license_b,
            CompatibilityLevel.CONDITIONAL,
            "Proprietary terms must be reviewed for the combination",
        )

    # Both copyleft from here on
    if cat_a != cat_b:
        return _result(
            license_a,
            license_b,
            CompatibilityLevel.INCOMPATIBLE,
            f"{cat_a.display_name} ({license_a}) and {cat_b.display_name} "
            f"({license_b}) impose differing copyleft terms",
        )

    if _is_gpl2_gpl3_pair(norm_a, norm_b):
        return _result(
            license_a,
            license_b,
            CompatibilityLevel.INCOMPATIBLE,
            "GPL-2.0-only is not compatible with GPL-3.0",
        )

    return _result(
        license_a,
        license_b,
        CompatibilityLevel.CONDITIONAL,
        f"Both licenses are {cat_a.display_name.lower()}; combination depends "
        "on how the works are linked",
    )


def check_all_compatibility(licenses: list[str]) -> list[CompatibilityResult]:
    """Check compatibility between all license pairs.

    Args:
        licenses: List of license identifiers.

    Returns:
        Results for every pair that is not FULL, in first-seen order.
    """
    results: list[CompatibilityResult] = []

    unique_licenses = list(dict.fromkeys(licenses))

    for i, license_a in enumerate(unique_licenses):
        for license_b in unique_licenses[i + 1 :]:
            result = check_license_compatibility(license_a, license_b)
            if result.level != CompatibilityLevel.FULL:
                results.append(result)

    return results
