"""Obligations imposed by licenses."""

from __future__ import annotations

from typing import Optional

from license_curator.analysis.categorizer import categorize
from license_curator.analysis.expressions import normalize_license_id
from license_curator.models.explanation import EffortLevel, Obligation, ObligationType
from license_curator.models.license import LicenseCategory

# Licenses with an express patent grant (and patent retaliation terms)
PATENT_GRANT_LICENSES: set[str] = {
    "Apache-2.0",
    "GPL-3.0-only",
    "GPL-3.0-or-later",
    "LGPL-3.0-only",
    "LGPL-3.0-or-later",
    "AGPL-3.0-only",
    "AGPL-3.0-or-later",
    "MPL-2.0",
    "EPL-1.0",
    "EPL-2.0",
}

_SOURCE_DISCLOSURE_EFFORT = {
    LicenseCategory.WEAK_COPYLEFT: EffortLevel.MEDIUM,
    LicenseCategory.STRONG_COPYLEFT: EffortLevel.HIGH,
    LicenseCategory.NETWORK_COPYLEFT: EffortLevel.HIGH,
}


def get_obligations(license_id: Optional[str]) -> list[Obligation]:
    """List the obligations triggered by using a license.

    Unknown and unrecognized licenses yield no obligations; their terms
    have to be investigated first.

    Args:
        license_id: License identifier.

    Returns:
        Obligations in a fixed order: attribution, source disclosure,
        same license, network disclosure, patent grant, vendor terms.
    """
    if not license_id:
        return []

    category = categorize(license_id)
    obligations: list[Obligation] = []

    if category == LicenseCategory.PERMISSIVE or category.is_copyleft:
        obligations.append(
            Obligation(
                type=ObligationType.ATTRIBUTION,
                license=license_id,
                description="Retain copyright notices and include the license text "
                "with every distribution",
                effort=EffortLevel.LOW,
            )
        )

    if category.is_copyleft:
        scope = (
            "modified files of the library"
            if category == LicenseCategory.WEAK_COPYLEFT
            else "the complete corresponding source of the combined work"
        )
        obligations.append(
            Obligation(
                type=ObligationType.SOURCE_DISCLOSURE,
                license=license_id,
                description=f"Make {scope} available to recipients",
                effort=_SOURCE_DISCLOSURE_EFFORT[category],
            )
        )

    if category in (LicenseCategory.STRONG_COPYLEFT, LicenseCategory.NETWORK_COPYLEFT):
        obligations.append(
            Obligation(
                type=ObligationType.SAME_LICENSE,
                license=license_id,
                description="License the derivative work under the same terms",
                effort=EffortLevel.HIGH,
            )
        )

    if category == LicenseCategory.NETWORK_COPYLEFT:
        obligations.append(
            Obligation(
                type=ObligationType.NETWORK_SOURCE_DISCLOSURE,
                license=license_id,
                description="Offer source code to users interacting with the "
                "software over a network",
                trigger="network use",
                effort=EffortLevel.HIGH,
            )
        )

    if normalize_license_id(license_id) in PATENT_GRANT_LICENSES:
        obligations.append(
            Obligation(
                type=ObligationType.PATENT_GRANT,
                license=license_id,
                description="Patent license is granted; it terminates if you bring "
                "patent claims against contributors",
                trigger="patent litigation",
                effort=EffortLevel.LOW,
            )
        )

    if category == LicenseCategory.PROPRIETARY:
        obligations.append(
            Obligation(
                type=ObligationType.VENDOR_TERMS,
                license=license_id,
                description="Comply with the vendor's license agreement",
                trigger="any use",
                effort=EffortLevel.MEDIUM,
            )
        )

    return obligations
