"""Default policy for license-curator."""

from __future__ import annotations

from license_curator.models.license import LicenseCategory
from license_curator.models.policy import (
    CategoryDefinition,
    CategoryMatch,
    PolicyConfig,
    PolicyRule,
    RuleAction,
    Severity,
)

# Default policy file names to search for
DEFAULT_POLICY_NAMES = [".license-policy.yaml", ".license-policy.yml"]

DEFAULT_CATEGORIES: dict[LicenseCategory, CategoryDefinition] = {
    LicenseCategory.PERMISSIVE: CategoryDefinition(
        description="Permissive licenses with minimal obligations",
        licenses=[
            "MIT",
            "Apache-2.0",
            "BSD-2-Clause",
            "BSD-3-Clause",
            "ISC",
            "0BSD",
            "Zlib",
            "BSL-1.0",
            "Unlicense",
            "CC0-1.0",
        ],
    ),
    LicenseCategory.WEAK_COPYLEFT: CategoryDefinition(
        description="Copyleft limited to the library or modified files",
        licenses=[
            "LGPL-2.1-only",
            "LGPL-2.1-or-later",
            "LGPL-3.0-only",
            "LGPL-3.0-or-later",
            "MPL-2.0",
            "EPL-2.0",
            "CDDL-1.0",
        ],
    ),
    LicenseCategory.STRONG_COPYLEFT: CategoryDefinition(
        description="Copyleft extending to the combined work",
        licenses=[
            "GPL-2.0-only",
            "GPL-2.0-or-later",
            "GPL-3.0-only",
            "GPL-3.0-or-later",
        ],
    ),
    LicenseCategory.NETWORK_COPYLEFT: CategoryDefinition(
        description="Copyleft triggered by network use",
        licenses=["AGPL-3.0-only", "AGPL-3.0-or-later", "SSPL-1.0"],
    ),
    LicenseCategory.UNKNOWN: CategoryDefinition(
        description="Licenses that could not be determined",
        licenses=["NOASSERTION"],
    ),
}

DEFAULT_RULES: list[PolicyRule] = [
    PolicyRule(
        id="no-unknown",
        name="No unknown licenses",
        description="Every dependency must have an identified license",
        severity=Severity.ERROR,
        action=RuleAction.DENY,
        match=CategoryMatch(categories=[LicenseCategory.UNKNOWN]),
        message="Dependency {{dependency}} has unresolved license - "
        "manual review required",
    ),
    PolicyRule(
        id="no-network-copyleft",
        name="No network copyleft",
        description="Network copyleft licenses are not allowed in shipped code",
        severity=Severity.ERROR,
        action=RuleAction.DENY,
        match=CategoryMatch(categories=[LicenseCategory.NETWORK_COPYLEFT]),
        message="{{dependency}} uses network copyleft license {{license}}",
    ),
    PolicyRule(
        id="strong-copyleft-review",
        name="Review strong copyleft",
        description="Strong copyleft licenses need legal review",
        severity=Severity.WARNING,
        action=RuleAction.REVIEW,
        match=CategoryMatch(categories=[LicenseCategory.STRONG_COPYLEFT]),
        message="{{dependency}} uses strong copyleft license {{license}}",
    ),
    PolicyRule(
        id="weak-copyleft-info",
        name="Weak copyleft notice",
        description="Weak copyleft licenses carry source disclosure obligations",
        severity=Severity.INFO,
        action=RuleAction.REVIEW,
        match=CategoryMatch(categories=[LicenseCategory.WEAK_COPYLEFT]),
        message="{{dependency}} uses weak copyleft license {{license}}",
    ),
]


def get_default_policy() -> PolicyConfig:
    """Get the built-in default policy.

    Returns:
        PolicyConfig denying unknown and network copyleft licenses and
        flagging strong and weak copyleft for review.
    """
    return PolicyConfig(
        id="default",
        name="Default License Policy",
        version="1.0",
        description="Built-in policy used when no policy file is found",
        categories=DEFAULT_CATEGORIES,
        rules=DEFAULT_RULES,
    )
