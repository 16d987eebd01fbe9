"""Enhanced explanations for policy violations.

Builds the advisory bundle shown to curators next to a violation: why the
license is a problem, which obligations it triggers, which other
dependencies it conflicts with, and what can be done about it. Nothing here
changes the violation itself.
"""

from __future__ import annotations

from license_curator.analysis.categorizer import categorize
from license_curator.analysis.compatibility import check_license_compatibility
from license_curator.analysis.expressions import is_or_expression, is_valid_spdx
from license_curator.analysis.obligations import get_obligations
from license_curator.models.dependency import Dependency
from license_curator.models.explanation import (
    CompatibilityIssue,
    CompatibilityLevel,
    EffortLevel,
    EnhancedExplanation,
    Obligation,
    ResolutionSuggestion,
    ResolutionType,
    WhyNotExplanation,
    WhyNotType,
)
from license_curator.models.license import LicenseCategory
from license_curator.models.policy import Violation

# Scopes that do not ship with the product
NON_SHIPPING_SCOPES: frozenset[str] = frozenset(
    {"test", "tests", "testimplementation", "dev", "development", "docs", "build"}
)

_UNKNOWN_RISK = 5
_EXPRESSION_RISK = 3
_UNRECOGNIZED_RISK = 4


def explain(violation: Violation, all_dependencies: list[Dependency]) -> EnhancedExplanation:
    """Explain a violation.

    Args:
        violation: The violation to explain.
        all_dependencies: Every dependency of the scan; each one other than
            the violating dependency is checked for compatibility.

    Returns:
        EnhancedExplanation with resolutions sorted by effort.
    """
    license_id = violation.license
    category = categorize(license_id)
    expression = is_or_expression(license_id)

    why_not = _why_not(license_id, category, expression, violation.license_category)
    obligations = [] if expression else get_obligations(license_id)
    issues = _compatibility_issues(violation, all_dependencies)
    resolutions = _resolutions(violation, category, expression, obligations)

    return EnhancedExplanation(
        why_not=why_not,
        obligations=obligations,
        compatibility_issues=issues,
        resolutions=resolutions,
    )


def _why_not(
    license_id: str,
    category: LicenseCategory,
    expression: bool,
    policy_category: LicenseCategory,
) -> list[WhyNotExplanation]:
    if category == LicenseCategory.UNKNOWN:
        return [
            WhyNotExplanation(
                type=WhyNotType.UNKNOWN_LICENSE,
                summary="No license could be determined for this dependency",
                detail="Without a license there is no permission to use, modify "
                "or distribute the code.",
                risk_level=_UNKNOWN_RISK,
            )
        ]

    if expression:
        return [
            WhyNotExplanation(
                type=WhyNotType.LICENSE_EXPRESSION,
                summary=f"'{license_id}' offers a choice between licenses",
                detail="One of the alternatives must be chosen and documented.",
                risk_level=_EXPRESSION_RISK,
            )
        ]

    entries: list[WhyNotExplanation] = []
    if category == LicenseCategory.OTHER and not is_valid_spdx(license_id):
        entries.append(
            WhyNotExplanation(
                type=WhyNotType.UNRECOGNIZED_LICENSE,
                summary=f"'{license_id}' is not a recognized license identifier",
                detail="The license text must be reviewed to learn its terms.",
                risk_level=_UNRECOGNIZED_RISK,
            )
        )
    else:
        effective_category = policy_category or category
        entries.append(
            WhyNotExplanation(
                type=WhyNotType.LICENSE_CATEGORY,
                summary=f"{license_id} is classified as "
                f"{effective_category.display_name.lower()}",
                risk_level=effective_category.risk_level,
            )
        )

    if category.is_copyleft:
        entries.append(
            WhyNotExplanation(
                type=WhyNotType.COPYLEFT_RISK,
                summary=_copyleft_summary(category),
                detail="Copyleft terms can extend to code combined with this "
                "dependency.",
                risk_level=category.risk_level,
            )
        )
    return entries


def _copyleft_summary(category: LicenseCategory) -> str:
    if category == LicenseCategory.NETWORK_COPYLEFT:
        return "Source must be offered even when the software is only used over a network"
    if category == LicenseCategory.STRONG_COPYLEFT:
        return "Distributing a combined work requires releasing it under the same license"
    return "Modifications to the library itself must be released"


def _compatibility_issues(
    violation: Violation, all_dependencies: list[Dependency]
) -> list[CompatibilityIssue]:
    issues: list[CompatibilityIssue] = []
    for dependency in all_dependencies:
        if dependency.id == violation.dependency_id:
            continue
        other_license = dependency.effective_license
        result = check_license_compatibility(violation.license, other_license)
        if result.level == CompatibilityLevel.FULL:
            continue
        issues.append(
            CompatibilityIssue(
                other_dependency_id=dependency.id,
                other_dependency_name=dependency.name,
                license=violation.license,
                other_license=other_license,
                level=result.level,
                reason=result.reason,
            )
        )
    return issues


def _resolutions(
    violation: Violation,
    category: LicenseCategory,
    expression: bool,
    obligations: list[Obligation],
) -> list[ResolutionSuggestion]:
    suggestions: list[ResolutionSuggestion] = []
    recommended: ResolutionType

    non_shipping = (violation.scope or "").lower() in NON_SHIPPING_SCOPES

    if expression:
        suggestions.append(_document_choice(violation))
        recommended = ResolutionType.DOCUMENT_CHOICE
    elif category in (LicenseCategory.UNKNOWN, LicenseCategory.OTHER):
        suggestions.append(_investigate(violation))
        suggestions.append(_replace(violation))
        recommended = ResolutionType.INVESTIGATE
    elif category == LicenseCategory.PROPRIETARY:
        suggestions.append(_investigate(violation))
        suggestions.append(_replace(violation))
        recommended = ResolutionType.INVESTIGATE
    elif category in (LicenseCategory.STRONG_COPYLEFT, LicenseCategory.NETWORK_COPYLEFT):
        suggestions.append(_replace(violation))
        suggestions.append(_isolate(violation))
        suggestions.append(_accept_obligations(violation, obligations))
        recommended = ResolutionType.REPLACE_DEPENDENCY
    elif category == LicenseCategory.WEAK_COPYLEFT:
        suggestions.append(_accept_obligations(violation, obligations))
        suggestions.append(_replace(violation))
        recommended = ResolutionType.ACCEPT_OBLIGATIONS
    else:
        suggestions.append(_replace(violation))
        recommended = ResolutionType.REPLACE_DEPENDENCY

    if non_shipping:
        suggestions.append(_add_exception(violation))
        recommended = ResolutionType.ADD_EXCEPTION

    suggestions.append(_request_exception(violation))

    marked = [
        s.model_copy(update={"recommended": s.type == recommended}) for s in suggestions
    ]
    return sorted(marked, key=lambda s: s.effort.rank)


def _replace(violation: Violation) -> ResolutionSuggestion:
    return ResolutionSuggestion(
        type=ResolutionType.REPLACE_DEPENDENCY,
        title=f"Replace {violation.dependency_name}",
        description="Use an alternative package under a license the policy allows.",
        effort=EffortLevel.MEDIUM,
        steps=[
            "Search for packages providing the same functionality",
            "Check the candidate's license against the policy",
            f"Migrate usages away from {violation.dependency_name}",
        ],
    )


def _isolate(violation: Violation) -> ResolutionSuggestion:
    return ResolutionSuggestion(
        type=ResolutionType.ISOLATE_SERVICE,
        title="Isolate behind a service boundary",
        description=f"Run {violation.dependency_name} as a separate process or "
        "service so it is not combined with proprietary code.",
        effort=EffortLevel.HIGH,
        steps=[
            "Move the functionality into a separately deployed component",
            "Communicate only through a network or IPC interface",
            "Distribute the isolated component under its own license",
        ],
    )


def _accept_obligations(
    violation: Violation, obligations: list[Obligation]
) -> ResolutionSuggestion:
    effort = EffortLevel.HIGH if len(obligations) > 3 else EffortLevel.MEDIUM
    return ResolutionSuggestion(
        type=ResolutionType.ACCEPT_OBLIGATIONS,
        title=f"Accept the obligations of {violation.license}",
        description="Keep the dependency and meet every obligation of its license.",
        effort=effort,
        steps=[obligation.description for obligation in obligations],
    )


def _document_choice(violation: Violation) -> ResolutionSuggestion:
    return ResolutionSuggestion(
        type=ResolutionType.DOCUMENT_CHOICE,
        title="Choose and document one license",
        description=f"Select one alternative of '{violation.license}' and record "
        "the reason for the choice.",
        effort=EffortLevel.LOW,
        steps=[
            "Pick the alternative that best fits the distribution model",
            "Resolve the OR-license on the curation item with a reason",
        ],
    )


def _investigate(violation: Violation) -> ResolutionSuggestion:
    return ResolutionSuggestion(
        type=ResolutionType.INVESTIGATE,
        title="Investigate the actual license",
        description=f"Inspect the source of {violation.dependency_name} to find "
        "its license terms.",
        effort=EffortLevel.LOW,
        steps=[
            "Look for LICENSE, COPYING or NOTICE files in the repository",
            "Check package metadata and file headers",
            "Contact the maintainers or vendor if nothing is found",
        ],
    )


def _add_exception(violation: Violation) -> ResolutionSuggestion:
    return ResolutionSuggestion(
        type=ResolutionType.ADD_EXCEPTION,
        title="Add a policy exemption",
        description=f"{violation.dependency_name} is only used in the "
        f"'{violation.scope}' scope and is not distributed.",
        effort=EffortLevel.LOW,
        steps=[
            f"Add an exemption for '{violation.dependency_id}' to the policy",
            "Record the reason and the approver",
        ],
    )


def _request_exception(violation: Violation) -> ResolutionSuggestion:
    return ResolutionSuggestion(
        type=ResolutionType.REQUEST_EXCEPTION,
        title="Request an exception",
        description=f"Ask the compliance team to approve {violation.license} "
        f"for {violation.dependency_name}.",
        effort=EffortLevel.LOW,
        steps=[
            "Describe how the dependency is used and distributed",
            "Attach a justification to the curation decision",
        ],
    )
