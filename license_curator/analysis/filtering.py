"""Policy exemption filtering."""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import NamedTuple, Optional

from license_curator.models.dependency import Dependency
from license_curator.models.policy import ExemptedDependency, Exemption


class ExemptionResult(NamedTuple):
    """Result of applying exemptions to a dependency list.

    Attributes:
        dependencies: Dependencies that still need rule evaluation.
        exempted: Records of the dependencies that were skipped.
    """

    dependencies: list[Dependency]
    exempted: list[ExemptedDependency]


def find_exemption(
    dependency_id: str, exemptions: list[Exemption]
) -> Optional[Exemption]:
    """Return the first exemption whose pattern matches the dependency id.

    Patterns are case-sensitive globs matched against the whole id, so
    ``PyPI::internal-*`` matches ``PyPI::internal-tools:1.0``.
    """
    for exemption in exemptions:
        if fnmatchcase(dependency_id, exemption.dependency):
            return exemption
    return None


def filter_exempted(
    dependencies: list[Dependency],
    exemptions: list[Exemption],
) -> ExemptionResult:
    """Split dependencies into those to evaluate and those exempted.

    Args:
        dependencies: Dependencies from the scan, in scan order.
        exemptions: Exemptions from the policy settings.

    Returns:
        ExemptionResult preserving the input order in both lists.
    """
    if not exemptions:
        return ExemptionResult(dependencies=list(dependencies), exempted=[])

    remaining: list[Dependency] = []
    exempted: list[ExemptedDependency] = []

    for dependency in dependencies:
        exemption = find_exemption(dependency.id, exemptions)
        if exemption is None:
            remaining.append(dependency)
            continue
        exempted.append(
            ExemptedDependency(
                dependency_id=dependency.id,
                dependency_name=dependency.name,
                pattern=exemption.dependency,
                reason=exemption.reason,
                approved_by=exemption.approved_by,
            )
        )

    return ExemptionResult(dependencies=remaining, exempted=exempted)
