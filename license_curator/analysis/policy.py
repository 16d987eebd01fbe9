"""Policy rule evaluation for license-curator.

Evaluates every dependency against every enabled rule of a policy and
collects the resulting violations into a PolicyReport.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from license_curator.analysis.categorizer import category_index, classify
from license_curator.analysis.explanation import explain
from license_curator.analysis.filtering import filter_exempted
from license_curator.models.dependency import AiConfidence, Dependency
from license_curator.models.license import LicenseCategory
from license_curator.models.policy import (
    AiSuggestionSettings,
    PolicyConfig,
    PolicyReport,
    PolicyRule,
    RuleAction,
    Violation,
)

logger = logging.getLogger(__name__)


def rule_matches(
    rule: PolicyRule,
    dependency: Dependency,
    license_id: str,
    category: LicenseCategory,
) -> bool:
    """Check whether an enabled rule matches a dependency.

    A rule matches when its scope filter (if any) contains the dependency's
    scope and its license predicate matches the license or its category.
    """
    if not rule.applies_to_scope(dependency.scope):
        return False
    return rule.match.matches(license_id, category)


def suggested_fix(
    dependency: Dependency, settings: AiSuggestionSettings
) -> Optional[str]:
    """Describe the AI-suggested license as a fix, if it may be offered."""
    suggestion = dependency.ai_suggestion
    if suggestion is None:
        return None
    if suggestion.confidence == AiConfidence.LOW and settings.reject_low_confidence:
        return None
    fix = (
        f"AI suggests {suggestion.suggested_license} "
        f"({suggestion.confidence.value} confidence)"
    )
    if suggestion.confidence == AiConfidence.MEDIUM and settings.treat_medium_as_warning:
        fix += "; verify before accepting"
    return fix


def evaluate(
    dependencies: list[Dependency],
    config: PolicyConfig,
    *,
    explain_violations: bool = False,
    evaluated_at: Optional[datetime] = None,
) -> PolicyReport:
    """Evaluate dependencies against a policy.

    Exempted dependencies are recorded and skipped. Every other dependency
    is tested against every enabled rule in declaration order; each match
    of a non-ALLOW rule adds one violation. Violations are ordered by
    dependency, then by rule.

    Args:
        dependencies: Dependencies from a completed scan.
        config: The policy to evaluate against.
        explain_violations: Attach an EnhancedExplanation to each violation.
        evaluated_at: Timestamp for the report; defaults to now.

    Returns:
        PolicyReport for the evaluation.
    """
    index = category_index(config)
    rules = config.enabled_rules
    settings = config.settings

    filtered = filter_exempted(dependencies, settings.exemptions)
    for record in filtered.exempted:
        logger.debug(
            "Dependency %s exempted by pattern '%s'", record.dependency_id, record.pattern
        )

    violations: list[Violation] = []
    distribution: dict[LicenseCategory, int] = {}

    for dependency in filtered.dependencies:
        license_id = dependency.effective_license
        category = classify(license_id, index)
        distribution[category] = distribution.get(category, 0) + 1

        for rule in rules:
            if not rule_matches(rule, dependency, license_id, category):
                continue
            logger.debug("Rule %s matched %s (%s)", rule.id, dependency.id, license_id)
            if rule.action == RuleAction.ALLOW:
                continue
            violations.append(
                Violation(
                    rule_id=rule.id,
                    rule_name=rule.name or rule.id,
                    severity=rule.severity,
                    action=rule.action,
                    dependency_id=dependency.id,
                    dependency_name=dependency.name,
                    dependency_version=dependency.version,
                    scope=dependency.scope,
                    license=license_id,
                    license_category=category,
                    message=rule.render_message(
                        license_id, dependency.name, dependency.version, dependency.id
                    ),
                    suggested_fix=suggested_fix(dependency, settings.ai_suggestions),
                )
            )

    if explain_violations:
        violations = [
            v.model_copy(update={"explanation": explain(v, dependencies)})
            for v in violations
        ]

    report = PolicyReport(
        policy_id=config.id,
        policy_name=config.name,
        policy_version=config.version,
        evaluated_at=evaluated_at or datetime.now(timezone.utc),
        fail_on=settings.fail_on,
        violations=violations,
        exempted_dependencies=filtered.exempted,
        total_dependencies=len(dependencies),
        evaluated_dependencies=len(filtered.dependencies),
        license_distribution=distribution,
    )
    logger.info(
        "Evaluated %d dependencies against policy '%s': %d errors, %d warnings, "
        "%d info, %s",
        report.evaluated_dependencies,
        config.name,
        report.error_count,
        report.warning_count,
        report.info_count,
        "passed" if report.passed else "failed",
    )
    return report


class PolicyEvaluator:
    """Evaluates scans against one policy."""

    def __init__(self, config: PolicyConfig) -> None:
        self._config = config

    @property
    def config(self) -> PolicyConfig:
        return self._config

    def evaluate(
        self, dependencies: list[Dependency], explain_violations: bool = False
    ) -> PolicyReport:
        return evaluate(
            dependencies, self._config, explain_violations=explain_violations
        )
