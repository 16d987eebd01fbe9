"""Policy configuration and policy report models.

Rule predicates are a closed set of variants discriminated by ``type``. The
shorthand used in policy files (``category:``, ``denylist:``, ``allowlist:``)
is converted to a ``match`` block when the rule is loaded.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from license_curator.models.base import CaseInsensitiveEnum
from license_curator.models.explanation import EnhancedExplanation
from license_curator.models.license import LicenseCategory

DEFAULT_VIOLATION_MESSAGE = "Policy violation"


class Severity(CaseInsensitiveEnum):
    """Severity of a policy rule."""

    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


class RuleAction(CaseInsensitiveEnum):
    """What a matching rule asks for."""

    ALLOW = "ALLOW"
    DENY = "DENY"
    REVIEW = "REVIEW"


class CategoryMatch(BaseModel):
    """Matches licenses whose category is one of ``categories``."""

    model_config = {"extra": "forbid"}

    type: Literal["category"] = "category"
    categories: list[LicenseCategory] = Field(min_length=1)

    def matches(self, license_id: str, category: LicenseCategory) -> bool:
        return category in self.categories


class DenylistMatch(BaseModel):
    """Matches licenses explicitly listed (case-insensitive)."""

    model_config = {"extra": "forbid"}

    type: Literal["denylist"] = "denylist"
    licenses: list[str] = Field(min_length=1)

    def matches(self, license_id: str, category: LicenseCategory) -> bool:
        return license_id.lower() in {lic.lower() for lic in self.licenses}


class AllowlistMatch(BaseModel):
    """Matches every license that is NOT listed (case-insensitive)."""

    model_config = {"extra": "forbid"}

    type: Literal["allowlist"] = "allowlist"
    licenses: list[str] = Field(min_length=1)

    def matches(self, license_id: str, category: LicenseCategory) -> bool:
        return license_id.lower() not in {lic.lower() for lic in self.licenses}


LicensePredicate = Annotated[
    Union[CategoryMatch, DenylistMatch, AllowlistMatch],
    Field(discriminator="type"),
]

_SHORTHAND_KEYS = {
    "category": ("category", "categories"),
    "denylist": ("denylist", "licenses"),
    "allowlist": ("allowlist", "licenses"),
}


class PolicyRule(BaseModel):
    """A single policy rule."""

    model_config = {"extra": "forbid"}

    id: str = Field(min_length=1, description="Unique rule identifier")
    name: str = Field(default="", description="Human readable rule name")
    description: str = Field(default="", description="What the rule enforces")
    severity: Severity = Field(default=Severity.ERROR)
    action: RuleAction = Field(default=RuleAction.DENY)
    enabled: bool = Field(default=True)
    scopes: list[str] = Field(
        default_factory=list,
        description="Dependency scopes the rule applies to; empty means all",
    )
    match: LicensePredicate = Field(description="License predicate")
    message: Optional[str] = Field(
        default=None,
        description="Message template; supports {{license}}, {{dependency}} "
        "and {{dependencyId}}",
    )

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthand(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        present = [key for key in _SHORTHAND_KEYS if key in data]
        if not present:
            return data
        if len(present) > 1 or "match" in data:
            raise ValueError(
                "a rule takes exactly one of 'match', 'category', 'denylist' "
                "or 'allowlist'"
            )
        key = present[0]
        match_type, list_field = _SHORTHAND_KEYS[key]
        values = data[key]
        if isinstance(values, str):
            values = [values]
        expanded = {k: v for k, v in data.items() if k != key}
        expanded["match"] = {"type": match_type, list_field: values}
        return expanded

    def applies_to_scope(self, scope: Optional[str]) -> bool:
        """Check the rule's scope filter (case-insensitive)."""
        if not self.scopes:
            return True
        if not scope:
            return False
        return scope.lower() in {s.lower() for s in self.scopes}

    def render_message(
        self, license_id: str, dependency_name: str, dependency_version: str,
        dependency_id: str,
    ) -> str:
        """Fill in the message template for a violation."""
        template = self.message or DEFAULT_VIOLATION_MESSAGE
        dependency = (
            f"{dependency_name}:{dependency_version}"
            if dependency_version
            else dependency_name
        )
        return (
            template.replace("{{license}}", license_id)
            .replace("{{dependencyId}}", dependency_id)
            .replace("{{dependency}}", dependency)
        )


class CategoryDefinition(BaseModel):
    """Explicit license ids assigned to a category by the policy."""

    model_config = {"extra": "forbid"}

    description: str = Field(default="")
    licenses: list[str] = Field(default_factory=list)


class FailOnSettings(BaseModel):
    """Which severities make a report fail."""

    model_config = {"extra": "forbid"}

    errors: bool = True
    warnings: bool = False


class AiSuggestionSettings(BaseModel):
    """How AI license suggestions are treated."""

    model_config = {"extra": "forbid"}

    accept_high_confidence: bool = Field(
        default=True,
        description="Allow auto-accepting HIGH confidence, LOW priority suggestions",
    )
    treat_medium_as_warning: bool = Field(
        default=True,
        description="Mark MEDIUM confidence suggested fixes for verification",
    )
    reject_low_confidence: bool = Field(
        default=True,
        description="Do not offer LOW confidence suggestions as fixes",
    )


class PriorityWeights(BaseModel):
    """Weights of the curation priority factors."""

    model_config = {"extra": "forbid"}

    severity: float = Field(default=0.5, ge=0)
    confidence: float = Field(default=0.3, ge=0)
    scope: float = Field(default=0.2, ge=0)

    @model_validator(mode="after")
    def _check_total(self) -> "PriorityWeights":
        if self.severity + self.confidence + self.scope <= 0:
            raise ValueError("at least one priority weight must be positive")
        return self

    @property
    def total(self) -> float:
        return self.severity + self.confidence + self.scope


class Exemption(BaseModel):
    """Excludes matching dependencies from rule evaluation."""

    model_config = {"extra": "forbid"}

    dependency: str = Field(
        min_length=1, description="Glob pattern on the dependency id"
    )
    reason: str = Field(description="Why the dependency is exempt")
    approved_by: Optional[str] = Field(default=None)
    approved_date: Optional[date] = Field(default=None)


class PolicySettings(BaseModel):
    """Global policy settings."""

    model_config = {"extra": "forbid"}

    fail_on: FailOnSettings = Field(default_factory=FailOnSettings)
    ai_suggestions: AiSuggestionSettings = Field(default_factory=AiSuggestionSettings)
    exemptions: list[Exemption] = Field(default_factory=list)
    priority: PriorityWeights = Field(default_factory=PriorityWeights)


class PolicyConfig(BaseModel):
    """A versioned compliance policy.

    Frozen: evaluation never changes the policy it is given.
    """

    model_config = {"extra": "forbid", "frozen": True}

    id: Optional[str] = Field(default=None, description="Stored policy id")
    name: str = Field(description="Policy name")
    version: str = Field(default="1.0")
    description: str = Field(default="")
    categories: dict[LicenseCategory, CategoryDefinition] = Field(default_factory=dict)
    rules: list[PolicyRule] = Field(default_factory=list)
    settings: PolicySettings = Field(default_factory=PolicySettings)

    @field_validator("rules")
    @classmethod
    def _unique_rule_ids(cls, rules: list[PolicyRule]) -> list[PolicyRule]:
        seen: set[str] = set()
        for rule in rules:
            if rule.id in seen:
                raise ValueError(f"duplicate rule id '{rule.id}'")
            seen.add(rule.id)
        return rules

    @property
    def enabled_rules(self) -> list[PolicyRule]:
        return [rule for rule in self.rules if rule.enabled]


class Violation(BaseModel):
    """A rule match for one dependency.

    Derived from evaluation; only exists inside the PolicyReport that
    produced it.
    """

    model_config = {"extra": "forbid"}

    rule_id: str
    rule_name: str
    severity: Severity
    action: RuleAction
    dependency_id: str
    dependency_name: str
    dependency_version: str
    scope: Optional[str] = None
    license: str
    license_category: LicenseCategory
    message: str
    suggested_fix: Optional[str] = None
    explanation: Optional[EnhancedExplanation] = None


class ExemptedDependency(BaseModel):
    """A dependency skipped because of a policy exemption."""

    model_config = {"extra": "forbid"}

    dependency_id: str
    dependency_name: str
    pattern: str
    reason: str
    approved_by: Optional[str] = None


class PolicyReport(BaseModel):
    """Outcome of evaluating a dependency list against a policy.

    Counts and ``passed`` are computed from the violation list on every
    read; values present in stored reports are ignored on load.
    """

    model_config = {"extra": "ignore"}

    policy_id: Optional[str] = None
    policy_name: str
    policy_version: str
    evaluated_at: datetime
    fail_on: FailOnSettings = Field(default_factory=FailOnSettings)
    violations: list[Violation] = Field(default_factory=list)
    exempted_dependencies: list[ExemptedDependency] = Field(default_factory=list)
    total_dependencies: int = Field(default=0, ge=0)
    evaluated_dependencies: int = Field(default=0, ge=0)
    license_distribution: dict[LicenseCategory, int] = Field(default_factory=dict)

    def _count(self, severity: Severity) -> int:
        return sum(1 for v in self.violations if v.severity == severity)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def error_count(self) -> int:
        return self._count(Severity.ERROR)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def warning_count(self) -> int:
        return self._count(Severity.WARNING)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def info_count(self) -> int:
        return self._count(Severity.INFO)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def passed(self) -> bool:
        """True unless a severity configured to fail has violations."""
        if self.fail_on.errors and self.error_count > 0:
            return False
        if self.fail_on.warnings and self.warning_count > 0:
            return False
        return True

    def violations_for(self, dependency_id: str) -> list[Violation]:
        """All violations of one dependency, in rule order."""
        return [v for v in self.violations if v.dependency_id == dependency_id]
