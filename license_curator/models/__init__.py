"""Pydantic data models for license-curator."""

from license_curator.models.audit import (
    ActorRole,
    AuditAction,
    AuditEntityType,
    AuditEntry,
    AuditPhase,
)
from license_curator.models.curation import (
    CurationAction,
    CurationItem,
    CurationStatus,
    DistributionScope,
    EvidenceType,
    Justification,
    JustificationType,
    OrLicenseState,
    PriorityFactor,
    PriorityInfo,
    PriorityLevel,
)
from license_curator.models.dependency import AiConfidence, AiSuggestion, Dependency
from license_curator.models.explanation import (
    CompatibilityIssue,
    CompatibilityLevel,
    CompatibilityResult,
    EffortLevel,
    EnhancedExplanation,
    Obligation,
    ObligationType,
    ResolutionSuggestion,
    ResolutionType,
    WhyNotExplanation,
    WhyNotType,
)
from license_curator.models.incremental import (
    ChangeType,
    DependencyChange,
    IncrementalChanges,
    VersionDirection,
)
from license_curator.models.license import LicenseCategory
from license_curator.models.policy import (
    AllowlistMatch,
    CategoryMatch,
    DenylistMatch,
    ExemptedDependency,
    Exemption,
    PolicyConfig,
    PolicyReport,
    PolicyRule,
    PolicySettings,
    RuleAction,
    Severity,
    Violation,
)
from license_curator.models.session import (
    ApprovalDecision,
    ApprovalReadiness,
    ApprovalRecord,
    CurationSession,
    ReadinessBlocker,
    ReadinessBlockerType,
    SessionStatistics,
    SessionStatus,
)
from license_curator.models.template import (
    ConditionOperator,
    CurationTemplate,
    TemplateApplicationResult,
    TemplateCondition,
    TemplateField,
)

__all__ = [
    "ActorRole",
    "AiConfidence",
    "AiSuggestion",
    "AllowlistMatch",
    "ApprovalDecision",
    "ApprovalReadiness",
    "ApprovalRecord",
    "AuditAction",
    "AuditEntityType",
    "AuditEntry",
    "AuditPhase",
    "CategoryMatch",
    "ChangeType",
    "CompatibilityIssue",
    "CompatibilityLevel",
    "CompatibilityResult",
    "ConditionOperator",
    "CurationAction",
    "CurationItem",
    "CurationSession",
    "CurationStatus",
    "CurationTemplate",
    "DenylistMatch",
    "Dependency",
    "DependencyChange",
    "DistributionScope",
    "EffortLevel",
    "EnhancedExplanation",
    "EvidenceType",
    "ExemptedDependency",
    "Exemption",
    "IncrementalChanges",
    "Justification",
    "JustificationType",
    "LicenseCategory",
    "Obligation",
    "ObligationType",
    "OrLicenseState",
    "PolicyConfig",
    "PolicyReport",
    "PolicyRule",
    "PolicySettings",
    "PriorityFactor",
    "PriorityInfo",
    "PriorityLevel",
    "ReadinessBlocker",
    "ReadinessBlockerType",
    "ResolutionSuggestion",
    "ResolutionType",
    "RuleAction",
    "SessionStatistics",
    "SessionStatus",
    "Severity",
    "TemplateApplicationResult",
    "TemplateCondition",
    "TemplateField",
    "VersionDirection",
    "Violation",
    "WhyNotExplanation",
    "WhyNotType",
]
