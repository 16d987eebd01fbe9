"""License analysis logic for license-curator."""
from license_curator.analysis.categorizer import categorize, category_index, classify
from license_curator.analysis.compatibility import (
    check_all_compatibility,
    check_license_compatibility,
)
from license_curator.analysis.explanation import explain
from license_curator.analysis.expressions import (
    is_or_expression,
    normalize_license_id,
    split_or_options,
)
from license_curator.analysis.filtering import (
    ExemptionResult,
    filter_exempted,
    find_exemption,
)
from license_curator.analysis.obligations import get_obligations
from license_curator.analysis.policy import PolicyEvaluator, evaluate
from license_curator.analysis.priority import PriorityScorer, override_priority

__all__ = [
    "ExemptionResult",
    "PolicyEvaluator",
    "PriorityScorer",
    "categorize",
    "category_index",
    "check_all_compatibility",
    "check_license_compatibility",
    "classify",
    "evaluate",
    "explain",
    "filter_exempted",
    "find_exemption",
    "get_obligations",
    "is_or_expression",
    "normalize_license_id",
    "override_priority",
    "split_or_options",
]
