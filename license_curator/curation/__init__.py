"""Curation workflow for license-curator."""
from license_curator.curation.incremental import (
    CarryOverResult,
    apply_previous_curations,
    diff,
)
from license_curator.curation.items import (
    DecisionRequest,
    attach_justification_item,
    decide_item,
    resolve_or_item,
)
from license_curator.curation.session import (
    BulkDecisionResult,
    ItemDecision,
    add_item,
    apply_template,
    attach_justification,
    audit_trail,
    bulk_decide,
    compute_readiness,
    decide,
    decide_approval,
    resolve_or,
    start_session,
    submit_for_approval,
)
from license_curator.curation.templates import TemplateApplication, match_items

__all__ = [
    "BulkDecisionResult",
    "CarryOverResult",
    "DecisionRequest",
    "ItemDecision",
    "TemplateApplication",
    "add_item",
    "apply_previous_curations",
    "apply_template",
    "attach_justification",
    "attach_justification_item",
    "audit_trail",
    "bulk_decide",
    "compute_readiness",
    "decide",
    "decide_approval",
    "decide_item",
    "diff",
    "match_items",
    "resolve_or",
    "resolve_or_item",
    "start_session",
    "submit_for_approval",
]
