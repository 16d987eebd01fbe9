"""Curation template matching and application.

A template matches an item when all of its conditions hold. Applying a
template runs its actions in order on every matching item; if any action
fails nothing is applied.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import NamedTuple, Optional

from license_curator.analysis.priority import override_priority
from license_curator.curation.items import (
    DecisionRequest,
    add_comment_item,
    append_comment,
    decide_item,
    reset_item,
    set_priority_item,
)
from license_curator.exceptions import ValidationError
from license_curator.models.curation import CurationAction, CurationItem, CurationStatus
from license_curator.models.license import LicenseCategory
from license_curator.models.template import (
    AddCommentAction,
    ConditionOperator,
    CurationTemplate,
    SetLicenseAction,
    SetPriorityAction,
    SetStatusAction,
    TemplateAction,
    TemplateApplicationResult,
    TemplateCondition,
    TemplateField,
)

logger = logging.getLogger(__name__)


class TemplateApplication(NamedTuple):
    """Result of applying a template.

    Attributes:
        items: All items, with matching items updated (unchanged on dry run).
        template: The template with its usage count updated.
        result: Summary of the matched items.
    """

    items: list[CurationItem]
    template: CurationTemplate
    result: TemplateApplicationResult


def field_value(item: CurationItem, field: TemplateField) -> str:
    """Read an item field as a string; missing values are empty."""
    if field == TemplateField.DEPENDENCY_ID:
        return item.dependency_id
    if field == TemplateField.DEPENDENCY_NAME:
        return item.dependency_name
    if field == TemplateField.DEPENDENCY_VERSION:
        return item.dependency_version
    if field == TemplateField.SCOPE:
        return item.scope or ""
    if field == TemplateField.ORIGINAL_LICENSE:
        return item.original_license or ""
    if field == TemplateField.DECLARED_LICENSES:
        return ", ".join(item.declared_licenses)
    if field == TemplateField.DETECTED_LICENSES:
        return ", ".join(item.detected_licenses)
    if field == TemplateField.EFFECTIVE_LICENSE:
        return item.source_license
    if field == TemplateField.AI_SUGGESTED_LICENSE:
        return item.ai_suggestion.suggested_license if item.ai_suggestion else ""
    if field == TemplateField.AI_CONFIDENCE:
        return item.ai_suggestion.confidence.value if item.ai_suggestion else ""
    if field == TemplateField.STATUS:
        return item.status.value
    if field == TemplateField.PRIORITY_LEVEL:
        return item.priority.level.value if item.priority else ""
    return item.blocking_rule_id or ""


def condition_matches(condition: TemplateCondition, item: CurationItem) -> bool:
    """Evaluate one condition.

    EQUALS, NOT_EQUALS and MATCHES are case-sensitive; MATCHES must match
    the whole value. CONTAINS, STARTS_WITH and ENDS_WITH ignore case.
    """
    actual = field_value(item, condition.field)
    expected = condition.value or ""
    operator = condition.operator

    if operator == ConditionOperator.IS_EMPTY:
        return not actual.strip()
    if operator == ConditionOperator.IS_NOT_EMPTY:
        return bool(actual.strip())
    if operator == ConditionOperator.EQUALS:
        return actual == expected
    if operator == ConditionOperator.NOT_EQUALS:
        return actual != expected
    if operator == ConditionOperator.CONTAINS:
        return expected.lower() in actual.lower()
    if operator == ConditionOperator.STARTS_WITH:
        return actual.lower().startswith(expected.lower())
    if operator == ConditionOperator.ENDS_WITH:
        return actual.lower().endswith(expected.lower())
    return re.fullmatch(expected, actual) is not None


def template_matches(template: CurationTemplate, item: CurationItem) -> bool:
    return all(condition_matches(c, item) for c in template.conditions)


def match_items(
    template: CurationTemplate, items: list[CurationItem]
) -> list[CurationItem]:
    """Items matching every condition of the template, in input order."""
    return [item for item in items if template_matches(template, item)]


def _apply_action(
    action: TemplateAction,
    item: CurationItem,
    template: CurationTemplate,
    actor_id: str,
    now: datetime,
    categories: Optional[dict[str, LicenseCategory]],
) -> CurationItem:
    # Decisions keep earlier comments, including ones added by this template
    comment = append_comment(item.curator_comment, f"Applied template '{template.name}'")
    if isinstance(action, SetStatusAction):
        if action.status == CurationStatus.PENDING:
            return reset_item(item)
        decision = (
            CurationAction.ACCEPT
            if action.status == CurationStatus.ACCEPTED
            else CurationAction.REJECT
        )
        return decide_item(
            item,
            DecisionRequest(action=decision, comment=comment),
            actor_id,
            now,
            categories,
        )
    if isinstance(action, SetLicenseAction):
        return decide_item(
            item,
            DecisionRequest(
                action=CurationAction.MODIFY, license=action.license, comment=comment
            ),
            actor_id,
            now,
            categories,
        )
    if isinstance(action, AddCommentAction):
        return add_comment_item(item, action.comment)
    if isinstance(action, SetPriorityAction):
        return set_priority_item(
            item, override_priority(action.level, f"Set by template '{template.name}'")
        )
    raise ValidationError(f"Unsupported template action {action!r}")


def apply_template(
    template: CurationTemplate,
    items: list[CurationItem],
    *,
    actor_id: str,
    dry_run: bool = False,
    now: Optional[datetime] = None,
    categories: Optional[dict[str, LicenseCategory]] = None,
) -> TemplateApplication:
    """Apply a template to items.

    Args:
        template: The template to apply.
        items: Candidate items.
        actor_id: Who applies the template.
        dry_run: Only report matches; nothing changes and the usage count
            stays the same.
        now: Decision time; defaults to now.
        categories: Policy category lists for curated licenses.

    Returns:
        TemplateApplication with the updated items and template.

    Raises:
        ValidationError: If an action fails on any matching item. No item
            is changed in that case.
    """
    now = now or datetime.now(timezone.utc)
    matched = match_items(template, items)
    result = TemplateApplicationResult(
        template_id=template.id,
        template_name=template.name,
        dry_run=dry_run,
        matched_items=[item.dependency_id for item in matched],
    )

    if dry_run:
        return TemplateApplication(items=list(items), template=template, result=result)

    matched_ids = set(result.matched_items)
    updated: list[CurationItem] = []
    for item in items:
        if item.dependency_id in matched_ids:
            for action in template.actions:
                try:
                    item = _apply_action(
                        action, item, template, actor_id, now, categories
                    )
                except ValidationError as e:
                    raise ValidationError(
                        f"Template '{template.name}' failed on "
                        f"'{item.dependency_id}': {e}"
                    ) from e
        updated.append(item)

    logger.info(
        "Applied template '%s' to %d item(s)", template.name, result.matched_count
    )
    return TemplateApplication(
        items=updated,
        template=template.model_copy(update={"usage_count": template.usage_count + 1}),
        result=result,
    )
