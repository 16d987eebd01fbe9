"""Curation session and approval workflow.

Session lifecycle::

    IN_PROGRESS <-> COMPLETED -> SUBMITTED_FOR_APPROVAL -> APPROVED
                                          |
                           REJECTED / RETURNED -> IN_PROGRESS

Every operation returns a new CurationSession and appends to its audit
log; the session passed in is never modified. Items cannot change while a
session is submitted or after it is approved.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, NamedTuple, Optional

from license_curator.analysis.expressions import split_or_options
from license_curator.analysis.priority import PriorityScorer
from license_curator.constants import SYSTEM_ACTOR
from license_curator.curation.items import (
    DecisionRequest,
    attach_justification_item,
    decide_item,
    resolve_or_item,
)
from license_curator.curation.templates import apply_template as apply_template_items
from license_curator.exceptions import (
    LicenseCuratorError,
    PreconditionError,
    ValidationError,
)
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
    Justification,
    OrLicenseState,
    PriorityLevel,
)
from license_curator.models.dependency import AiConfidence, Dependency
from license_curator.models.license import LicenseCategory
from license_curator.models.policy import PolicyReport, PolicySettings, Severity, Violation
from license_curator.models.session import (
    ApprovalDecision,
    ApprovalReadiness,
    ApprovalRecord,
    CurationSession,
    ReadinessBlocker,
    ReadinessBlockerType,
    SessionStatus,
)
from license_curator.models.template import CurationTemplate, TemplateApplicationResult

logger = logging.getLogger(__name__)

FOUR_EYES_MESSAGE = "Approver must be different from submitter (four-eyes principle)"

_SEVERITY_ORDER = (Severity.ERROR, Severity.WARNING, Severity.INFO)


class ItemDecision(DecisionRequest):
    """A decision within a bulk request."""

    dependency_id: str


class BulkItemOutcome(NamedTuple):
    dependency_id: str
    succeeded: bool
    error: Optional[str] = None


class BulkDecisionResult(NamedTuple):
    """Result of a bulk decision.

    Attributes:
        session: The session with every successful decision applied.
        outcomes: One outcome per requested decision, in request order.
    """

    session: CurationSession
    outcomes: list[BulkItemOutcome]

    @property
    def processed(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def failed(self) -> int:
        return self.processed - self.succeeded

    @property
    def errors(self) -> list[str]:
        return [
            f"{outcome.dependency_id}: {outcome.error}"
            for outcome in self.outcomes
            if not outcome.succeeded
        ]


class SessionTemplateApplication(NamedTuple):
    session: CurationSession
    template: CurationTemplate
    result: TemplateApplicationResult


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _entry(
    phase: AuditPhase,
    action: AuditAction,
    actor: str,
    actor_role: ActorRole,
    description: str,
    entity_type: AuditEntityType,
    entity_id: str,
    now: datetime,
    previous_state: Optional[dict[str, Any]] = None,
    new_state: Optional[dict[str, Any]] = None,
) -> AuditEntry:
    return AuditEntry(
        timestamp=now,
        phase=phase,
        action=action,
        actor=actor,
        actor_role=actor_role,
        description=description,
        entity_type=entity_type,
        entity_id=entity_id,
        previous_state=previous_state,
        new_state=new_state,
    )


def _item_state(item: CurationItem) -> dict[str, Any]:
    return {"status": item.status.value, "curated_license": item.curated_license}


def derived_status(items: list[CurationItem]) -> SessionStatus:
    if any(item.status == CurationStatus.PENDING for item in items):
        return SessionStatus.IN_PROGRESS
    return SessionStatus.COMPLETED


def ensure_editable(session: CurationSession) -> None:
    if session.status == SessionStatus.APPROVED:
        raise PreconditionError(f"Session '{session.id}' is approved and cannot change")
    if session.status == SessionStatus.SUBMITTED_FOR_APPROVAL:
        raise PreconditionError(
            f"Session '{session.id}' is submitted for approval and cannot change"
        )


def _replace_item(items: list[CurationItem], updated: CurationItem) -> list[CurationItem]:
    return [
        updated if item.dependency_id == updated.dependency_id else item for item in items
    ]


def _with_items(
    session: CurationSession,
    items: list[CurationItem],
    entries: list[AuditEntry],
    now: datetime,
) -> CurationSession:
    return session.model_copy(
        update={
            "items": items,
            "status": derived_status(items),
            "audit_log": [*session.audit_log, *entries],
            "updated_at": now,
        }
    )


def _blocking_violation(violations: list[Violation]) -> Optional[Violation]:
    """The most severe violation, first in rule order among equals."""
    for severity in _SEVERITY_ORDER:
        for violation in violations:
            if violation.severity == severity:
                return violation
    return None


def _new_item(dependency: Dependency, blocking: Optional[Violation]) -> CurationItem:
    options = split_or_options(dependency.effective_license)
    or_state = (
        OrLicenseState(expression=dependency.effective_license, options=options)
        if len(options) > 1
        else None
    )
    return CurationItem(
        dependency_id=dependency.id,
        dependency_name=dependency.name,
        dependency_version=dependency.version,
        scope=dependency.scope,
        original_license=dependency.concluded_license,
        declared_licenses=list(dependency.declared_licenses),
        detected_licenses=list(dependency.detected_licenses),
        ai_suggestion=dependency.ai_suggestion,
        or_license=or_state,
        blocking_rule_id=blocking.rule_id if blocking else None,
    )


def _auto_acceptable(item: CurationItem) -> bool:
    return (
        item.ai_suggestion is not None
        and item.ai_suggestion.confidence == AiConfidence.HIGH
        and item.or_license is None
        and item.priority is not None
        and item.priority.level == PriorityLevel.LOW
    )


def start_session(
    scan_id: str,
    dependencies: list[Dependency],
    curator_id: str,
    *,
    report: Optional[PolicyReport] = None,
    settings: Optional[PolicySettings] = None,
    auto_accept: bool = False,
    include_all: bool = False,
    categories: Optional[dict[str, LicenseCategory]] = None,
    session_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> CurationSession:
    """Create a curation session for a scan.

    With a policy report, items are created for dependencies that have
    violations or an OR-license; without one (or with ``include_all``)
    every dependency gets an item. Items are ordered by descending
    priority score, ties kept in scan order.

    Args:
        scan_id: The scan the session curates.
        dependencies: Dependencies of the scan.
        curator_id: Curator owning the session.
        report: Policy report for the scan.
        settings: Policy settings providing priority weights and AI
            suggestion handling.
        auto_accept: Accept HIGH confidence AI suggestions on LOW priority
            items on behalf of the system.
        include_all: Create items for every dependency.
        categories: Policy category lists (see ``category_index``) kept with
            the session and used to categorize curated licenses.
        session_id: Id for the session; generated when omitted.
        now: Creation time; defaults to now.

    Returns:
        The new session.
    """
    now = now or _now()
    settings = settings or PolicySettings()
    categories = dict(categories or {})
    scorer = PriorityScorer(settings.priority)
    session_id = session_id or str(uuid.uuid4())

    entries = [
        _entry(
            AuditPhase.SCAN,
            AuditAction.CREATE,
            SYSTEM_ACTOR,
            ActorRole.SYSTEM,
            f"Scan '{scan_id}' recorded with {len(dependencies)} dependencies",
            AuditEntityType.SCAN,
            scan_id,
            now,
        )
    ]
    if report is not None:
        entries.append(
            _entry(
                AuditPhase.POLICY,
                AuditAction.EVALUATE,
                SYSTEM_ACTOR,
                ActorRole.SYSTEM,
                f"Policy '{report.policy_name}' {report.policy_version} evaluated: "
                f"{len(report.violations)} violation(s), "
                f"{'passed' if report.passed else 'failed'}",
                AuditEntityType.POLICY_REPORT,
                report.policy_id or report.policy_name,
                now,
                new_state={
                    "passed": report.passed,
                    "errors": report.error_count,
                    "warnings": report.warning_count,
                },
            )
        )

    scored: list[CurationItem] = []
    for dependency in dependencies:
        violations = report.violations_for(dependency.id) if report else []
        blocking = _blocking_violation(violations)
        item = _new_item(dependency, blocking)
        needs_curation = blocking is not None or item.or_license is not None
        if report is not None and not include_all and not needs_curation:
            continue
        scored.append(item.model_copy(update={"priority": scorer.score(item, blocking)}))

    # sorted() is stable, so equal scores keep scan order
    items = sorted(scored, key=lambda i: -(i.priority.score if i.priority else 0.0))

    if auto_accept and settings.ai_suggestions.accept_high_confidence:
        accepted: list[CurationItem] = []
        for item in items:
            if _auto_acceptable(item):
                item = decide_item(
                    item,
                    DecisionRequest(
                        action=CurationAction.ACCEPT,
                        comment="Auto-accepted high-confidence AI suggestion",
                    ),
                    SYSTEM_ACTOR,
                    now,
                    categories,
                )
                entries.append(
                    _entry(
                        AuditPhase.CURATION,
                        AuditAction.DECIDE,
                        SYSTEM_ACTOR,
                        ActorRole.SYSTEM,
                        f"Auto-accepted {item.curated_license} for {item.dependency_name}",
                        AuditEntityType.CURATION,
                        item.dependency_id,
                        now,
                        new_state=_item_state(item),
                    )
                )
            accepted.append(item)
        items = accepted

    entries.append(
        _entry(
            AuditPhase.CURATION,
            AuditAction.CREATE,
            curator_id,
            ActorRole.CURATOR,
            f"Curation session started with {len(items)} item(s)",
            AuditEntityType.SESSION,
            session_id,
            now,
        )
    )

    session = CurationSession(
        id=session_id,
        scan_id=scan_id,
        curator_id=curator_id,
        policy_name=report.policy_name if report else None,
        license_categories=categories,
        status=derived_status(items),
        items=items,
        created_at=now,
        updated_at=now,
        audit_log=entries,
    )
    logger.info(
        "Started curation session %s for scan %s with %d item(s)",
        session.id,
        scan_id,
        len(items),
    )
    return session


def add_item(
    session: CurationSession,
    dependency: Dependency,
    curator_id: str,
    *,
    violation: Optional[Violation] = None,
    settings: Optional[PolicySettings] = None,
    now: Optional[datetime] = None,
) -> CurationSession:
    """Bring a dependency into a running session as a PENDING item.

    The item is scored like the items created by ``start_session`` and
    placed after every item with an equal or higher priority score.

    Args:
        session: The session to extend.
        dependency: The dependency to curate.
        curator_id: Who added the dependency.
        violation: The violation that blocks the dependency, if any.
        settings: Policy settings providing priority weights.
        now: Time of the change; defaults to now.

    Raises:
        PreconditionError: If the session is submitted or approved.
        ValidationError: If the dependency already has an item, or the
            violation belongs to another dependency.
    """
    ensure_editable(session)
    if any(item.dependency_id == dependency.id for item in session.items):
        raise ValidationError(
            f"Dependency '{dependency.id}' is already part of session '{session.id}'"
        )
    if violation is not None and violation.dependency_id != dependency.id:
        raise ValidationError(
            f"Violation of '{violation.dependency_id}' does not belong to "
            f"'{dependency.id}'"
        )

    now = now or _now()
    scorer = PriorityScorer((settings or PolicySettings()).priority)
    item = _new_item(dependency, violation)
    item = item.model_copy(update={"priority": scorer.score(item, violation)})
    score = item.priority.score if item.priority else 0.0

    position = len(session.items)
    for index, existing in enumerate(session.items):
        if (existing.priority.score if existing.priority else 0.0) < score:
            position = index
            break
    items = [*session.items[:position], item, *session.items[position:]]

    entry = _entry(
        AuditPhase.CURATION,
        AuditAction.CREATE,
        curator_id,
        ActorRole.CURATOR,
        f"Added {dependency.name} ({item.source_license}) to the session",
        AuditEntityType.CURATION,
        dependency.id,
        now,
        new_state={
            "status": item.status.value,
            "blocking_rule_id": item.blocking_rule_id,
            "is_or_license": item.is_or_license,
        },
    )
    logger.info("Session %s: added %s", session.id, dependency.id)
    return _with_items(session, items, [entry], now)


def _decision_entries(
    before: CurationItem,
    after: CurationItem,
    curator_id: str,
    now: datetime,
    justified: bool,
) -> list[AuditEntry]:
    entries = [
        _entry(
            AuditPhase.CURATION,
            AuditAction.DECIDE,
            curator_id,
            ActorRole.CURATOR,
            f"{after.status.value} {after.dependency_name}"
            + (f" as {after.curated_license}" if after.curated_license else ""),
            AuditEntityType.CURATION,
            after.dependency_id,
            now,
            previous_state=_item_state(before),
            new_state=_item_state(after),
        )
    ]
    if justified and after.justification is not None:
        entries.append(
            _entry(
                AuditPhase.CURATION,
                AuditAction.JUSTIFY,
                curator_id,
                ActorRole.CURATOR,
                f"{after.justification.type.value} justification for "
                f"{after.dependency_name}",
                AuditEntityType.JUSTIFICATION,
                after.dependency_id,
                now,
            )
        )
    return entries


def decide(
    session: CurationSession,
    dependency_id: str,
    request: DecisionRequest,
    curator_id: str,
    now: Optional[datetime] = None,
) -> CurationSession:
    """Record a curator decision on one item.

    Raises:
        PreconditionError: If the session is submitted or approved.
        NotFoundError: If the session has no item for the dependency.
        ValidationError: If the decision is invalid for the item.
    """
    ensure_editable(session)
    now = now or _now()
    before = session.item(dependency_id)
    after = decide_item(before, request, curator_id, now, session.license_categories)
    logger.info(
        "Session %s: %s %s", session.id, after.status.value, after.dependency_id
    )
    return _with_items(
        session,
        _replace_item(session.items, after),
        _decision_entries(
            before, after, curator_id, now, request.justification is not None
        ),
        now,
    )


def bulk_decide(
    session: CurationSession,
    decisions: list[ItemDecision],
    curator_id: str,
    *,
    atomic: bool = False,
    now: Optional[datetime] = None,
) -> BulkDecisionResult:
    """Apply several decisions.

    By default each decision succeeds or fails on its own and failures are
    reported per item. With ``atomic`` the first failure is raised and no
    decision is applied.

    Raises:
        PreconditionError: If the session is submitted or approved.
        LicenseCuratorError: The first failure, when ``atomic`` is set.
    """
    ensure_editable(session)
    now = now or _now()
    items = list(session.items)
    entries: list[AuditEntry] = []
    outcomes: list[BulkItemOutcome] = []

    current = session.model_copy(update={"items": items})
    for decision in decisions:
        request = DecisionRequest(
            action=decision.action,
            license=decision.license,
            comment=decision.comment,
            justification=decision.justification,
        )
        try:
            before = current.item(decision.dependency_id)
            after = decide_item(
                before, request, curator_id, now, session.license_categories
            )
        except LicenseCuratorError as e:
            if atomic:
                raise
            outcomes.append(BulkItemOutcome(decision.dependency_id, False, str(e)))
            continue
        items = _replace_item(items, after)
        current = current.model_copy(update={"items": items})
        entries.extend(
            _decision_entries(
                before, after, curator_id, now, request.justification is not None
            )
        )
        outcomes.append(BulkItemOutcome(decision.dependency_id, True))

    result = BulkDecisionResult(
        session=_with_items(session, items, entries, now), outcomes=outcomes
    )
    logger.info(
        "Session %s: bulk decision processed %d, succeeded %d, failed %d",
        session.id,
        result.processed,
        result.succeeded,
        result.failed,
    )
    return result


def resolve_or(
    session: CurationSession,
    dependency_id: str,
    chosen_license: str,
    reason: Optional[str],
    curator_id: str,
    now: Optional[datetime] = None,
) -> CurationSession:
    """Choose one alternative of an OR-license item.

    Raises:
        PreconditionError: If the session is submitted or approved.
        NotFoundError: If the session has no item for the dependency.
        ValidationError: If the item has no OR-license or the choice is not
            one of its options.
    """
    ensure_editable(session)
    now = now or _now()
    before = session.item(dependency_id)
    after = resolve_or_item(
        before, chosen_license, reason, curator_id, now, session.license_categories
    )
    entry = _entry(
        AuditPhase.CURATION,
        AuditAction.RESOLVE_OR,
        curator_id,
        ActorRole.CURATOR,
        f"Chose {chosen_license} from '{before.or_license.expression}'"  # type: ignore[union-attr]
        + (f": {reason}" if reason else ""),
        AuditEntityType.OR_LICENSE,
        dependency_id,
        now,
        previous_state={"chosen_license": before.or_license.chosen_license},  # type: ignore[union-attr]
        new_state={"chosen_license": chosen_license},
    )
    return _with_items(session, _replace_item(session.items, after), [entry], now)


def attach_justification(
    session: CurationSession,
    dependency_id: str,
    justification: Justification,
    curator_id: str,
    now: Optional[datetime] = None,
) -> CurationSession:
    """Attach a justification to an accepted or modified item.

    Raises:
        PreconditionError: If the session is submitted or approved.
        NotFoundError: If the session has no item for the dependency.
        ValidationError: If the item is not accepted or modified.
    """
    ensure_editable(session)
    now = now or _now()
    before = session.item(dependency_id)
    after = attach_justification_item(before, justification, curator_id, now)
    entry = _entry(
        AuditPhase.CURATION,
        AuditAction.JUSTIFY,
        curator_id,
        ActorRole.CURATOR,
        f"{justification.type.value} justification for {after.dependency_name}",
        AuditEntityType.JUSTIFICATION,
        dependency_id,
        now,
        new_state={
            "type": justification.type.value,
            "distribution_scope": justification.distribution_scope.value,
        },
    )
    return _with_items(session, _replace_item(session.items, after), [entry], now)


def compute_readiness(session: CurationSession) -> ApprovalReadiness:
    """Check whether a session can be submitted for approval.

    A session is ready when no item is pending, every accepted or modified
    item that needs a justification has one, and every OR-license item
    that was not rejected has a chosen license.
    """
    pending = [i.dependency_id for i in session.items if i.status == CurationStatus.PENDING]
    unresolved_or = [
        i.dependency_id
        for i in session.items
        if i.or_license is not None
        and not i.or_license.is_resolved
        and i.status != CurationStatus.REJECTED
    ]
    missing_justification = [
        i.dependency_id for i in session.items if not i.justification_complete
    ]

    blockers: list[ReadinessBlocker] = []
    if pending:
        blockers.append(
            ReadinessBlocker(
                type=ReadinessBlockerType.PENDING_ITEMS,
                count=len(pending),
                message=f"{len(pending)} item(s) still need a decision",
                affected_items=pending,
            )
        )
    if unresolved_or:
        blockers.append(
            ReadinessBlocker(
                type=ReadinessBlockerType.UNRESOLVED_OR,
                count=len(unresolved_or),
                message=f"{len(unresolved_or)} OR-license(s) need a chosen license",
                affected_items=unresolved_or,
            )
        )
    if missing_justification:
        blockers.append(
            ReadinessBlocker(
                type=ReadinessBlockerType.MISSING_JUSTIFICATION,
                count=len(missing_justification),
                message=f"{len(missing_justification)} decision(s) need a justification",
                affected_items=missing_justification,
            )
        )

    return ApprovalReadiness(
        is_ready=not blockers,
        total_items=len(session.items),
        pending_items=len(pending),
        unresolved_or_licenses=len(unresolved_or),
        pending_justifications=len(missing_justification),
        blockers=blockers,
    )


def submit_for_approval(
    session: CurationSession,
    submitter_id: str,
    comment: Optional[str] = None,
    now: Optional[datetime] = None,
) -> CurationSession:
    """Submit a ready session for approval.

    Raises:
        PreconditionError: If the session is already submitted or approved,
            or is not ready.
    """
    ensure_editable(session)
    readiness = compute_readiness(session)
    if not readiness.is_ready:
        reasons = "; ".join(blocker.message for blocker in readiness.blockers)
        raise PreconditionError(
            f"Session '{session.id}' is not ready for approval: {reasons}"
        )

    now = now or _now()
    entry = _entry(
        AuditPhase.APPROVAL,
        AuditAction.SUBMIT,
        submitter_id,
        ActorRole.CURATOR,
        "Submitted for approval" + (f": {comment}" if comment else ""),
        AuditEntityType.SESSION,
        session.id,
        now,
        previous_state={"status": session.status.value},
        new_state={"status": SessionStatus.SUBMITTED_FOR_APPROVAL.value},
    )
    logger.info("Session %s submitted for approval by %s", session.id, submitter_id)
    return session.model_copy(
        update={
            "status": SessionStatus.SUBMITTED_FOR_APPROVAL,
            "submitted_by": submitter_id,
            "submitted_at": now,
            "submission_comment": comment,
            "audit_log": [*session.audit_log, entry],
            "updated_at": now,
        }
    )


_DECISION_ACTIONS = {
    ApprovalDecision.APPROVED: AuditAction.APPROVE,
    ApprovalDecision.REJECTED: AuditAction.REJECT,
    ApprovalDecision.RETURNED: AuditAction.RETURN,
}


def decide_approval(
    session: CurationSession,
    approver_id: str,
    approver_name: str,
    approver_role: str,
    decision: ApprovalDecision,
    comment: Optional[str] = None,
    return_reason: Optional[str] = None,
    revision_items: Optional[list[str]] = None,
    now: Optional[datetime] = None,
) -> CurationSession:
    """Approve, reject or return a submitted session.

    APPROVED freezes the session. REJECTED and RETURNED archive the
    approval record, clear the submission and send the session back to
    IN_PROGRESS with the named items (all items when none are named)
    flagged for revision.

    Raises:
        PreconditionError: If the session is not submitted, or the approver
            is the submitter or the curator.
        NotFoundError: If a revision item is not part of the session.
        ValidationError: If the decision is not APPROVED, REJECTED or
            RETURNED.
    """
    if session.status != SessionStatus.SUBMITTED_FOR_APPROVAL:
        raise PreconditionError(
            f"Session '{session.id}' is {session.status.value}, not submitted for approval"
        )
    if approver_id in (session.submitted_by, session.curator_id):
        raise PreconditionError(FOUR_EYES_MESSAGE)

    try:
        decision = ApprovalDecision(decision)
    except ValueError as e:
        raise ValidationError(f"Unknown approval decision {decision!r}") from e
    now = now or _now()
    if decision == ApprovalDecision.APPROVED:
        revision_ids: list[str] = []
    elif revision_items:
        revision_ids = [session.item(dep_id).dependency_id for dep_id in revision_items]
    else:
        revision_ids = [item.dependency_id for item in session.items]

    record = ApprovalRecord(
        approver_id=approver_id,
        approver_name=approver_name,
        approver_role=approver_role,
        decision=decision,
        comment=comment,
        return_reason=return_reason,
        revision_items=revision_ids,
        decided_at=now,
    )
    entry = _entry(
        AuditPhase.APPROVAL,
        _DECISION_ACTIONS[decision],
        approver_id,
        ActorRole.APPROVER,
        f"{decision.value} by {approver_name} ({approver_role})"
        + (f": {comment or return_reason}" if (comment or return_reason) else ""),
        AuditEntityType.APPROVAL,
        session.id,
        now,
        previous_state={"status": session.status.value},
        new_state={"decision": decision.value, "revision_items": revision_ids},
    )
    logger.info("Session %s %s by %s", session.id, decision.value, approver_id)

    if decision == ApprovalDecision.APPROVED:
        return session.model_copy(
            update={
                "status": SessionStatus.APPROVED,
                "approval": record,
                "audit_log": [*session.audit_log, entry],
                "updated_at": now,
            }
        )

    flagged = set(revision_ids)
    items = [
        item.model_copy(update={"revision_requested": True})
        if item.dependency_id in flagged
        else item
        for item in session.items
    ]
    return session.model_copy(
        update={
            "status": SessionStatus.IN_PROGRESS,
            "items": items,
            "approval": None,
            "approval_history": [*session.approval_history, record],
            "submitted_by": None,
            "submitted_at": None,
            "submission_comment": None,
            "return_reason": return_reason,
            "revision_items": revision_ids,
            "audit_log": [*session.audit_log, entry],
            "updated_at": now,
        }
    )


def apply_template(
    session: CurationSession,
    template: CurationTemplate,
    actor_id: str,
    dry_run: bool = False,
    now: Optional[datetime] = None,
) -> SessionTemplateApplication:
    """Apply a curation template to the session's items.

    A dry run reports the matching items and changes nothing. A real run
    is all-or-nothing.

    Raises:
        PreconditionError: If the session is submitted or approved (real
            runs only).
        ValidationError: If an action fails on any matching item.
    """
    if not dry_run:
        ensure_editable(session)
    now = now or _now()
    application = apply_template_items(
        template,
        session.items,
        actor_id=actor_id,
        dry_run=dry_run,
        now=now,
        categories=session.license_categories,
    )
    if dry_run:
        return SessionTemplateApplication(session, application.template, application.result)

    entry = _entry(
        AuditPhase.CURATION,
        AuditAction.APPLY_TEMPLATE,
        actor_id,
        ActorRole.CURATOR,
        f"Template '{template.name}' applied to {application.result.matched_count} item(s)",
        AuditEntityType.TEMPLATE,
        template.id,
        now,
        new_state={"items": application.result.matched_items},
    )
    return SessionTemplateApplication(
        _with_items(session, application.items, [entry], now),
        application.template,
        application.result,
    )


def audit_trail(
    session: CurationSession, phase: Optional[AuditPhase] = None
) -> list[AuditEntry]:
    """Audit entries of a session in the order they were recorded."""
    if phase is None:
        return list(session.audit_log)
    return [entry for entry in session.audit_log if entry.phase == phase]
