from __future__ import annotations

import logging
from dataclasses import dataclass

from django.conf import settings
from django.db import transaction

from audit import services as audit_trail
from budgets.services import commit_requisition
from treasury.services import settle
from workflow.exceptions import InvalidStateError, StaleStateError, UnsupportedTransitionError
from workflow.models import PAYMENT_LEVELS, TERMINAL_STATUSES, Action, Level, Requisition, Role, Status


logger = logging.getLogger(__name__)


# level -> action -> next level
ROUTES = {
    Level.ISSUER: {
        Action.APPROVE: Level.ANALYST,
        Action.REQUEST_CHANGES: Level.ISSUER,
        Action.REJECT: Level.DONE,
    },
    Level.SERVICE_APPROVAL: {
        Action.APPROVE: Level.ANALYST,
        Action.REQUEST_CHANGES: Level.ISSUER,
        Action.REJECT: Level.ISSUER,
    },
    Level.ANALYST: {
        Action.APPROVE: Level.CHALLENGER,
        Action.REQUEST_CHANGES: Level.ISSUER,
        Action.REJECT: Level.ISSUER,
    },
    Level.CHALLENGER: {
        Action.APPROVE: Level.VALIDATOR,
        Action.REQUEST_CHANGES: Level.ANALYST,
        Action.REJECT: Level.ISSUER,
    },
    Level.VALIDATOR: {
        Action.APPROVE: Level.FINANCE_GM,
        Action.REQUEST_CHANGES: Level.CHALLENGER,
        Action.REJECT: Level.ISSUER,
    },
    Level.FINANCE_GM: {
        Action.APPROVE: Level.COMPILATION,
        Action.REQUEST_CHANGES: Level.VALIDATOR,
        Action.REJECT: Level.ISSUER,
    },
    Level.COMPILATION: {
        Action.APPROVE: Level.BORDEREAU_ALIGNMENT,
        Action.REQUEST_CHANGES: Level.FINANCE_GM,
        Action.REJECT: Level.ISSUER,
    },
    Level.BORDEREAU_ALIGNMENT: {
        Action.APPROVE: Level.PAYMENT,
        Action.REQUEST_CHANGES: Level.COMPILATION,
        Action.REJECT: Level.ISSUER,
    },
    Level.PAYMENT: {
        Action.APPROVE: Level.DONE,
        Action.REQUEST_CHANGES: Level.BORDEREAU_ALIGNMENT,
        Action.REJECT: Level.ISSUER,
    },
    Level.ACCOUNTANT: {
        Action.APPROVE: Level.DONE,
        Action.REQUEST_CHANGES: Level.BORDEREAU_ALIGNMENT,
        Action.REJECT: Level.ISSUER,
    },
}


@dataclass(frozen=True)
class TransitionResult:
    from_level: str
    to_level: str


def _route(level: str, action: str) -> str:
    try:
        return ROUTES[level][action]
    except KeyError:
        raise UnsupportedTransitionError(level, action) from None


def _commit_budget_once(requisition: Requisition, *, enforce: bool) -> None:
    if requisition.budget_impacted:
        return
    commit_requisition(requisition, enforce=enforce)
    requisition.budget_impacted = True


def _next_from_issuer(requisition: Requisition, actor_role: str) -> str:
    if requisition.return_level:
        target = requisition.return_level
        requisition.return_level = ""
        return target
    if actor_role == Role.ANALYST:
        return Level.CHALLENGER
    supervisor_id = requisition.service.supervisor_id
    if supervisor_id and supervisor_id != requisition.issuer_id:
        return Level.SERVICE_APPROVAL
    return Level.ANALYST


def apply(
    requisition_id,
    action: str,
    actor_role: str,
    actor=None,
    comment: str = "",
    *,
    auto: bool = False,
    payment_mode: str | None = None,
    expected_level: str | None = None,
    expected_updated_at=None,
) -> TransitionResult:
    """
    Apply ``action`` to a requisition and move it to its next level.

    The requisition row is locked for the whole call. Budget and treasury
    writes and the audit record share that transaction, so any error leaves
    the requisition, the ledgers and the audit trail as they were.

    ``expected_level`` and ``expected_updated_at`` are what the caller read
    before deciding to act. If the row no longer matches them, the call
    raises ``StaleStateError``; the timestamp also catches a requisition that
    left the level and came back to it.
    """
    with transaction.atomic():
        requisition = Requisition.objects.select_for_update().get(pk=requisition_id)
        from_level = requisition.level

        if requisition.status in TERMINAL_STATUSES:
            raise InvalidStateError(f"Requisition {requisition.number} is {requisition.status}.")
        if expected_level is not None and expected_level != from_level:
            raise StaleStateError(expected_level, from_level)
        if expected_updated_at is not None and expected_updated_at != requisition.updated_at:
            raise StaleStateError(expected_level or from_level, from_level, changed_at=requisition.updated_at)

        # Validates the (level, action) pair before any guard runs.
        to_level = _route(from_level, action)
        update_fields = ["level", "status", "updated_at"]

        if action == Action.APPROVE and from_level == Level.ISSUER:
            had_return_level = bool(requisition.return_level)
            to_level = _next_from_issuer(requisition, actor_role)
            if had_return_level:
                update_fields.append("return_level")
            requisition.status = Status.IN_REVIEW
        elif action == Action.REJECT and from_level == Level.ISSUER:
            requisition.status = Status.CANCELLED
        elif action == Action.REJECT:
            requisition.status = Status.NEEDS_CORRECTION
            requisition.return_level = from_level
            update_fields.append("return_level")
        elif action == Action.APPROVE and from_level == Level.FINANCE_GM:
            _commit_budget_once(requisition, enforce=settings.BUDGET_HARD_BLOCK_AT_GM)
            requisition.status = Status.VALIDATED
            update_fields.append("budget_impacted")
        elif action == Action.APPROVE and from_level == Level.BORDEREAU_ALIGNMENT:
            if payment_mode:
                requisition.payment_mode = payment_mode
                update_fields.append("payment_mode")
        elif action == Action.APPROVE and from_level in PAYMENT_LEVELS:
            settle(requisition, payer=actor, comment=comment)
            _commit_budget_once(requisition, enforce=False)
            requisition.status = Status.PAID
            update_fields.append("budget_impacted")

        requisition.level = to_level
        requisition.save(update_fields=update_fields)

        audit_trail.append(
            requisition,
            actor,
            action,
            from_level,
            to_level,
            comment,
            automatic=auto,
        )

    logger.info(
        "Requisition %s: %s at %s -> %s (%s%s).",
        requisition.number,
        action,
        from_level,
        to_level,
        actor_role,
        ", automatic" if auto else "",
    )
    return TransitionResult(from_level=str(from_level), to_level=str(to_level))
