from __future__ import annotations

import logging

from core.exceptions import DomainError
from workflow.exceptions import ActorNotAllowedError
from workflow.models import Action, Level, Requisition, Role

from .transitions import apply


logger = logging.getLogger(__name__)


# Levels each role may act at.
ROLE_LEVELS = {
    Role.ISSUER: frozenset({Level.ISSUER}),
    Role.SERVICE_HEAD: frozenset({Level.SERVICE_APPROVAL}),
    Role.ANALYST: frozenset({Level.ANALYST, Level.ISSUER, Level.BORDEREAU_ALIGNMENT}),
    Role.CHALLENGER: frozenset({Level.CHALLENGER}),
    Role.VALIDATOR: frozenset({Level.VALIDATOR}),
    Role.PM: frozenset({Level.VALIDATOR}),
    Role.GM: frozenset({Level.FINANCE_GM}),
    Role.COMPILER: frozenset({Level.COMPILATION}),
    Role.ACCOUNTANT: frozenset({Level.PAYMENT, Level.ACCOUNTANT}),
}


def can_act(role: str, level: str) -> bool:
    return level in ROLE_LEVELS.get(role, ())


def _check_actor(requisition: Requisition, actor, role: str) -> None:
    if not can_act(role, requisition.level):
        raise ActorNotAllowedError(role, requisition.level)
    if role == Role.ISSUER and getattr(actor, "pk", None) != requisition.issuer_id:
        raise ActorNotAllowedError(role, requisition.level)
    if role == Role.SERVICE_HEAD and getattr(actor, "pk", None) != requisition.service.supervisor_id:
        raise ActorNotAllowedError(role, requisition.level)


def apply_action(
    requisition_id,
    action: str,
    *,
    actor,
    role: str,
    comment: str = "",
    payment_mode: str | None = None,
) -> str:
    """
    Entry point for the web layer: authorize ``role`` and apply ``action``.

    The level and ``updated_at`` read here are handed to the engine, so a
    requisition that moved in the meantime raises ``StaleStateError``.
    Returns the new level.
    """
    requisition = Requisition.objects.select_related("service").get(pk=requisition_id)
    _check_actor(requisition, actor, role)

    result = apply(
        requisition.pk,
        action,
        role,
        actor=actor,
        comment=comment,
        payment_mode=payment_mode,
        expected_level=requisition.level,
        expected_updated_at=requisition.updated_at,
    )
    return result.to_level


def pay_requisitions(ids, *, actor, comment: str = "") -> tuple[list, list]:
    """
    Settle several requisitions, each in its own transaction.

    Returns ``(paid_ids, errors)`` where ``errors`` holds one
    ``(requisition_id, message)`` pair per requisition that could not be paid.
    """
    paid_ids = []
    errors = []
    for requisition_id in ids:
        try:
            apply_action(
                requisition_id,
                Action.APPROVE,
                actor=actor,
                role=Role.ACCOUNTANT,
                comment=comment,
            )
        except Requisition.DoesNotExist:
            errors.append((requisition_id, "Requisition not found."))
        except DomainError as exc:
            logger.warning("Payment of requisition %s failed: %s", requisition_id, exc)
            errors.append((requisition_id, str(exc)))
        else:
            paid_ids.append(requisition_id)

    logger.info("Batch payment: %d paid, %d failed.", len(paid_ids), len(errors))
    return paid_ids, errors
