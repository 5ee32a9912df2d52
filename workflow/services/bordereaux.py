from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from workflow.exceptions import InvalidStateError, WorkflowError
from workflow.models import Action, Bordereau, Level, Requisition, Role, Status

from .transitions import apply


logger = logging.getLogger(__name__)

COMPILABLE_STATUSES = (Status.IN_REVIEW, Status.VALIDATED)


def pending_compilation():
    """Requisitions waiting at compilation that are not on a bordereau yet."""
    return (
        Requisition.objects.filter(level=Level.COMPILATION, status__in=COMPILABLE_STATUSES, bordereau__isnull=True)
        .select_related("service", "issuer")
        .order_by("created_at", "id")
    )


def next_bordereau_number(day=None) -> str:
    """``BORD-YYYYMMDD-SEQ``, SEQ counting the bordereaux opened that day."""
    day = day or timezone.localdate()
    prefix = f"BORD-{day:%Y%m%d}-"
    sequence = Bordereau.objects.filter(number__startswith=prefix).count() + 1
    while True:
        number = f"{prefix}{sequence:03d}"
        if not Bordereau.objects.filter(number=number).exists():
            return number
        sequence += 1


def compile_requisitions(ids, *, actor) -> Bordereau:
    """
    Put requisitions waiting at compilation on a new bordereau.

    Each requisition is approved by the compiler through the transition
    engine, so it moves on to bordereau alignment with an audit record that
    names the bordereau. The whole batch is one transaction: if any
    requisition cannot be compiled, no bordereau is created and none moves.
    """
    ids = list(dict.fromkeys(ids))
    if not ids:
        raise WorkflowError("Select at least one requisition to compile.")

    with transaction.atomic():
        bordereau = Bordereau.objects.create(number=next_bordereau_number(), created_by=actor)
        comment = f"Included in bordereau {bordereau.number}"

        for requisition_id in ids:
            try:
                requisition = Requisition.objects.get(pk=requisition_id)
            except Requisition.DoesNotExist:
                raise WorkflowError(f"Requisition {requisition_id} not found.") from None
            if requisition.bordereau_id is not None:
                raise InvalidStateError(f"Requisition {requisition.number} is already on a bordereau.")
            if requisition.level != Level.COMPILATION or requisition.status not in COMPILABLE_STATUSES:
                raise InvalidStateError(
                    f"Requisition {requisition.number} is not waiting for compilation "
                    f"({requisition.level}, {requisition.status})."
                )

            apply(
                requisition.pk,
                Action.APPROVE,
                Role.COMPILER,
                actor=actor,
                comment=comment,
                expected_level=Level.COMPILATION,
                expected_updated_at=requisition.updated_at,
            )
            Requisition.objects.filter(pk=requisition.pk).update(bordereau=bordereau)

    logger.info("Bordereau %s compiled with %d requisitions by %s.", bordereau.number, len(ids), actor)
    return bordereau
