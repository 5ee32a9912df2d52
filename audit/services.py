from __future__ import annotations

from django.db import transaction

from audit.models import ActionRecord


def append(
    requisition,
    actor,
    action: str,
    from_level: str,
    to_level: str,
    comment: str = "",
    *,
    automatic: bool = False,
) -> ActionRecord:
    """
    Record one applied transition.

    Must be called inside the transaction that performs the transition so the
    record and the state change commit (or roll back) together.
    """
    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError("Audit entries must be appended inside the transition transaction.")
    return ActionRecord.objects.create(
        requisition=requisition,
        actor=actor,
        action=action,
        from_level=from_level,
        to_level=to_level,
        comment=comment or "",
        is_automatic=automatic,
    )


def list_actions(requisition_id) -> list[ActionRecord]:
    return list(
        ActionRecord.objects.filter(requisition_id=requisition_id)
        .select_related("actor")
        .order_by("created_at", "id")
    )
