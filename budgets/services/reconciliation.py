from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import transaction

from budgets.services.ledger import commit_requisition


logger = logging.getLogger(__name__)


@dataclass
class ReconciliationResult:
    scanned: int = 0
    fixed: int = 0
    failed: int = 0


def reconcile_budget_consumption() -> ReconciliationResult:
    """
    Backfill budget consumption for requisitions that were validated or paid
    without ever being charged to their budget lines.

    Idempotent: each requisition is re-read under lock and skipped once its
    ``budget_impacted`` flag is set.
    """
    from workflow.models import Requisition, Status

    result = ReconciliationResult()
    candidate_ids = list(
        Requisition.objects.filter(
            status__in=[Status.VALIDATED, Status.PAID, Status.DONE],
            budget_impacted=False,
        )
        .order_by("id")
        .values_list("id", flat=True)
    )

    for requisition_id in candidate_ids:
        result.scanned += 1
        try:
            with transaction.atomic():
                requisition = Requisition.objects.select_for_update().get(pk=requisition_id)
                if requisition.budget_impacted:
                    continue
                commit_requisition(requisition, enforce=False)
                requisition.budget_impacted = True
                requisition.save(update_fields=["budget_impacted"])
            result.fixed += 1
        except Exception:
            result.failed += 1
            logger.exception("Budget reconciliation failed for requisition %s", requisition_id)

    if result.scanned:
        logger.info(
            "Budget reconciliation: scanned=%d fixed=%d failed=%d",
            result.scanned,
            result.fixed,
            result.failed,
        )
    return result
