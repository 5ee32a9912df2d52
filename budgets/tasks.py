import logging

from celery import shared_task

from budgets.services.reconciliation import reconcile_budget_consumption as reconcile


logger = logging.getLogger(__name__)


@shared_task(name="budgets.reconcile_budget_consumption")
def reconcile_budget_consumption():
    result = reconcile()
    logger.info("Budget reconciliation: %d scanned, %d fixed, %d failed.", result.scanned, result.fixed, result.failed)
    return {"scanned": result.scanned, "fixed": result.fixed, "failed": result.failed}
