import logging

from celery import shared_task

from workflow.services.escalation import run_escalation_sweep


logger = logging.getLogger(__name__)


@shared_task(name="workflow.escalate_stalled_requisitions")
def escalate_stalled_requisitions():
    """Beat-scheduled sweep; each tick is one ``run_escalation_sweep`` call."""
    result = run_escalation_sweep()
    logger.info("Escalation tick: %d escalated, %d failed.", result.escalated, result.failed)
    return {"examined": result.examined, "escalated": result.escalated, "failed": result.failed}
