from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from workflow.exceptions import WorkflowError
from workflow.models import PAYMENT_LEVELS, Action, Level, Requisition, Status, WorkflowSetting

from .transitions import apply


logger = logging.getLogger(__name__)

# Requisitions in these statuses wait on a person, not on an approver.
NOT_ESCALATED_STATUSES = (
    Status.DRAFT,
    Status.NEEDS_CORRECTION,
    Status.PAID,
    Status.DONE,
    Status.CANCELLED,
    Status.VALIDATED,
)


@dataclass
class SweepResult:
    examined: int = 0
    escalated: int = 0
    failed: int = 0


def set_escalation_delay(level: str, minutes: int) -> WorkflowSetting:
    if level not in Level.values or level == Level.DONE:
        raise WorkflowError(f"Unknown level: {level!r}")
    try:
        minutes = int(minutes)
    except (TypeError, ValueError):
        raise WorkflowError(f"Invalid delay: {minutes!r}") from None
    if minutes < 0:
        raise WorkflowError("Escalation delay cannot be negative.")

    row, _ = WorkflowSetting.objects.update_or_create(level=level, defaults={"delay_minutes": minutes})
    return row


def get_escalation_delays() -> dict[str, int]:
    return dict(WorkflowSetting.objects.order_by("level").values_list("level", "delay_minutes"))


def run_escalation_sweep(now=None) -> SweepResult:
    """
    Force-approve requisitions that stalled at a level longer than its delay.

    Each requisition is escalated in its own transaction against the level and
    ``updated_at`` read by the sweep; if anyone moved it in between, the
    transition is refused as stale. A failure is logged and counted, and the
    sweep moves on. Payment levels are never escalated.
    """
    now = now or timezone.now()
    result = SweepResult()
    comment = settings.WORKFLOW_AUTO_ESCALATION_COMMENT

    delays = (
        WorkflowSetting.objects.filter(delay_minutes__gt=0)
        .exclude(level__in=PAYMENT_LEVELS)
        .order_by("level")
    )
    for delay in delays:
        cutoff = now - timedelta(minutes=delay.delay_minutes)
        stalled = list(
            Requisition.objects.filter(level=delay.level, updated_at__lt=cutoff)
            .exclude(status__in=NOT_ESCALATED_STATUSES)
            .order_by("updated_at", "id")
            .values_list("id", "updated_at")
        )
        for requisition_id, updated_at in stalled:
            result.examined += 1
            try:
                apply(
                    requisition_id,
                    Action.APPROVE,
                    delay.level,
                    actor=None,
                    comment=comment,
                    auto=True,
                    expected_level=delay.level,
                    expected_updated_at=updated_at,
                )
            except Exception:
                result.failed += 1
                logger.exception("Auto-escalation of requisition %s at %s failed.", requisition_id, delay.level)
            else:
                result.escalated += 1

    if result.examined:
        logger.info(
            "Escalation sweep: %d examined, %d escalated, %d failed.",
            result.examined,
            result.escalated,
            result.failed,
        )
    return result
