"""
Run one escalation sweep now, outside the Celery beat schedule.

Usage:
    python manage.py run_escalation_scheduler
    python manage.py run_escalation_scheduler --skip-reconcile

The recurring sweep is the ``workflow.escalate_stalled_requisitions`` beat
entry; start it with ``celery -A requisitions_project worker -B``.
"""
from django.core.management.base import BaseCommand

from budgets.services.reconciliation import reconcile_budget_consumption
from workflow.services.escalation import run_escalation_sweep


class Command(BaseCommand):
    help = "Auto-approve requisitions that stalled past their level's escalation delay"

    def add_arguments(self, parser):
        parser.add_argument(
            "--skip-reconcile",
            action="store_true",
            help="Do not backfill missing budget consumption before the sweep",
        )

    def handle(self, *args, **options):
        if not options["skip_reconcile"]:
            reconciled = reconcile_budget_consumption()
            self.stdout.write(
                f"Budget reconciliation: scanned={reconciled.scanned} fixed={reconciled.fixed} errors={reconciled.failed}"
            )

        result = run_escalation_sweep()
        self.stdout.write(
            self.style.SUCCESS(
                f"Sweep done | examined={result.examined} escalated={result.escalated} failed={result.failed}"
            )
        )
