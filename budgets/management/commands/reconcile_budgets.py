from django.core.management.base import BaseCommand

from budgets.services.reconciliation import reconcile_budget_consumption


class Command(BaseCommand):
    help = "Backfill budget consumption for validated/paid requisitions that were never charged."

    def handle(self, *args, **options):
        result = reconcile_budget_consumption()
        style = self.style.SUCCESS if not result.failed else self.style.WARNING
        self.stdout.write(
            style(f"Scanned {result.scanned} requisitions | fixed={result.fixed} | errors={result.failed}")
        )
