from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from budgets.services.importer import import_budget_csv
from core.exceptions import DomainError


class Command(BaseCommand):
    help = "Import monthly budget allocations from a CSV file."

    def add_arguments(self, parser):
        parser.add_argument("path", help="CSV file with description and amount columns")
        parser.add_argument("--month", required=True, help="Budget month, e.g. 2025-01")

    def handle(self, *args, **options):
        path = Path(options["path"])
        if not path.exists():
            raise CommandError(f"File {path} not found")

        try:
            with path.open(newline="", encoding="utf-8-sig") as handle:
                result = import_budget_csv(handle, options["month"])
        except DomainError as exc:
            raise CommandError(str(exc))

        self.stdout.write(
            self.style.SUCCESS(
                f"Imported {result.count} budget lines for {options['month']} "
                f"(created={result.created}, updated={result.updated}, skipped={result.skipped})"
            )
        )
