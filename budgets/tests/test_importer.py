import tempfile
from decimal import Decimal
from io import StringIO
from pathlib import Path

from django.core.management import CommandError, call_command
from django.test import TestCase

from budgets.models import BudgetLine
from budgets.services.importer import import_budget_csv
from core.exceptions import DomainError


SAMPLE = """Budget mensuel,,
Site: Kinshasa,,
Libellé,Catégorie,Montant prévu
Fuel,Transport,"1,250.50"
Water,Supplies,$300
Stationery,,0
,,
Spare parts,Maintenance,abc
"""


class ImportBudgetCsvTests(TestCase):
    def test_header_is_detected_below_preamble(self):
        result = import_budget_csv(SAMPLE, "2025-03")

        self.assertEqual((result.created, result.updated, result.skipped), (2, 0, 2))
        fuel = BudgetLine.objects.get(description="Fuel", month="2025-03")
        self.assertEqual(fuel.allocated, Decimal("1250.50"))
        self.assertEqual(fuel.classification, "Transport")
        self.assertEqual(fuel.year, 2025)
        self.assertEqual(BudgetLine.objects.get(description="Water").allocated, Decimal("300"))

    def test_reimport_updates_allocation_and_keeps_consumption(self):
        import_budget_csv(SAMPLE, "2025-03")
        BudgetLine.objects.filter(description="Fuel").update(consumed=Decimal("100"))

        result = import_budget_csv("description,amount\nFuel,2000\n".encode("utf-8-sig"), "2025-03")

        self.assertEqual(result.updated, 1)
        fuel = BudgetLine.objects.get(description="Fuel", month="2025-03")
        self.assertEqual(fuel.allocated, Decimal("2000"))
        self.assertEqual(fuel.consumed, Decimal("100"))

    def test_decimal_comma_amounts(self):
        import_budget_csv('description,amount\nFuel,"1250,75"\n', "2025-03")

        self.assertEqual(BudgetLine.objects.get(description="Fuel").allocated, Decimal("1250.75"))

    def test_prix_column_is_the_amount(self):
        result = import_budget_csv("Désignation,Prix\nCarburant,\"1 500,00\"\n", "2025-03")

        self.assertEqual(result.created, 1)
        self.assertEqual(BudgetLine.objects.get(description="Carburant").allocated, Decimal("1500.00"))

    def test_bad_input_is_refused(self):
        with self.assertRaises(DomainError):
            import_budget_csv(SAMPLE, "03-2025")
        with self.assertRaises(DomainError):
            import_budget_csv("", "2025-03")
        with self.assertRaises(DomainError):
            import_budget_csv("foo,bar\n1,2\n", "2025-03")


class ImportBudgetCommandTests(TestCase):
    def test_command_imports_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "budget.csv"
            path.write_text(SAMPLE, encoding="utf-8")
            out = StringIO()

            call_command("import_budget", str(path), month="2025-03", stdout=out)

        self.assertIn("Imported 2 budget lines", out.getvalue())
        self.assertEqual(BudgetLine.objects.filter(month="2025-03").count(), 2)

    def test_command_reports_bad_month(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "budget.csv"
            path.write_text(SAMPLE, encoding="utf-8")

            with self.assertRaises(CommandError):
                call_command("import_budget", str(path), month="March")
