from datetime import datetime
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from budgets.services import consumption_history
from core.exceptions import DomainError
from workflow.models import Level, Requisition, Status
from workflow.tests.helpers import current_month, make_budget_line, make_requisition, make_service, make_user


class ConsumptionHistoryTests(TestCase):
    def setUp(self):
        self.issuer = make_user("issuer")
        self.service = make_service("LOG")
        make_budget_line("Fuel", "1000", consumed="300")

    def _charged(self, items=None, **state):
        return make_requisition(
            self.issuer,
            self.service,
            items,
            level=Level.COMPILATION,
            status=Status.VALIDATED,
            budget_impacted=True,
            **state,
        )

    def test_only_charged_requisitions_are_listed_with_their_budget_line(self):
        fuel = self._charged()
        make_requisition(self.issuer, self.service, level=Level.ANALYST)

        entries = consumption_history()

        self.assertEqual(len(entries), 1)
        entry = entries[0]
        self.assertEqual(entry.requisition_id, fuel.pk)
        self.assertEqual(entry.number, fuel.number)
        self.assertEqual(entry.issuer, "issuer")
        self.assertEqual(entry.service, "LOG")
        self.assertEqual(entry.description, "Fuel")
        self.assertEqual(entry.amount, Decimal("300"))
        self.assertEqual(entry.currency, "USD")
        self.assertEqual(entry.allocated, Decimal("1000"))
        self.assertEqual(entry.consumed, Decimal("300"))

    def test_secondary_currency_lines_report_primary_amount(self):
        self._charged([{"description": "Water", "quantity": "1", "unit_price": "56000", "currency": "CDF"}])

        entry = consumption_history()[0]

        self.assertEqual(entry.currency, "CDF")
        self.assertEqual(entry.amount_primary, Decimal("20"))
        # No budget line for water this month.
        self.assertIsNone(entry.allocated)
        self.assertIsNone(entry.consumed)

    def test_month_filter_and_newest_first(self):
        older = self._charged()
        Requisition.objects.filter(pk=older.pk).update(created_at=timezone.make_aware(datetime(2024, 1, 15, 10, 0)))
        first = self._charged()
        second = self._charged()

        self.assertEqual([e.requisition_id for e in consumption_history()], [second.pk, first.pk, older.pk])
        self.assertEqual([e.requisition_id for e in consumption_history("2024-01")], [older.pk])
        self.assertEqual(len(consumption_history(current_month())), 2)
        self.assertEqual(consumption_history("2023-12"), [])

    def test_older_entry_is_matched_to_its_own_month_line(self):
        older = self._charged()
        Requisition.objects.filter(pk=older.pk).update(created_at=timezone.make_aware(datetime(2024, 1, 15, 10, 0)))
        make_budget_line("Fuel", "500", consumed="50", month="2024-01")

        entry = consumption_history("2024-01")[0]

        self.assertEqual(entry.allocated, Decimal("500"))
        self.assertEqual(entry.consumed, Decimal("50"))

    def test_bad_month_is_refused(self):
        with self.assertRaises(DomainError):
            consumption_history("2024-13")
