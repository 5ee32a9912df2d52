from django.contrib import admin
from django.contrib.auth import get_user_model
from django.test import RequestFactory, TestCase
from django.urls import reverse

from treasury.models import Fund, FundMovement, Payment
from treasury.services import replenish, settle
from workflow.models import Level, Status
from workflow.tests.helpers import make_requisition, make_service, make_user


class TreasuryAdminTests(TestCase):
    def setUp(self):
        self.superuser = get_user_model().objects.create_superuser("root", "root@example.com", "testpass123")
        self.request = RequestFactory().get("/admin/")
        self.request.user = self.superuser

    def test_payments_and_movements_cannot_be_written_from_admin(self):
        replenish("USD", "500")
        requisition = make_requisition(
            make_user("issuer"), make_service("LOG"), level=Level.PAYMENT, status=Status.VALIDATED
        )
        payment = settle(requisition)
        movement = FundMovement.objects.filter(movement_type=FundMovement.MovementType.OUT).get()

        for model, obj in [(Payment, payment), (FundMovement, movement)]:
            model_admin = admin.site._registry[model]
            with self.subTest(model=model.__name__):
                self.assertFalse(model_admin.has_add_permission(self.request))
                self.assertFalse(model_admin.has_change_permission(self.request, obj))
                self.assertFalse(model_admin.has_delete_permission(self.request, obj))
                self.assertIn("amount_usd" if model is Payment else "amount", model_admin.get_readonly_fields(self.request, obj))

    def test_admin_add_views_are_forbidden(self):
        self.client.force_login(self.superuser)

        for url_name in ["admin:treasury_payment_add", "admin:treasury_fundmovement_add"]:
            with self.subTest(url_name=url_name):
                self.assertEqual(self.client.get(reverse(url_name)).status_code, 403)

    def test_fund_balance_is_read_only(self):
        replenish("USD", "10")
        fund = Fund.objects.get(currency="USD")
        model_admin = admin.site._registry[Fund]

        self.assertIn("available", model_admin.get_readonly_fields(self.request, fund))
        self.assertFalse(model_admin.has_delete_permission(self.request, fund))
