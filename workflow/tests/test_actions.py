from decimal import Decimal

from django.test import TestCase

from treasury.models import Fund, Payment
from treasury.services import replenish
from workflow.exceptions import ActorNotAllowedError
from workflow.models import Action, Level, Requisition, Role, Status
from workflow.services.actions import apply_action, can_act, pay_requisitions

from .helpers import make_requisition, make_service, make_user


class CanActTests(TestCase):
    def test_role_level_map(self):
        self.assertTrue(can_act(Role.ISSUER, Level.ISSUER))
        self.assertTrue(can_act(Role.ANALYST, Level.ISSUER))
        self.assertTrue(can_act(Role.ANALYST, Level.BORDEREAU_ALIGNMENT))
        self.assertTrue(can_act(Role.PM, Level.VALIDATOR))
        self.assertTrue(can_act(Role.GM, Level.FINANCE_GM))
        self.assertTrue(can_act(Role.ACCOUNTANT, Level.ACCOUNTANT))
        self.assertFalse(can_act(Role.CHALLENGER, Level.VALIDATOR))
        self.assertFalse(can_act(Role.ACCOUNTANT, Level.FINANCE_GM))
        self.assertFalse(can_act("intern", Level.ISSUER))


class ApplyActionTests(TestCase):
    def setUp(self):
        self.issuer = make_user("issuer")
        self.analyst = make_user("analyst")
        self.service = make_service("LOG")

    def test_allowed_role_moves_requisition(self):
        requisition = make_requisition(self.issuer, self.service, level=Level.ANALYST)

        level = apply_action(requisition.pk, Action.APPROVE, actor=self.analyst, role=Role.ANALYST)

        self.assertEqual(level, Level.CHALLENGER)

    def test_role_at_wrong_level_is_refused(self):
        requisition = make_requisition(self.issuer, self.service, level=Level.FINANCE_GM)

        with self.assertRaises(ActorNotAllowedError):
            apply_action(requisition.pk, Action.APPROVE, actor=self.analyst, role=Role.ANALYST)

        self.assertEqual(Requisition.objects.get(pk=requisition.pk).level, Level.FINANCE_GM)

    def test_only_the_owner_acts_as_issuer(self):
        requisition = make_requisition(self.issuer, self.service)

        with self.assertRaises(ActorNotAllowedError):
            apply_action(requisition.pk, Action.APPROVE, actor=self.analyst, role=Role.ISSUER)

        self.assertEqual(
            apply_action(requisition.pk, Action.APPROVE, actor=self.issuer, role=Role.ISSUER),
            Level.ANALYST,
        )

    def test_only_the_supervisor_acts_as_service_head(self):
        supervisor = make_user("supervisor")
        service = make_service("MNT", supervisor=supervisor)
        requisition = make_requisition(self.issuer, service, level=Level.SERVICE_APPROVAL)

        with self.assertRaises(ActorNotAllowedError):
            apply_action(requisition.pk, Action.APPROVE, actor=self.analyst, role=Role.SERVICE_HEAD)

        level = apply_action(requisition.pk, Action.APPROVE, actor=supervisor, role=Role.SERVICE_HEAD)
        self.assertEqual(level, Level.ANALYST)


class PayRequisitionsTests(TestCase):
    def setUp(self):
        self.issuer = make_user("issuer")
        self.accountant = make_user("accountant")
        self.service = make_service("LOG")

    def test_each_requisition_is_paid_independently(self):
        replenish("USD", "500")
        first = make_requisition(self.issuer, self.service, level=Level.PAYMENT, status=Status.VALIDATED)
        second = make_requisition(self.issuer, self.service, level=Level.PAYMENT, status=Status.VALIDATED)
        not_ready = make_requisition(self.issuer, self.service, level=Level.COMPILATION)

        paid_ids, errors = pay_requisitions(
            [first.pk, second.pk, not_ready.pk, 999999],
            actor=self.accountant,
            comment="Batch",
        )

        # 500 covers one 300 requisition; the second fails on funds.
        self.assertEqual(paid_ids, [first.pk])
        self.assertEqual([requisition_id for requisition_id, _message in errors], [second.pk, not_ready.pk, 999999])
        self.assertEqual(Fund.objects.get(currency="USD").available, Decimal("200"))
        self.assertEqual(Payment.objects.get().payer, self.accountant)
        self.assertEqual(Requisition.objects.get(pk=second.pk).level, Level.PAYMENT)
