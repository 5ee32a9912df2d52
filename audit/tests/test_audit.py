from django.db import transaction
from django.test import TestCase, TransactionTestCase

from audit.models import ActionRecord, ImmutableRecordError
from audit.services import append, list_actions
from workflow.models import Action, Level
from workflow.tests.helpers import make_requisition, make_service, make_user


class ActionRecordTests(TestCase):
    def setUp(self):
        self.user = make_user("auditor")
        self.requisition = make_requisition(self.user, make_service("LOG"))

    def test_records_are_listed_in_creation_order(self):
        first = append(self.requisition, self.user, Action.APPROVE, Level.ISSUER, Level.ANALYST, "ok")
        second = append(
            self.requisition, None, Action.APPROVE, Level.ANALYST, Level.CHALLENGER, "auto-escalated", automatic=True
        )

        records = list_actions(self.requisition.pk)

        self.assertEqual([r.pk for r in records], [first.pk, second.pk])
        self.assertTrue(records[1].is_automatic)
        self.assertIsNone(records[1].actor)

    def test_records_cannot_be_changed_or_deleted(self):
        record = append(self.requisition, self.user, Action.APPROVE, Level.ISSUER, Level.ANALYST)

        record.comment = "rewritten"
        with self.assertRaises(ImmutableRecordError):
            record.save()
        with self.assertRaises(ImmutableRecordError):
            record.delete()
        self.assertEqual(ActionRecord.objects.get(pk=record.pk).comment, "")


class AppendOutsideTransactionTests(TransactionTestCase):
    def test_append_requires_an_open_transaction(self):
        user = make_user("auditor")
        requisition = make_requisition(user, make_service("LOG"))

        with self.assertRaises(RuntimeError):
            append(requisition, user, Action.APPROVE, Level.ISSUER, Level.ANALYST)

        with transaction.atomic():
            append(requisition, user, Action.APPROVE, Level.ISSUER, Level.ANALYST)
        self.assertEqual(ActionRecord.objects.count(), 1)
