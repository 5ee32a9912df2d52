from decimal import Decimal

from django.test import TestCase, override_settings

from core.app_settings import get_exchange_rate, set_exchange_rate
from core.models import AppSetting, Service
from workflow.tests.helpers import make_user


class ExchangeRateTests(TestCase):
    def test_default_rate_when_unset(self):
        self.assertEqual(get_exchange_rate(), Decimal("2800"))

    @override_settings(TREASURY_DEFAULT_EXCHANGE_RATE=Decimal("2650"))
    def test_default_rate_follows_settings(self):
        self.assertEqual(get_exchange_rate(), Decimal("2650"))

    def test_set_exchange_rate_upserts(self):
        set_exchange_rate("2750")
        set_exchange_rate(Decimal("2900.5"), description="Central bank rate")

        self.assertEqual(AppSetting.objects.count(), 1)
        self.assertEqual(get_exchange_rate(), Decimal("2900.5"))
        self.assertEqual(AppSetting.objects.get().description, "Central bank rate")

    def test_invalid_stored_rate_falls_back_to_default(self):
        AppSetting.objects.create(key="exchange_rate", value="n/a")
        self.assertEqual(get_exchange_rate(), Decimal("2800"))

        AppSetting.objects.filter(key="exchange_rate").update(value="2800,00")
        self.assertEqual(get_exchange_rate(), Decimal("2800.00"))

    def test_rate_must_be_positive(self):
        with self.assertRaises(ValueError):
            set_exchange_rate("0")

    def test_non_finite_stored_rate_falls_back_to_default(self):
        for stored in ["NaN", "sNaN", "Infinity", "-Infinity"]:
            with self.subTest(stored=stored):
                AppSetting.objects.update_or_create(key="exchange_rate", defaults={"value": stored})
                self.assertEqual(get_exchange_rate(), Decimal("2800"))

    def test_non_finite_or_garbage_rate_is_refused(self):
        for rate in ["nan", "NaN", "Infinity", "inf", Decimal("NaN"), "abc", ""]:
            with self.subTest(rate=rate):
                with self.assertRaises(ValueError):
                    set_exchange_rate(rate)

        self.assertFalse(AppSetting.objects.exists())


class ServiceTests(TestCase):
    def test_supervisor_is_optional(self):
        supervisor = make_user("chef")
        staffed = Service.objects.create(code="LOG", name="Logistics", supervisor=supervisor)
        unstaffed = Service.objects.create(code="ADM", name="Administration")

        self.assertEqual(list(supervisor.supervised_services.all()), [staffed])
        self.assertIsNone(unstaffed.supervisor)
        self.assertEqual([s.code for s in Service.objects.all()], ["ADM", "LOG"])
