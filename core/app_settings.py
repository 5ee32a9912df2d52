from __future__ import annotations

from decimal import Decimal, InvalidOperation

from django.conf import settings

from core.models import AppSetting


def get_decimal_setting(key: str, default: Decimal) -> Decimal:
    row = AppSetting.objects.filter(key=key).first()
    if row is None:
        return default
    value = row.as_decimal()
    if value is None or not value.is_finite() or value <= 0:
        return default
    return value


def get_exchange_rate() -> Decimal:
    """Units of secondary currency per unit of the primary one (CDF per USD)."""
    return get_decimal_setting(
        settings.EXCHANGE_RATE_SETTING_KEY,
        Decimal(settings.TREASURY_DEFAULT_EXCHANGE_RATE),
    )


def set_exchange_rate(rate, description: str = "") -> AppSetting:
    try:
        rate = Decimal(str(rate).strip().replace(",", "."))
    except (InvalidOperation, ValueError):
        raise ValueError(f"Invalid exchange rate: {rate!r}") from None
    if not rate.is_finite():
        raise ValueError(f"Exchange rate must be a finite number, got {rate}.")
    if rate <= 0:
        raise ValueError("Exchange rate must be > 0.")
    row, _ = AppSetting.objects.update_or_create(
        key=settings.EXCHANGE_RATE_SETTING_KEY,
        defaults={"value": str(rate), "description": description or "USD/CDF exchange rate"},
    )
    return row
