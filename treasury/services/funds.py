from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import IntegrityError, transaction

from treasury.exceptions import InvalidMovementError
from treasury.models import Fund, FundMovement


logger = logging.getLogger(__name__)


def _normalize_currency(currency) -> str:
    code = (currency or "").strip().upper()
    if code not in settings.TREASURY_CURRENCIES:
        raise InvalidMovementError(f"Unsupported currency: {currency!r}")
    return code


def get_fund_for_update(currency: str) -> Fund:
    """
    Lock and return the fund row for ``currency``, creating an empty one if needed.

    Must be called inside ``transaction.atomic``.
    """
    fund = Fund.objects.select_for_update().filter(currency=currency).first()
    if fund is not None:
        return fund
    try:
        with transaction.atomic():
            Fund.objects.create(currency=currency)
    except IntegrityError:
        # Created concurrently; fall through and lock the winner's row.
        pass
    return Fund.objects.select_for_update().get(currency=currency)


def get_funds() -> dict[str, Decimal]:
    """Current balance per configured currency, ordered by currency; missing funds read as zero."""
    balances = {currency: Decimal("0.0000") for currency in sorted(settings.TREASURY_CURRENCIES)}
    for fund in Fund.objects.order_by("currency"):
        balances[fund.currency] = fund.available
    return balances


def list_movements(limit: int = 100) -> list[FundMovement]:
    return list(FundMovement.objects.select_related("requisition").order_by("-created_at", "-id")[:limit])


@transaction.atomic
def replenish(currency: str, amount, description: str = "") -> FundMovement:
    """Credit a fund and journal the inflow."""
    code = _normalize_currency(currency)
    try:
        amount = Decimal(str(amount))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidMovementError(f"Invalid amount: {amount!r}") from None
    if not amount.is_finite() or amount <= 0:
        raise InvalidMovementError("Replenishment amount must be positive.")

    fund = get_fund_for_update(code)
    movement = FundMovement.objects.create(
        movement_type=FundMovement.MovementType.IN,
        amount=amount,
        currency=code,
        description=description or "Fund replenishment",
    )
    fund.available = fund.available + amount
    fund.save(update_fields=["available", "updated_at"])
    logger.info("Fund %s replenished by %s (balance %s).", code, amount, fund.available)
    return movement
