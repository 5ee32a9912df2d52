from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from budgets.exceptions import BudgetExceededError
from budgets.models import BudgetLine
from core.app_settings import get_exchange_rate
from core.exceptions import DomainError


logger = logging.getLogger(__name__)

MONEY_QUANT = Decimal("0.0000")
NO_MATCHING_LINE = "no matching line"
OVER_BUDGET = "over budget"


@dataclass(frozen=True)
class BudgetCheck:
    allowed: bool
    remaining: Decimal | None
    reason: str = ""


def _dec(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0.0000")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_primary(amount, currency: str | None = None, *, rate: Decimal | None = None) -> Decimal:
    """Convert ``amount`` expressed in ``currency`` to the primary currency."""
    amount = _dec(amount)
    primary = settings.TREASURY_PRIMARY_CURRENCY
    currency = (currency or primary).upper()
    if currency == primary:
        return amount
    if currency not in settings.TREASURY_CURRENCIES:
        raise DomainError(f"Unsupported currency: {currency}")
    rate = rate or get_exchange_rate()
    return (amount / rate).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def month_for(requisition) -> str:
    """Budget month (YYYY-MM) a requisition consumes from: the month it was raised."""
    created = requisition.created_at or timezone.now()
    return timezone.localtime(created).strftime("%Y-%m")


def check(description: str, amount, month: str, *, currency: str | None = None) -> BudgetCheck:
    amount = to_primary(amount, currency)
    line = BudgetLine.objects.filter(description=description, month=month).first()
    if line is None:
        return BudgetCheck(allowed=False, remaining=None, reason=NO_MATCHING_LINE)

    remaining = line.remaining
    if amount > remaining:
        return BudgetCheck(allowed=False, remaining=remaining, reason=OVER_BUDGET)
    return BudgetCheck(allowed=True, remaining=remaining)


@transaction.atomic
def commit(description: str, amount, month: str, *, currency: str | None = None, enforce: bool = False) -> bool:
    """
    Add ``amount`` to the consumption of the (description, month) line.

    A missing line is logged and ignored (returns False); lines are never
    auto-created. With ``enforce`` an overrun raises ``BudgetExceededError``.
    """
    amount = to_primary(amount, currency)
    if amount < 0:
        raise DomainError("Budget consumption cannot be negative.")

    line = BudgetLine.objects.select_for_update().filter(description=description, month=month).first()
    if line is None:
        logger.warning("No budget line for '%s' in %s; consumption of %s not recorded.", description, month, amount)
        return False

    remaining = line.remaining
    if enforce and amount > remaining:
        raise BudgetExceededError(description, month, amount, remaining)

    line.consumed = _dec(line.consumed) + amount
    line.save(update_fields=["consumed", "updated_at"])
    return True


def requisition_consumption(requisition) -> dict[str, Decimal]:
    """Primary-currency totals of a requisition's line items, grouped by description."""
    rate = get_exchange_rate()
    totals: dict[str, Decimal] = {}
    for item in requisition.line_items.order_by("id"):
        amount = to_primary(item.line_total, item.currency, rate=rate)
        totals[item.description] = totals.get(item.description, Decimal("0.0000")) + amount
    return totals


@transaction.atomic
def commit_requisition(requisition, *, enforce: bool = False) -> list[str]:
    """
    Commit every line item of ``requisition`` against its month's budget lines.

    With ``enforce`` all lines are locked and checked before any is written, so
    an overrun on one line leaves every line untouched.
    """
    month = month_for(requisition)
    totals = requisition_consumption(requisition)
    if not totals:
        return []

    locked = {
        line.description: line
        for line in BudgetLine.objects.select_for_update()
        .filter(month=month, description__in=list(totals))
        .order_by("description")
    }
    if enforce:
        for description, amount in totals.items():
            line = locked.get(description)
            if line is not None and amount > line.remaining:
                raise BudgetExceededError(description, month, amount, line.remaining)

    committed = []
    for description, amount in totals.items():
        if commit(description, amount, month):
            committed.append(description)

    logger.info(
        "Budget consumption recorded for requisition %s (%s): %d/%d lines matched.",
        requisition.number,
        month,
        len(committed),
        len(totals),
    )
    return committed
