from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction

from treasury.exceptions import InsufficientFundsError
from treasury.models import FundMovement, Payment

from .funds import get_fund_for_update


logger = logging.getLogger(__name__)


@transaction.atomic
def settle(requisition, *, payer=None, comment: str = "") -> Payment | None:
    """
    Pay out ``requisition`` from the funds.

    Every currency is checked before any fund is debited, so a shortfall in
    one currency raises ``InsufficientFundsError`` and leaves all balances and
    the movement journal untouched. A requisition that already has a payment
    is not debited again and ``None`` is returned.
    """
    # Serialize concurrent settlements of the same requisition.
    type(requisition).objects.select_for_update().only("pk").get(pk=requisition.pk)

    if Payment.objects.filter(requisition_id=requisition.pk).exists():
        logger.warning("Requisition %s already has a payment; skipping debit.", requisition.number)
        return None

    amounts = requisition.currency_amounts()
    funds = {currency: get_fund_for_update(currency) for currency in sorted(amounts)}

    for currency in sorted(amounts):
        fund = funds[currency]
        if fund.available < amounts[currency]:
            raise InsufficientFundsError(currency, fund.available, amounts[currency])

    for currency in sorted(amounts):
        fund = funds[currency]
        amount = amounts[currency]
        fund.available = fund.available - amount
        fund.save(update_fields=["available", "updated_at"])
        FundMovement.objects.create(
            movement_type=FundMovement.MovementType.OUT,
            amount=amount,
            currency=currency,
            description=f"Payment of requisition {requisition.number}: {requisition.subject}"[:255],
            requisition=requisition,
        )

    payment = Payment.objects.create(
        requisition=requisition,
        amount_usd=amounts.get("USD", Decimal("0.0000")),
        amount_cdf=amounts.get("CDF", Decimal("0.0000")),
        comment=comment,
        payer=payer,
    )
    logger.info(
        "Requisition %s settled: %s.",
        requisition.number,
        ", ".join(f"{amount} {currency}" for currency, amount in sorted(amounts.items())) or "nothing due",
    )
    return payment
