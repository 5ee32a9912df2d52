from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from workflow.exceptions import InvalidStateError, WorkflowError
from workflow.models import EDITABLE_STATUSES, MONEY_QUANT, Level, LineItem, Requisition, Status


logger = logging.getLogger(__name__)


def _to_decimal(value, field: str) -> Decimal:
    try:
        result = Decimal(str(value).strip().replace(",", "."))
    except (InvalidOperation, AttributeError, ValueError):
        raise WorkflowError(f"Invalid {field}: {value!r}") from None
    if not result.is_finite():
        raise WorkflowError(f"Invalid {field}: {value!r}")
    return result


def _parse_item(item: dict) -> dict:
    description = (item.get("description") or "").strip()
    if not description:
        raise WorkflowError("Line item description is required.")

    quantity = _to_decimal(item.get("quantity", 1) or 1, "quantity")
    unit_price = _to_decimal(item.get("unit_price", 0) or 0, "unit price")
    if quantity <= 0:
        raise WorkflowError("Line item quantity must be positive.")
    if unit_price < 0:
        raise WorkflowError("Line item unit price cannot be negative.")

    currency = (item.get("currency") or settings.TREASURY_PRIMARY_CURRENCY).strip().upper()
    if currency not in settings.TREASURY_CURRENCIES:
        raise WorkflowError(f"Unsupported currency: {currency}")

    return {
        "description": description,
        "quantity": quantity,
        "unit_price": unit_price,
        "currency": currency,
    }


def _currency_totals(items: list[dict]) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = {}
    for item in items:
        line_total = (item["quantity"] * item["unit_price"]).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)
        totals[item["currency"]] = totals.get(item["currency"], Decimal("0.0000")) + line_total
    return totals


def next_requisition_number(service, zone_code: str = "GEN") -> str:
    """``SERVICE-YYYYMM-SEQ-ZONE``, SEQ counting every requisition raised this month."""
    now = timezone.localtime()
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    zone = (zone_code or "GEN").strip().upper()

    sequence = Requisition.objects.filter(created_at__gte=month_start).count() + 1
    while True:
        number = f"{service.code}-{now:%Y%m}-{sequence:04d}-{zone}"
        if not Requisition.objects.filter(number=number).exists():
            return number
        sequence += 1


@transaction.atomic
def create_requisition(issuer, service, subject: str, items, *, zone_code: str = "GEN", draft: bool = False) -> Requisition:
    subject = (subject or "").strip()
    if not subject:
        raise WorkflowError("Requisition subject is required.")

    parsed = [_parse_item(item) for item in items]
    totals = _currency_totals(parsed)

    requisition = Requisition.objects.create(
        number=next_requisition_number(service, zone_code),
        subject=subject,
        amount_usd=totals.get("USD"),
        amount_cdf=totals.get("CDF"),
        issuer=issuer,
        service=service,
        level=Level.ISSUER,
        status=Status.DRAFT if draft else Status.IN_REVIEW,
    )
    for item in parsed:
        LineItem.objects.create(requisition=requisition, **item)

    logger.info("Requisition %s created by %s with %d line items.", requisition.number, issuer, len(parsed))
    return requisition


@transaction.atomic
def replace_line_items(requisition: Requisition, items) -> Requisition:
    """Swap every line item of an editable requisition and recompute its totals."""
    requisition = Requisition.objects.select_for_update().get(pk=requisition.pk)
    if requisition.status not in EDITABLE_STATUSES:
        raise InvalidStateError(f"Requisition {requisition.number} cannot be edited while {requisition.status}.")

    parsed = [_parse_item(item) for item in items]
    totals = _currency_totals(parsed)

    requisition.line_items.all().delete()
    for item in parsed:
        LineItem.objects.create(requisition=requisition, **item)

    requisition.amount_usd = totals.get("USD")
    requisition.amount_cdf = totals.get("CDF")
    requisition.save(update_fields=["amount_usd", "amount_cdf", "updated_at"])
    return requisition
