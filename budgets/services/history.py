from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from django.db.models import Q
from django.utils import timezone

from budgets.models import BudgetLine
from budgets.services.importer import MONTH_RE
from budgets.services.ledger import month_for, to_primary
from core.app_settings import get_exchange_rate
from core.exceptions import DomainError


@dataclass(frozen=True)
class ConsumptionEntry:
    requisition_id: int
    number: str
    created_at: datetime
    status: str
    issuer: str
    service: str
    description: str
    amount: Decimal
    currency: str
    amount_primary: Decimal
    allocated: Decimal | None
    consumed: Decimal | None


def _month_bounds(month: str) -> tuple[datetime, datetime]:
    year, number = int(month[:4]), int(month[5:])
    start = timezone.make_aware(datetime(year, number, 1))
    end = timezone.make_aware(datetime(year + number // 12, number % 12 + 1, 1))
    return start, end


def consumption_history(month: str | None = None) -> list[ConsumptionEntry]:
    """
    Line items of requisitions already charged to the budget, newest first.

    Each entry carries the budget line it was charged to (same description,
    same month as the requisition); ``allocated`` and ``consumed`` are None
    when no such line exists. ``month`` (YYYY-MM) keeps requisitions raised
    that month only.
    """
    from workflow.models import LineItem

    items = (
        LineItem.objects.filter(requisition__budget_impacted=True)
        .select_related("requisition", "requisition__issuer", "requisition__service")
        .order_by("-requisition__created_at", "-requisition_id", "id")
    )
    if month is not None:
        if not MONTH_RE.match(month):
            raise DomainError("month must be formatted YYYY-MM.")
        start, end = _month_bounds(month)
        items = items.filter(requisition__created_at__gte=start, requisition__created_at__lt=end)
    items = list(items)

    keys = {(item.description, month_for(item.requisition)) for item in items}
    lines = {}
    if keys:
        match = Q()
        for description, line_month in keys:
            match |= Q(description=description, month=line_month)
        lines = {(line.description, line.month): line for line in BudgetLine.objects.filter(match)}

    rate = get_exchange_rate()
    entries = []
    for item in items:
        requisition = item.requisition
        line = lines.get((item.description, month_for(requisition)))
        entries.append(
            ConsumptionEntry(
                requisition_id=requisition.pk,
                number=requisition.number,
                created_at=requisition.created_at,
                status=requisition.status,
                issuer=requisition.issuer.get_username(),
                service=requisition.service.code,
                description=item.description,
                amount=item.line_total,
                currency=item.currency,
                amount_primary=to_primary(item.line_total, item.currency, rate=rate),
                allocated=line.allocated if line else None,
                consumed=line.consumed if line else None,
            )
        )
    return entries
