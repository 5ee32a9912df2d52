from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone

from budgets.models import BudgetLine
from core.models import Service
from workflow.models import Requisition
from workflow.services.requisitions import create_requisition


User = get_user_model()


def make_user(username: str):
    return User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="testpass123",
    )


def make_service(code: str = "LOG", supervisor=None) -> Service:
    return Service.objects.create(code=code, name=f"{code} service", supervisor=supervisor)


def current_month() -> str:
    return timezone.localtime().strftime("%Y-%m")


def make_budget_line(description: str, allocated, consumed="0", month: str | None = None) -> BudgetLine:
    month = month or current_month()
    return BudgetLine.objects.create(
        description=description,
        month=month,
        year=int(month[:4]),
        allocated=Decimal(str(allocated)),
        consumed=Decimal(str(consumed)),
    )


def make_requisition(issuer, service, items=None, **state) -> Requisition:
    """Create a requisition through intake, then force ``state`` (level, status...) for setup."""
    items = items if items is not None else [
        {"description": "Fuel", "quantity": "1", "unit_price": "300", "currency": "USD"},
    ]
    requisition = create_requisition(issuer, service, "Generator fuel", items)
    if state:
        Requisition.objects.filter(pk=requisition.pk).update(**state)
        requisition.refresh_from_db()
    return requisition
