from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import models


MONEY_QUANT = Decimal("0.0000")


class Level(models.TextChoices):
    ISSUER = "issuer", "Issuer"
    SERVICE_APPROVAL = "service_approval", "Service approval"
    ANALYST = "analyst", "Analyst"
    CHALLENGER = "challenger", "Challenger"
    VALIDATOR = "validator", "Validator"
    FINANCE_GM = "finance_gm", "Finance / GM"
    COMPILATION = "compilation", "Compilation"
    BORDEREAU_ALIGNMENT = "bordereau_alignment", "Bordereau alignment"
    PAYMENT = "payment", "Payment"
    ACCOUNTANT = "accountant", "Accountant (legacy)"
    DONE = "done", "Done"


class Status(models.TextChoices):
    DRAFT = "draft", "Draft"
    IN_REVIEW = "in_review", "In review"
    NEEDS_CORRECTION = "needs_correction", "Needs correction"
    VALIDATED = "validated", "Validated"
    PAID = "paid", "Paid"
    REJECTED = "rejected", "Rejected"
    CANCELLED = "cancelled", "Cancelled"
    DONE = "done", "Done"


class Action(models.TextChoices):
    APPROVE = "approve", "Approve"
    REQUEST_CHANGES = "request_changes", "Request changes"
    REJECT = "reject", "Reject"


class Role(models.TextChoices):
    ISSUER = "issuer", "Issuer"
    SERVICE_HEAD = "service_head", "Service head"
    ANALYST = "analyst", "Analyst"
    CHALLENGER = "challenger", "Challenger"
    VALIDATOR = "validator", "Validator"
    PM = "pm", "Project manager"
    GM = "gm", "General manager"
    COMPILER = "compiler", "Compiler"
    ACCOUNTANT = "accountant", "Accountant"


PAYMENT_LEVELS = frozenset({Level.PAYMENT, Level.ACCOUNTANT})
TERMINAL_STATUSES = frozenset({Status.PAID, Status.REJECTED, Status.DONE, Status.CANCELLED})
EDITABLE_STATUSES = frozenset({Status.DRAFT, Status.NEEDS_CORRECTION})


class Bordereau(models.Model):
    """Payment slip grouping the requisitions compiled together for payment."""

    number = models.CharField(max_length=32, unique=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="bordereaux",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name_plural = "bordereaux"

    def __str__(self):
        return self.number

    def totals(self) -> dict:
        totals = self.requisitions.aggregate(
            count=models.Count("id"),
            total_usd=models.Sum("amount_usd"),
            total_cdf=models.Sum("amount_cdf"),
        )
        totals["total_usd"] = totals["total_usd"] or Decimal("0")
        totals["total_cdf"] = totals["total_cdf"] or Decimal("0")
        return totals


class Requisition(models.Model):
    number = models.CharField(max_length=64, unique=True)
    subject = models.CharField(max_length=255)
    amount_usd = models.DecimalField(max_digits=19, decimal_places=4, null=True, blank=True)
    amount_cdf = models.DecimalField(max_digits=19, decimal_places=4, null=True, blank=True)
    level = models.CharField(max_length=32, choices=Level.choices, default=Level.ISSUER, db_index=True)
    status = models.CharField(max_length=32, choices=Status.choices, default=Status.IN_REVIEW, db_index=True)
    issuer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="requisitions",
    )
    service = models.ForeignKey(
        "core.Service",
        on_delete=models.PROTECT,
        related_name="requisitions",
    )
    return_level = models.CharField(max_length=32, choices=Level.choices, blank=True, default="")
    budget_impacted = models.BooleanField(default=False)
    payment_mode = models.CharField(max_length=32, blank=True, default="")
    bordereau = models.ForeignKey(
        Bordereau,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="requisitions",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["level", "status", "updated_at"], name="req_level_status_upd_idx"),
        ]

    def __str__(self):
        return f"{self.number} ({self.get_level_display()})"

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def currency_amounts(self) -> dict[str, Decimal]:
        """Non-zero amounts due, keyed by currency code."""
        amounts = {}
        if self.amount_usd:
            amounts["USD"] = Decimal(self.amount_usd)
        if self.amount_cdf:
            amounts["CDF"] = Decimal(self.amount_cdf)
        return amounts


class LineItem(models.Model):
    requisition = models.ForeignKey(Requisition, on_delete=models.CASCADE, related_name="line_items")
    description = models.CharField(max_length=255)
    quantity = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("1.00"))
    unit_price = models.DecimalField(max_digits=19, decimal_places=4, default=Decimal("0.0000"))
    line_total = models.DecimalField(max_digits=19, decimal_places=4, default=Decimal("0.0000"))
    currency = models.CharField(max_length=3, default="USD")

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.description} x {self.quantity}"

    def save(self, *args, **kwargs):
        self.line_total = (Decimal(self.quantity) * Decimal(self.unit_price)).quantize(
            MONEY_QUANT, rounding=ROUND_HALF_UP
        )
        super().save(*args, **kwargs)


class WorkflowSetting(models.Model):
    """Escalation delay per level. A delay of 0 disables escalation."""

    level = models.CharField(max_length=32, choices=Level.choices, unique=True)
    delay_minutes = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["level"]

    def __str__(self):
        return f"{self.level}: {self.delay_minutes} min"
