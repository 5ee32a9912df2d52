from decimal import Decimal

from django.conf import settings
from django.db import models

from .exceptions import InvalidMovementError


class Fund(models.Model):
    """Cash available in one currency."""

    currency = models.CharField(max_length=3, unique=True)
    available = models.DecimalField(max_digits=19, decimal_places=4, default=Decimal("0.0000"))
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["currency"]
        constraints = [
            models.CheckConstraint(condition=models.Q(available__gte=0), name="fund_available_non_negative"),
        ]

    def __str__(self):
        return f"{self.currency} {self.available}"


class FundMovement(models.Model):
    """Append-only journal of money entering or leaving a fund."""

    class MovementType(models.TextChoices):
        IN = "in", "In"
        OUT = "out", "Out"

    movement_type = models.CharField(max_length=3, choices=MovementType.choices)
    amount = models.DecimalField(max_digits=19, decimal_places=4)
    currency = models.CharField(max_length=3, db_index=True)
    description = models.CharField(max_length=255, blank=True, default="")
    requisition = models.ForeignKey(
        "workflow.Requisition",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="fund_movements",
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(condition=models.Q(amount__gt=0), name="fund_movement_positive"),
        ]

    def __str__(self):
        return f"{self.get_movement_type_display()} {self.amount} {self.currency}"

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise InvalidMovementError("Fund movements cannot be modified.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise InvalidMovementError("Fund movements cannot be deleted.")


class Payment(models.Model):
    """Receipt of the settlement of one requisition. At most one per requisition."""

    requisition = models.OneToOneField(
        "workflow.Requisition",
        on_delete=models.PROTECT,
        related_name="payment",
    )
    amount_usd = models.DecimalField(max_digits=19, decimal_places=4, default=Decimal("0.0000"))
    amount_cdf = models.DecimalField(max_digits=19, decimal_places=4, default=Decimal("0.0000"))
    comment = models.TextField(blank=True, default="")
    payer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments_made",
    )
    paid_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-paid_at"]

    def __str__(self):
        return f"Payment for {self.requisition_id}"
