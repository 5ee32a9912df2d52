from decimal import Decimal

from django.db import models


class BudgetLine(models.Model):
    """
    Monthly allocation for one spending line, keyed by (description, month).

    ``consumed`` only ever grows; it is written exclusively by the budget ledger.
    """

    description = models.CharField(max_length=255)
    month = models.CharField(max_length=7, help_text="YYYY-MM")
    year = models.PositiveIntegerField()
    allocated = models.DecimalField(max_digits=19, decimal_places=4, default=Decimal("0.0000"))
    consumed = models.DecimalField(max_digits=19, decimal_places=4, default=Decimal("0.0000"))
    classification = models.CharField(max_length=64, blank=True, default="Other")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["month", "description"]
        constraints = [
            models.UniqueConstraint(fields=["description", "month"], name="unique_budget_line_month"),
            models.CheckConstraint(
                condition=models.Q(allocated__gte=0) & models.Q(consumed__gte=0),
                name="budget_line_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.description} ({self.month})"

    @property
    def remaining(self) -> Decimal:
        return (self.allocated or Decimal("0.0000")) - (self.consumed or Decimal("0.0000"))
