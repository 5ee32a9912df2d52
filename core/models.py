from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import models


class Service(models.Model):
    """
    Organizational unit a requisition is raised for.

    When ``supervisor`` is set (and is not the issuer), submissions pass through
    the service approval step before reaching the analyst.
    """

    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=128)
    supervisor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="supervised_services",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]

    def __str__(self):
        return f"{self.code} - {self.name}"


class AppSetting(models.Model):
    """Key/value store for runtime-tunable settings (e.g. the USD/CDF exchange rate)."""

    key = models.CharField(max_length=50, primary_key=True)
    value = models.TextField(blank=True, default="")
    description = models.TextField(blank=True, default="")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["key"]

    def __str__(self):
        return f"{self.key}={self.value}"

    def as_decimal(self) -> Decimal | None:
        try:
            value = Decimal(str(self.value).strip().replace(",", "."))
        except (InvalidOperation, ValueError):
            return None
        return value if value.is_finite() else None
