from django.contrib import admin

from .models import Fund, FundMovement, Payment


class ReadOnlyLedgerAdmin(admin.ModelAdmin):
    """Ledger rows are written by the treasury services only."""

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Fund)
class FundAdmin(admin.ModelAdmin):
    list_display = ("currency", "available", "updated_at")
    # Balances move through replenish() and settle() only.
    readonly_fields = ("available",)

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(FundMovement)
class FundMovementAdmin(ReadOnlyLedgerAdmin):
    list_display = ("created_at", "movement_type", "amount", "currency", "description")
    list_filter = ("movement_type", "currency")
    search_fields = ("description",)


@admin.register(Payment)
class PaymentAdmin(ReadOnlyLedgerAdmin):
    list_display = ("requisition", "amount_usd", "amount_cdf", "payer", "paid_at")
    search_fields = ("requisition__number",)
