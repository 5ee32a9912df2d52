from django.contrib import admin

from .models import BudgetLine


@admin.register(BudgetLine)
class BudgetLineAdmin(admin.ModelAdmin):
    list_display = ("description", "month", "classification", "allocated", "consumed", "display_remaining")
    list_filter = ("month", "classification")
    search_fields = ("description",)
    readonly_fields = ("consumed",)
    ordering = ("-month", "description")

    @admin.display(description="Remaining")
    def display_remaining(self, obj):
        return obj.remaining
