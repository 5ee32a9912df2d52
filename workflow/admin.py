from django.contrib import admin

from .models import Bordereau, LineItem, Requisition, WorkflowSetting


class LineItemInline(admin.TabularInline):
    model = LineItem
    extra = 0
    can_delete = False
    fields = ("description", "quantity", "unit_price", "currency", "line_total")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Requisition)
class RequisitionAdmin(admin.ModelAdmin):
    list_display = ("number", "subject", "level", "status", "amount_usd", "amount_cdf", "updated_at")
    list_filter = ("level", "status", "service")
    search_fields = ("number", "subject")
    inlines = [LineItemInline]

    # Intake, amounts, level and status only change through the workflow services.
    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in Requisition._meta.fields if f.name != "subject"]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(WorkflowSetting)
class WorkflowSettingAdmin(admin.ModelAdmin):
    list_display = ("level", "delay_minutes", "updated_at")


@admin.register(Bordereau)
class BordereauAdmin(admin.ModelAdmin):
    list_display = ("number", "created_by", "created_at", "requisition_count")
    search_fields = ("number", "requisitions__number")
    readonly_fields = ("number", "created_by", "created_at")

    @admin.display(description="Requisitions")
    def requisition_count(self, obj):
        return obj.requisitions.count()

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
