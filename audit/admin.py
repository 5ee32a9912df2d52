from django.contrib import admin

from .models import ActionRecord


@admin.register(ActionRecord)
class ActionRecordAdmin(admin.ModelAdmin):
    list_display = ("created_at", "requisition", "action", "from_level", "to_level", "actor", "is_automatic")
    list_filter = ("action", "is_automatic")
    search_fields = ("requisition__number", "comment")
    readonly_fields = [f.name for f in ActionRecord._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
