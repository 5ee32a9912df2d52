from django.contrib import admin

from .models import AppSetting, Service


admin.site.site_header = "Requisitions - System Admin"
admin.site.site_title = "Requisitions System Admin"


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "supervisor")
    search_fields = ("code", "name")
    ordering = ("code",)


@admin.register(AppSetting)
class AppSettingAdmin(admin.ModelAdmin):
    list_display = ("key", "value", "updated_at")
    search_fields = ("key",)
