"""Django admin configuration."""

from django.contrib import admin

from .models import ACLUser


@admin.register(ACLUser)
class ACLUserAdmin(admin.ModelAdmin):
    """Admin configuration for the ACLUser model."""

    list_display = ("name", "enabled", "password_version", "acl_save")
    readonly_fields = ("applied_password_version",)
