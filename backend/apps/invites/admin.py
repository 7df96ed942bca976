"""Django admin for invites."""

from django.contrib import admin

from apps.invites.models import InviteToken


@admin.register(InviteToken)
class InviteTokenAdmin(admin.ModelAdmin):
    """Admin for portal invites."""

    list_display = ["email", "case_reference", "pipeline_name", "expires_at", "used_at", "created_at"]
    list_filter = ["used_at"]
    search_fields = ["email", "case_reference"]
    exclude = ["token"]
    ordering = ["-created_at"]
