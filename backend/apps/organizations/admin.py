"""Django admin for organizations."""

from django.contrib import admin

from apps.organizations.models import Organization


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    """Admin for tenant organizations."""

    list_display = ["name", "slug", "is_default", "created_at"]
    list_filter = ["is_default"]
    search_fields = ["name", "slug"]
    ordering = ["created_at"]
