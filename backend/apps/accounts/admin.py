"""Django admin for portal accounts."""

from django.contrib import admin

from apps.accounts.models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Admin for locally mirrored Stytch accounts."""

    list_display = ["email", "name", "stytch_user_id", "is_active", "is_staff", "created_at"]
    list_filter = ["is_active", "is_staff"]
    search_fields = ["email", "name", "stytch_user_id"]
    readonly_fields = ["stytch_user_id", "created_at", "updated_at"]
    exclude = ["password"]
    ordering = ["-created_at"]
