"""Django admin for sync auditing."""

from django.contrib import admin

from apps.sync.models import SyncRun


@admin.register(SyncRun)
class SyncRunAdmin(admin.ModelAdmin):
    """Admin for viewing sync calls."""

    list_display = ["created_at", "case_id", "person_email", "status", "step"]
    list_filter = ["status", "step", "created_at"]
    search_fields = ["case_id", "person_email", "error"]
    readonly_fields = [
        "case_id",
        "person_email",
        "status",
        "step",
        "error",
        "summary",
        "payload",
        "created_at",
    ]
    ordering = ["-created_at"]
    date_hierarchy = "created_at"

    def has_add_permission(self, request):
        """Sync runs are created by the API, not admin."""
        return False

    def has_change_permission(self, request, obj=None):
        """Sync runs are immutable."""
        return False
