"""Django admin for client documents."""

from django.contrib import admin

from apps.documents.models import ClientDocument


@admin.register(ClientDocument)
class ClientDocumentAdmin(admin.ModelAdmin):
    """Admin for uploaded client documents and their review state."""

    list_display = ["name", "case_reference", "document_type", "status", "uploaded_at"]
    list_filter = ["status", "document_type", "is_client_visible"]
    search_fields = ["name", "case_reference", "person__email", "storage_path"]
    raw_id_fields = ["case", "person", "uploaded_by"]
    readonly_fields = ["storage_path", "mime_type", "size_bytes", "uploaded_at", "reviewed_at"]
    ordering = ["-uploaded_at"]
    date_hierarchy = "uploaded_at"
