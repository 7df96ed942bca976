"""Django admin for cases."""

from django.contrib import admin

from apps.cases.models import (
    Case,
    CaseStageHistory,
    ClientNote,
    Person,
    Pipeline,
    PipelineStage,
)


class PipelineStageInline(admin.TabularInline):
    model = PipelineStage
    extra = 0
    fields = ["name", "slug", "order_index"]
    ordering = ["order_index"]


@admin.register(Pipeline)
class PipelineAdmin(admin.ModelAdmin):
    """Admin for pipelines and their stages."""

    list_display = ["name", "slug", "organization", "created_at"]
    list_filter = ["organization"]
    search_fields = ["name", "slug"]
    inlines = [PipelineStageInline]


@admin.register(Person)
class PersonAdmin(admin.ModelAdmin):
    """Admin for persons mirrored from the command centre."""

    list_display = ["email", "primary_email", "first_name", "last_name", "auth_user"]
    search_fields = ["email", "primary_email", "first_name", "last_name"]
    raw_id_fields = ["auth_user"]


class ClientNoteInline(admin.TabularInline):
    model = ClientNote
    extra = 0
    fields = ["content", "is_client_visible", "created_at"]
    readonly_fields = ["created_at"]


class CaseStageHistoryInline(admin.TabularInline):
    model = CaseStageHistory
    extra = 0
    fields = ["from_stage", "to_stage", "notes", "created_at"]
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        """History is written by the sync."""
        return False


@admin.register(Case)
class CaseAdmin(admin.ModelAdmin):
    """Admin for cases."""

    list_display = ["case_reference", "person", "pipeline", "current_stage", "status", "updated_at"]
    list_filter = ["status", "pipeline"]
    search_fields = ["case_reference", "person__email", "person__primary_email"]
    raw_id_fields = ["person", "pipeline", "current_stage", "organization"]
    inlines = [CaseStageHistoryInline, ClientNoteInline]
    ordering = ["-created_at"]
