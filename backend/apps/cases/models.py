"""
Case models - pipelines, stages, persons and their cases.

Rows are written by the command centre sync; the portal only reads them.
"""

from django.conf import settings
from django.db import models

from apps.core.models import ExternalIdModel, TenantScopedModel


class Pipeline(TenantScopedModel):
    """Workflow template a case moves through, e.g. 'DataFlow Verification'."""

    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class PipelineStage(ExternalIdModel):
    """One ordered step of a pipeline."""

    pipeline = models.ForeignKey(
        Pipeline,
        on_delete=models.CASCADE,
        related_name="stages",
    )
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255)
    order_index = models.IntegerField(default=0)

    class Meta:
        ordering = ["pipeline", "order_index"]

    def __str__(self) -> str:
        return f"{self.pipeline.name}: {self.name}"


class Person(ExternalIdModel):
    """
    Applicant tracked by the command centre.

    Identity is the email pair: syncs match on email or primary_email,
    case-insensitively, before creating a new row.
    """

    email = models.EmailField(db_index=True)
    primary_email = models.EmailField(blank=True, db_index=True)
    first_name = models.CharField(max_length=255, blank=True)
    last_name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=50, blank=True)

    auth_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="persons",
        help_text="Portal account linked by email",
    )

    class Meta:
        ordering = ["created_at"]
        verbose_name_plural = "persons"

    def __str__(self) -> str:
        return self.full_name or self.email

    @property
    def full_name(self) -> str:
        return " ".join(p for p in [self.first_name, self.last_name] if p)


class Case(TenantScopedModel):
    """An application a person has open with us."""

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        COMPLETED = "completed", "Completed"
        ON_HOLD = "on_hold", "On hold"
        CANCELLED = "cancelled", "Cancelled"

    case_reference = models.CharField(max_length=100, blank=True, db_index=True)
    person = models.ForeignKey(
        Person,
        on_delete=models.PROTECT,
        related_name="cases",
    )
    pipeline = models.ForeignKey(
        Pipeline,
        on_delete=models.PROTECT,
        related_name="cases",
    )
    current_stage = models.ForeignKey(
        PipelineStage,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
    )
    priority = models.CharField(max_length=50, blank=True)
    start_date = models.DateField(null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.case_reference or str(self.id)


class CaseStageHistory(models.Model):
    """Append-only record of a case moving between stages."""

    case = models.ForeignKey(
        Case,
        on_delete=models.CASCADE,
        related_name="stage_history",
    )
    from_stage = models.ForeignKey(
        PipelineStage,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    to_stage = models.ForeignKey(
        PipelineStage,
        on_delete=models.CASCADE,
        related_name="+",
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        verbose_name_plural = "case stage history"

    def __str__(self) -> str:
        return f"{self.case} -> {self.to_stage.name}"


class ClientNote(models.Model):
    """Staff note on a case; only is_client_visible notes reach the portal."""

    case = models.ForeignKey(
        Case,
        on_delete=models.CASCADE,
        related_name="notes",
    )
    content = models.TextField()
    is_client_visible = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return self.content[:50]
