"""
Client document models.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.core.models import ExternalIdModel


class ClientDocument(ExternalIdModel):
    """
    A file a client uploaded against a case, with its review state.

    The blob lives in the document store under storage_path; this row holds
    metadata and the review outcome set by command centre staff.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"
        NEEDS_REVISION = "needs_revision", "Needs revision"

    case = models.ForeignKey(
        "cases.Case",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="documents",
    )
    person = models.ForeignKey(
        "cases.Person",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="documents",
    )
    case_reference = models.CharField(max_length=100, blank=True, db_index=True)

    name = models.CharField(max_length=255)
    document_type = models.CharField(max_length=100, blank=True)
    storage_path = models.CharField(max_length=500, help_text="Key in the document store")
    mime_type = models.CharField(max_length=100, blank=True)
    size_bytes = models.PositiveBigIntegerField(default=0)

    # Review
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    reviewed_by = models.CharField(max_length=255, blank=True)
    reviewed_at = models.DateTimeField(null=True, blank=True)
    review_notes = models.TextField(blank=True)

    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="uploaded_documents",
    )
    uploaded_at = models.DateTimeField(default=timezone.now, db_index=True)
    notes = models.TextField(blank=True)
    is_client_visible = models.BooleanField(default=True)

    class Meta:
        ordering = ["-uploaded_at"]

    def __str__(self) -> str:
        return self.name
