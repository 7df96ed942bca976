"""
Core models - shared base classes and utilities.
"""

from django.db import models
from uuid6 import uuid7


class TimestampedModel(models.Model):
    """
    Abstract base model with created_at/updated_at timestamps.

    All business entities should inherit from this or TenantScopedModel.
    """

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class ExternalIdModel(TimestampedModel):
    """
    Abstract base for records mirrored from the command centre.

    The command centre owns identifiers, so the primary key is a UUID that
    callers may supply. UUIDv7 is generated when they don't, keeping IDs
    time-ordered.
    """

    id = models.UUIDField(primary_key=True, default=uuid7, editable=False)

    class Meta:
        abstract = True


class TenantScopedModel(ExternalIdModel):
    """
    Abstract base model for all organization-scoped entities.

    Usage:
        class Pipeline(TenantScopedModel):
            name = models.CharField(max_length=255)
    """

    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.CASCADE,
        related_name="%(class)s_set",
    )

    class Meta:
        abstract = True
