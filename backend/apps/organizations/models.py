"""
Organizations models - multi-tenancy foundation.
"""

from django.db import models
from uuid6 import uuid7


class Organization(models.Model):
    """
    Tenant that owns pipelines and cases.

    Organizations usually arrive from the command centre with their own id.
    Syncs that carry no org_id fall back to the default organization; the
    partial unique constraint allows at most one row flagged is_default.
    """

    DEFAULT_NAME = "Default Organization"
    DEFAULT_SLUG = "default"

    id = models.UUIDField(primary_key=True, default=uuid7, editable=False)

    name = models.CharField(max_length=255)
    slug = models.SlugField(
        max_length=255,
        unique=True,
        help_text="URL-safe identifier, e.g. 'elab'",
    )
    is_default = models.BooleanField(
        default=False,
        help_text="Fallback organization for syncs without an org_id",
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["is_default"],
                condition=models.Q(is_default=True),
                name="organization_single_default",
            ),
        ]

    def __str__(self) -> str:
        return self.name
