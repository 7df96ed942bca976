"""
Invite models.
"""

from datetime import datetime

from django.db import models
from django.utils import timezone

from apps.core.models import TimestampedModel


class InviteToken(TimestampedModel):
    """
    Single-use invitation to create a portal account.

    Issued by the command centre; at most one unused token is kept per
    email, later invites overwrite it.
    """

    class State(models.TextChoices):
        VALID = "valid", "Valid"
        EXPIRED = "expired", "Expired"
        USED = "used", "Used"

    token = models.CharField(max_length=255, unique=True)
    email = models.EmailField(db_index=True)

    # Command centre identifiers; the person or case may not be synced yet
    person_id = models.UUIDField(null=True, blank=True)
    case_id = models.UUIDField(null=True, blank=True)

    first_name = models.CharField(max_length=255, blank=True)
    last_name = models.CharField(max_length=255, blank=True)
    case_reference = models.CharField(max_length=100, blank=True)
    pipeline_name = models.CharField(max_length=255, blank=True)

    expires_at = models.DateTimeField(null=True, blank=True)
    used_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Invite for {self.email}"

    def state_at(self, now: datetime | None = None) -> str:
        now = now or timezone.now()
        if self.used_at is not None:
            return self.State.USED
        if self.expires_at is not None and self.expires_at <= now:
            return self.State.EXPIRED
        return self.State.VALID
