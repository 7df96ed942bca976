"""
Sync audit models.
"""

from django.db import models


class SyncRun(models.Model):
    """
    Append-only log of command centre sync calls.

    Written after the reconciliation transaction has committed or rolled
    back, so rejected calls are recorded too.
    """

    class Status(models.TextChoices):
        APPLIED = "applied"
        REJECTED = "rejected"
        FAILED = "failed"

    case_id = models.UUIDField(null=True, blank=True, db_index=True)
    person_email = models.CharField(max_length=254, blank=True)

    status = models.CharField(max_length=16, choices=Status.choices)
    step = models.CharField(max_length=32, blank=True, help_text="Step that failed")
    error = models.TextField(blank=True)

    # created/matched flags and resolved ids for applied runs
    summary = models.JSONField(null=True, blank=True)
    payload = models.JSONField()

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"sync {self.case_id or '-'} ({self.status})"
