"""
Tests for sync management commands.
"""

from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone

from apps.sync.models import SyncRun


def make_run(status: str = SyncRun.Status.APPLIED, age_days: int = 0) -> SyncRun:
    run = SyncRun.objects.create(status=status, payload={})
    if age_days:
        # created_at is auto_now_add; backdate with an update
        SyncRun.objects.filter(id=run.id).update(
            created_at=timezone.now() - timedelta(days=age_days)
        )
    return run


@pytest.mark.django_db
class TestCleanupSyncRuns:
    """Tests for cleanup_sync_runs."""

    def test_deletes_old_runs(self) -> None:
        old = make_run(age_days=200)
        recent = make_run(age_days=10)
        out = StringIO()

        call_command("cleanup_sync_runs", stdout=out)

        assert not SyncRun.objects.filter(id=old.id).exists()
        assert SyncRun.objects.filter(id=recent.id).exists()
        assert "Total: 1 sync runs removed" in out.getvalue()

    def test_dry_run_keeps_rows(self) -> None:
        make_run(status=SyncRun.Status.REJECTED, age_days=200)
        out = StringIO()

        call_command("cleanup_sync_runs", "--dry-run", stdout=out)

        assert SyncRun.objects.count() == 1
        assert "rejected: 1" in out.getvalue()

    def test_filters_by_status(self) -> None:
        make_run(status=SyncRun.Status.APPLIED, age_days=40)
        rejected = make_run(status=SyncRun.Status.REJECTED, age_days=40)

        call_command(
            "cleanup_sync_runs", "--retention-days=30", "--status=applied", stdout=StringIO()
        )

        assert list(SyncRun.objects.values_list("id", flat=True)) == [rejected.id]

    def test_batches(self) -> None:
        for _ in range(5):
            make_run(age_days=365)

        call_command("cleanup_sync_runs", "--batch-size=2", stdout=StringIO())

        assert SyncRun.objects.count() == 0

    def test_nothing_to_remove(self) -> None:
        make_run()
        out = StringIO()

        call_command("cleanup_sync_runs", stdout=out)

        assert "No sync runs to remove" in out.getvalue()
