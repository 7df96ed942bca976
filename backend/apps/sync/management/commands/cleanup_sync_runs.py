"""
Management command to delete old SyncRun audit rows.

Every command centre sync call writes a SyncRun, including rejected ones.
Past the retention period they are removed in batches.
"""

from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand
from django.db.models import Count
from django.utils import timezone

from apps.sync.models import SyncRun


class Command(BaseCommand):
    """Delete SyncRun rows older than the retention period."""

    help = "Remove sync audit rows past the retention period"

    def add_arguments(self, parser):
        parser.add_argument(
            "--retention-days",
            type=int,
            default=getattr(settings, "SYNC_RUN_RETENTION_DAYS", 180),
            help="Days to retain sync runs (default: 180)",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be deleted without actually deleting",
        )
        parser.add_argument(
            "--batch-size",
            type=int,
            default=5000,
            help="Number of rows to delete per batch (default: 5000)",
        )
        parser.add_argument(
            "--status",
            type=str,
            choices=[choice.value for choice in SyncRun.Status],
            default=None,
            help="Only clean up runs with this status",
        )

    def handle(self, *args, **options):
        retention_days = options["retention_days"]
        batch_size = options["batch_size"]

        cutoff = timezone.now() - timedelta(days=retention_days)
        self.stdout.write(
            f"Cleaning sync runs older than {retention_days} days (before {cutoff.isoformat()})"
        )

        qs = SyncRun.objects.filter(created_at__lt=cutoff)
        if options["status"]:
            qs = qs.filter(status=options["status"])
            self.stdout.write(f"Filtering by status: {options['status']}")

        total_count = qs.count()
        if total_count == 0:
            self.stdout.write("No sync runs to remove")
            return

        if options["dry_run"]:
            self.stdout.write(self.style.WARNING("DRY RUN - no changes will be made"))
            breakdown = qs.values("status").annotate(count=Count("id")).order_by("-count")
            for row in breakdown:
                self.stdout.write(f"  {row['status']}: {row['count']}")
            self.stdout.write(self.style.SUCCESS(f"Total: {total_count} runs would be removed"))
            return

        total_deleted = 0
        while True:
            batch_ids = list(qs.values_list("id", flat=True)[:batch_size])
            if not batch_ids:
                break
            deleted_count, _ = SyncRun.objects.filter(id__in=batch_ids).delete()
            total_deleted += deleted_count
            self.stdout.write(f"  Deleted {total_deleted}/{total_count} runs...")

        self.stdout.write(self.style.SUCCESS(f"Total: {total_deleted} sync runs removed"))
