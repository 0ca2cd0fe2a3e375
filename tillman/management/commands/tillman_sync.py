"""Management command to replay queued sales to the remote store."""

from django.core.management.base import BaseCommand

from tillman.services.sync import SyncService


class Command(BaseCommand):
    help = "Replay queued sales from the outbox, oldest first"

    def handle(self, *args, **options):
        report = SyncService.replay()
        self.stdout.write(
            self.style.SUCCESS(f"Settled {len(report.settled)} queued sale(s).")
        )
        if report.failed:
            self.stdout.write(
                self.style.WARNING(f"{len(report.failed)} sale(s) still queued.")
            )
