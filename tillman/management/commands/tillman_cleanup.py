"""Management command to cleanup old settled outbox entries."""

from django.core.management.base import BaseCommand

from tillman.models import OutboxEntry


class Command(BaseCommand):
    help = "Remove settled outbox entries older than SETTLED_CLEANUP_DAYS"

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=None,
            help="Override SETTLED_CLEANUP_DAYS setting",
        )

    def handle(self, *args, **options):
        deleted_count, _ = OutboxEntry.cleanup_settled(days=options["days"])
        self.stdout.write(
            self.style.SUCCESS(f"Deleted {deleted_count} settled outbox entries.")
        )
