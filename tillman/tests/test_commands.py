"""Tests for management commands."""

from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone

from tillman.models import OutboxEntry, OutboxStatus
from tillman.services.checkout import CheckoutService


pytestmark = pytest.mark.django_db


class TestTillmanSync:
    """Tests for the tillman_sync command."""

    def test_replays_outbox(self, remote, outbox, make_sale, monkeypatch):
        """Test command settles queued sales."""
        monkeypatch.setattr("tillman.services.sync.get_remote_backend", lambda: remote)
        remote.online = False
        CheckoutService.commit(make_sale(), remote, outbox)
        remote.online = True

        out = StringIO()
        call_command("tillman_sync", stdout=out)

        assert "Settled 1 queued sale(s)." in out.getvalue()
        assert OutboxEntry.objects.get().status == OutboxStatus.SETTLED

    def test_reports_failures(self, remote, outbox, make_sale, monkeypatch):
        """Test command reports sales still queued."""
        monkeypatch.setattr("tillman.services.sync.get_remote_backend", lambda: remote)
        remote.online = False
        CheckoutService.commit(make_sale(), remote, outbox)

        out = StringIO()
        call_command("tillman_sync", stdout=out)

        assert "1 sale(s) still queued." in out.getvalue()


class TestTillmanCleanup:
    """Tests for the tillman_cleanup command."""

    def test_days_option(self, outbox, make_sale):
        """Test --days overrides the retention window."""
        sale = make_sale()
        outbox.append(sale)
        outbox.mark_settled(sale.id)
        OutboxEntry.objects.update(settled_at=timezone.now() - timedelta(days=10))

        out = StringIO()
        call_command("tillman_cleanup", "--days", "7", stdout=out)

        assert "Deleted 1 settled outbox entries." in out.getvalue()
        assert OutboxEntry.objects.count() == 0

    def test_default_keeps_recent(self, outbox, make_sale):
        """Test default retention keeps recent rows."""
        sale = make_sale()
        outbox.append(sale)
        outbox.mark_settled(sale.id)

        out = StringIO()
        call_command("tillman_cleanup", stdout=out)

        assert "Deleted 0 settled outbox entries." in out.getvalue()
