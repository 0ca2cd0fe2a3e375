"""
OutboxEntry model: durable queue of sales awaiting remote commit.

Enqueue order is the primary key order. Settled entries stay in the
table so that a late duplicate append cannot resurrect them; old ones
are removed by the tillman_cleanup command, after which their ids may
be enqueued again.
"""

from datetime import timedelta

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class OutboxStatus(models.TextChoices):
    QUEUED = "queued", _("Pendente")
    SETTLED = "settled", _("Sincronizada")


class OutboxEntry(models.Model):
    """A sale that could not be committed when it was made."""

    sale_ref = models.CharField(_("venda"), max_length=100, unique=True)
    store_ref = models.CharField(_("loja"), max_length=100, db_index=True)
    customer_ref = models.CharField(_("cliente"), max_length=100, db_index=True)
    payload = models.JSONField(
        _("venda serializada"),
        help_text=_("Venda com totais congelados (Sale.as_dict())"),
    )

    status = models.CharField(
        _("status"),
        max_length=20,
        choices=OutboxStatus.choices,
        default=OutboxStatus.QUEUED,
        db_index=True,
    )
    attempts = models.PositiveIntegerField(_("tentativas"), default=0)
    last_error = models.TextField(_("último erro"), blank=True)
    last_attempt_at = models.DateTimeField(_("última tentativa"), null=True, blank=True)

    enqueued_at = models.DateTimeField(_("enfileirada em"), auto_now_add=True)
    settled_at = models.DateTimeField(_("sincronizada em"), null=True, blank=True)

    class Meta:
        db_table = "tillman_outbox_entry"
        verbose_name = _("venda pendente")
        verbose_name_plural = _("vendas pendentes")
        ordering = ["id"]
        indexes = [
            models.Index(fields=["status", "id"], name="tillman_outbox_status_idx"),
        ]

    def __str__(self):
        return f"{self.sale_ref} [{self.status}]"

    @property
    def is_settled(self) -> bool:
        return self.status == OutboxStatus.SETTLED

    @classmethod
    def cleanup_settled(cls, days: int | None = None):
        """
        Remove settled entries older than N days. Queued entries are never removed.

        A removed sale id is forgotten by the outbox: appending it again
        queues it anew. Replaying it is harmless because remote commits
        and ledger entries are keyed by sale id, so keep the window longer
        than any terminal can stay offline.
        """
        if days is None:
            from tillman.conf import tillman_settings
            days = tillman_settings.SETTLED_CLEANUP_DAYS
        cutoff = timezone.now() - timedelta(days=days)
        return cls.objects.filter(
            status=OutboxStatus.SETTLED,
            settled_at__lt=cutoff,
        ).delete()
