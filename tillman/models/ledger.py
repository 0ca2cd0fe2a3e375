"""Ledger models: per-customer, per-store points balances and their deltas."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class EntryType(models.TextChoices):
    """Ledger entry types."""

    SALE = "sale", _("Venda")
    ADJUST = "adjust", _("Ajuste")
    MIRROR = "mirror", _("Espelho remoto")


class LedgerAccount(models.Model):
    """
    Points balance of one customer at one store.

    Customers are owned externally; customer_ref and store_ref are their
    identifiers in the remote store. The balance is only ever changed by
    appending a LedgerEntry (see LedgerService.apply), never overwritten.
    """

    customer_ref = models.CharField(_("cliente"), max_length=100, db_index=True)
    store_ref = models.CharField(_("loja"), max_length=100, db_index=True)

    balance = models.IntegerField(
        _("saldo de pontos"),
        default=0,
        help_text=_("Pontos disponíveis para resgate nesta loja"),
    )
    lifetime_earned = models.IntegerField(
        _("pontos ganhos"),
        default=0,
        help_text=_("Total de pontos já ganhos em vendas (nunca decresce)"),
    )
    lifetime_redeemed = models.IntegerField(
        _("pontos resgatados"),
        default=0,
        help_text=_("Total de pontos já usados em descontos"),
    )

    created_at = models.DateTimeField(_("criado em"), auto_now_add=True)
    updated_at = models.DateTimeField(_("atualizado em"), auto_now=True)

    class Meta:
        db_table = "tillman_ledger_account"
        verbose_name = _("conta de pontos")
        verbose_name_plural = _("contas de pontos")
        ordering = ["customer_ref", "store_ref"]
        constraints = [
            models.UniqueConstraint(
                fields=["customer_ref", "store_ref"],
                name="tillman_unique_account_per_store",
            ),
            models.CheckConstraint(
                condition=models.Q(balance__gte=0),
                name="tillman_account_balance_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.customer_ref}@{self.store_ref}: {self.balance}pts"


class LedgerEntry(models.Model):
    """
    Immutable record of one balance change.

    reference is unique: for sale entries it is the sale id, which is what
    makes a replayed sale contribute its delta at most once.
    """

    account = models.ForeignKey(
        LedgerAccount,
        on_delete=models.CASCADE,
        related_name="entries",
        verbose_name=_("conta"),
    )
    reference = models.CharField(
        _("referência"),
        max_length=100,
        unique=True,
        help_text=_("ID da venda ou referência do ajuste"),
    )
    entry_type = models.CharField(
        _("tipo"),
        max_length=20,
        choices=EntryType.choices,
        default=EntryType.SALE,
    )

    points_earned = models.IntegerField(_("pontos ganhos"), default=0)
    points_used = models.IntegerField(_("pontos usados"), default=0)
    delta = models.IntegerField(
        _("variação"),
        help_text=_("Positivo para acúmulo, negativo para resgate líquido"),
    )
    balance_after = models.IntegerField(_("saldo após"))

    description = models.CharField(_("descrição"), max_length=200, blank=True)
    created_at = models.DateTimeField(_("criado em"), auto_now_add=True, db_index=True)
    created_by = models.CharField(_("criado por"), max_length=100, blank=True)

    class Meta:
        db_table = "tillman_ledger_entry"
        verbose_name = _("lançamento de pontos")
        verbose_name_plural = _("lançamentos de pontos")
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["account", "-created_at"], name="tillman_entry_account_idx"),
        ]

    def __str__(self):
        sign = "+" if self.delta > 0 else ""
        return f"{sign}{self.delta}pts — {self.reference}"
