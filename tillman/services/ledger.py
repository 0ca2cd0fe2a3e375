"""Ledger service: delta-only points balances per customer and store."""

import logging
import uuid

from django.db import IntegrityError, transaction
from django.db.models import Sum

from tillman.exceptions import ValidationError
from tillman.models import EntryType, LedgerAccount, LedgerEntry
from tillman.protocols.sales import Sale

logger = logging.getLogger(__name__)


class LedgerService:
    """
    Service for points ledger operations.

    Uses @classmethod for extensibility (consistent with other services).
    All balance mutations use transaction.atomic() and a row lock. Every
    mutation is an appended LedgerEntry with a unique reference, so a
    given sale id contributes its delta at most once.
    """

    @classmethod
    def apply(
        cls,
        customer_ref: str,
        store_ref: str,
        delta: int,
        reference: str,
        points_earned: int = 0,
        points_used: int = 0,
        entry_type: str = EntryType.SALE,
        description: str = "",
        created_by: str = "",
    ) -> LedgerEntry:
        """
        Adjust a store balance by delta, at most once per reference.

        Args:
            customer_ref: Customer identifier
            store_ref: Store identifier
            delta: Points to add (negative for net redemption)
            reference: Idempotency key (the sale id for sale entries)
            points_earned: Earned part of delta, for lifetime totals
            points_used: Redeemed part of delta, for lifetime totals
            entry_type: EntryType value
            description: Reason for the change
            created_by: Cashier or operator

        Returns:
            The LedgerEntry for reference (the existing one on reapplication)

        Raises:
            ValidationError: If the balance would become negative
        """
        existing = cls._get_entry(reference)
        if existing:
            logger.debug("Ledger: %s already applied, skipping", reference)
            return existing

        try:
            with transaction.atomic():
                account = cls._get_account_for_update(customer_ref, store_ref)

                new_balance = account.balance + delta
                if new_balance < 0:
                    raise ValidationError(
                        "LEDGER_NEGATIVE_BALANCE",
                        customer_ref=customer_ref,
                        store_ref=store_ref,
                        balance=account.balance,
                        delta=delta,
                    )

                account.balance = new_balance
                account.lifetime_earned += points_earned
                account.lifetime_redeemed += points_used
                account.save(update_fields=[
                    "balance",
                    "lifetime_earned",
                    "lifetime_redeemed",
                    "updated_at",
                ])

                entry = LedgerEntry.objects.create(
                    account=account,
                    reference=reference,
                    entry_type=entry_type,
                    points_earned=points_earned,
                    points_used=points_used,
                    delta=delta,
                    balance_after=new_balance,
                    description=description,
                    created_by=created_by,
                )
        except IntegrityError:
            # Lost a race on the unique reference: the other writer applied it
            existing = cls._get_entry(reference)
            if existing:
                return existing
            raise

        return entry

    @classmethod
    def apply_sale(cls, sale: Sale) -> LedgerEntry:
        """Apply a frozen sale's earn/redeem delta (idempotent by sale id)."""
        return cls.apply(
            customer_ref=sale.customer_ref,
            store_ref=sale.store_ref,
            delta=sale.ledger_delta,
            reference=sale.id,
            points_earned=sale.points_earned,
            points_used=sale.points_used,
            entry_type=EntryType.SALE,
            description=f"Venda {sale.id[:8]}",
            created_by=sale.cashier_ref,
        )

    @classmethod
    def adjust(
        cls,
        customer_ref: str,
        store_ref: str,
        delta: int,
        reference: str,
        description: str,
        created_by: str = "",
    ) -> LedgerEntry:
        """Operator correction. reference must be unique like a sale id."""
        return cls.apply(
            customer_ref,
            store_ref,
            delta,
            reference,
            entry_type=EntryType.ADJUST,
            description=description,
            created_by=created_by,
        )

    @classmethod
    def mirror(
        cls,
        customer_ref: str,
        store_ref: str,
        remote_balance: int,
        pending_delta: int = 0,
    ) -> LedgerEntry | None:
        """
        Bring the local balance in line with the remote store.

        The target is the remote balance plus the deltas of sales still
        queued locally (the remote has not seen them yet). The difference
        is recorded as a MIRROR entry; nothing is written when already equal.
        """
        target = max(0, remote_balance + pending_delta)
        current = cls.balance(customer_ref, store_ref)
        if target == current:
            return None

        logger.info(
            "Ledger: mirroring %s@%s from %d to %d",
            customer_ref,
            store_ref,
            current,
            target,
        )
        return cls.apply(
            customer_ref,
            store_ref,
            target - current,
            f"mirror:{uuid.uuid4()}",
            entry_type=EntryType.MIRROR,
            description="Saldo remoto",
        )

    @classmethod
    def balance(cls, customer_ref: str, store_ref: str) -> int:
        """Current store balance. Returns 0 if unknown."""
        return (
            LedgerAccount.objects.filter(customer_ref=customer_ref, store_ref=store_ref)
            .values_list("balance", flat=True)
            .first()
        ) or 0

    @classmethod
    def balances(cls, customer_ref: str) -> dict[str, int]:
        """Balances of a customer keyed by store."""
        return dict(
            LedgerAccount.objects.filter(customer_ref=customer_ref).values_list(
                "store_ref", "balance"
            )
        )

    @classmethod
    def total_balance(cls, customer_ref: str) -> int:
        """Balance across all stores."""
        total = LedgerAccount.objects.filter(customer_ref=customer_ref).aggregate(
            total=Sum("balance")
        )["total"]
        return total or 0

    @classmethod
    def has_applied(cls, reference: str) -> bool:
        return LedgerEntry.objects.filter(reference=reference).exists()

    @classmethod
    def get_entries(
        cls,
        customer_ref: str,
        store_ref: str | None = None,
        limit: int = 50,
    ) -> list[LedgerEntry]:
        """Entry history for a customer, most recent first."""
        qs = LedgerEntry.objects.filter(account__customer_ref=customer_ref)
        if store_ref:
            qs = qs.filter(account__store_ref=store_ref)
        return list(qs.select_related("account")[:limit])

    @classmethod
    def _get_entry(cls, reference: str) -> LedgerEntry | None:
        return LedgerEntry.objects.select_related("account").filter(reference=reference).first()

    @classmethod
    def _get_account_for_update(cls, customer_ref: str, store_ref: str) -> LedgerAccount:
        """
        Get (or open) the account with a row-level lock.

        MUST be called inside transaction.atomic().
        """
        account, _ = LedgerAccount.objects.get_or_create(
            customer_ref=customer_ref,
            store_ref=store_ref,
        )
        return LedgerAccount.objects.select_for_update().get(pk=account.pk)
