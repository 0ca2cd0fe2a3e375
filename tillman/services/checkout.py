"""Checkout service: freezing, validating and committing sales.

State machine per sale:

    DRAFTING --freeze--> FROZEN --confirm--> SETTLED  (remote commit ok)
        ^                  |                 QUEUED   (remote failed, in outbox)
        +--cancel/invalid--+

Gate failures send the sale back to DRAFTING. Remote failures never do:
the sale goes to the outbox and the local ledger is updated as if it
had settled.
"""

import logging
import threading
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from tillman.cart import Cart, CartLine, CartSnapshot
from tillman.exceptions import NotFoundError, TransientError, ValidationError
from tillman.gates import GateError, Gates
from tillman.points import PointsConfig, SaleTotals, freeze_totals, get_points_config
from tillman.protocols.catalog import CatalogBackend, Product
from tillman.protocols.customers import CustomerDirectory, CustomerInfo
from tillman.protocols.outbox import OutboxStore
from tillman.protocols.remote import RemoteBackend
from tillman.protocols.sales import Sale, SaleItem, SaleStatus
from tillman.services.backends import get_outbox, get_remote_backend
from tillman.services.ledger import LedgerService
from tillman.signals import sale_ledger_rejected, sale_queued, sale_settled

logger = logging.getLogger(__name__)


class CheckoutState(str, Enum):
    DRAFTING = "drafting"
    FROZEN = "frozen"
    QUEUED = "queued"
    SETTLED = "settled"


@dataclass(frozen=True)
class FrozenSale:
    """Totals locked at freeze time, awaiting payment confirmation."""

    customer_ref: str
    snapshot: CartSnapshot
    totals: SaleTotals
    currency: str


@dataclass(frozen=True)
class CheckoutResult:
    """Outcome shown to the operator. offline=True means 'saved offline'."""

    sale: Sale
    offline: bool
    error: TransientError | None = None
    ledger_error: ValidationError | None = None

    @property
    def state(self) -> CheckoutState:
        return CheckoutState.QUEUED if self.offline else CheckoutState.SETTLED

    @property
    def change(self) -> Decimal | None:
        return self.sale.change


class CheckoutService:
    """
    Commits frozen sales to the remote store or the outbox.

    Uses @classmethod for extensibility (consistent with other services).
    """

    @classmethod
    def commit(
        cls,
        sale: Sale,
        remote: RemoteBackend | None = None,
        outbox: OutboxStore | None = None,
    ) -> CheckoutResult:
        """
        Commit a frozen sale.

        The local ledger delta is applied at most once on either branch.
        A sale whose delta the local ledger rejects is still settled or
        queued; the rejection is reported on the result and through
        sale_ledger_rejected.

        Args:
            sale: Sale with frozen totals
            remote: Remote store (default: REMOTE_BACKEND)
            outbox: Offline queue (default: OUTBOX_BACKEND)

        Returns:
            CheckoutResult, offline=True when the sale was queued
        """
        remote = remote or get_remote_backend()
        outbox = outbox or get_outbox()

        try:
            cls.remote_commit(sale, remote)
        except TransientError as exc:
            queued = sale.with_status(SaleStatus.QUEUED)
            # Durable before the ledger is touched
            outbox.append(queued)
            ledger_error = cls._apply_ledger(queued)
            logger.warning("Checkout: sale %s saved offline (%s)", sale.id, exc.code)
            sale_queued.send(sender=cls, sale=queued, error=exc)
            return CheckoutResult(
                sale=queued,
                offline=True,
                error=exc,
                ledger_error=ledger_error,
            )

        settled = sale.with_status(SaleStatus.SETTLED)
        ledger_error = cls._apply_ledger(settled)
        logger.info(
            "Checkout: sale %s settled (+%d/-%d pts)",
            sale.id,
            sale.points_earned,
            sale.points_used,
        )
        sale_settled.send(sender=cls, sale=settled, replayed=False)
        return CheckoutResult(sale=settled, offline=False, ledger_error=ledger_error)

    @classmethod
    def _apply_ledger(cls, sale: Sale) -> ValidationError | None:
        """
        Apply the sale's delta to the local ledger.

        A rejected delta never undoes the sale: the local balance is
        corrected from the remote store on the next customer lookup.
        """
        try:
            LedgerService.apply_sale(sale)
        except ValidationError as exc:
            logger.error(
                "Checkout: ledger rejected sale %s (%s, delta %d)",
                sale.id,
                exc.code,
                sale.ledger_delta,
            )
            sale_ledger_rejected.send(sender=cls, sale=sale, error=exc)
            return exc
        return None

    @classmethod
    def remote_commit(cls, sale: Sale, remote: RemoteBackend) -> None:
        """
        Write a sale and its ledger delta to the remote store.

        Shared by checkout and outbox replay. Any failure surfaces as
        TransientError so the caller can route the sale to the outbox.
        """
        try:
            remote.commit_sale(sale)
            if sale.ledger_delta and not getattr(remote, "folds_ledger_delta", False):
                remote.commit_ledger_delta(
                    sale.customer_ref,
                    sale.store_ref,
                    sale.ledger_delta,
                    sale.id,
                )
        except TransientError:
            raise
        except Exception as exc:
            logger.exception("Checkout: unexpected remote failure for sale %s", sale.id)
            raise TransientError("REMOTE_UNAVAILABLE", detail=str(exc)) from exc


class Terminal:
    """
    One cashier terminal: a single cart and at most one frozen sale.

    Cart mutations, freeze and confirm are serialized. The remote commit
    runs after the terminal is back in DRAFTING, so the next sale can be
    drafted while it is in flight; commits themselves run one at a time
    in confirmation order. Confirmation and customer lookup wait for the
    commit in flight, so they always read a ledger that includes it.
    """

    def __init__(
        self,
        store_ref: str,
        cashier_ref: str,
        remote: RemoteBackend | None = None,
        outbox: OutboxStore | None = None,
        catalog: CatalogBackend | None = None,
        directory: CustomerDirectory | None = None,
        local_catalog: CatalogBackend | None = None,
        points_config: PointsConfig | None = None,
    ):
        self.store_ref = store_ref
        self.cashier_ref = cashier_ref
        self.remote = remote if remote is not None else get_remote_backend()
        self.outbox = outbox if outbox is not None else get_outbox()
        self.catalog = catalog if catalog is not None else self._remote_as(CatalogBackend)
        self.directory = (
            directory if directory is not None else self._remote_as(CustomerDirectory)
        )
        self.local_catalog = local_catalog
        self.points_config = points_config or get_points_config(store_ref)

        self.cart = Cart()
        self.customer: CustomerInfo | None = None
        self.last_result: CheckoutResult | None = None
        self._state = CheckoutState.DRAFTING
        self._frozen: FrozenSale | None = None
        self._lock = threading.RLock()
        self._commit_lock = threading.Lock()

    def _remote_as(self, protocol):
        return self.remote if isinstance(self.remote, protocol) else None

    @property
    def state(self) -> CheckoutState:
        return self._state

    @property
    def frozen(self) -> FrozenSale | None:
        return self._frozen

    # ======================================================================
    # Lookups
    # ======================================================================

    def scan(self, barcode: str, quantity: int = 1) -> CartLine:
        """
        Add the product for barcode to the cart.

        Falls back to the local catalog when the remote one is unreachable.

        Raises:
            NotFoundError: If no catalog knows the barcode
        """
        product = self._find_product(barcode)
        if product is None:
            raise NotFoundError("PRODUCT_NOT_FOUND", barcode=barcode)
        return self.add(product, quantity)

    def _find_product(self, barcode: str) -> Product | None:
        if self.catalog is not None:
            try:
                product = self.catalog.get_product_by_barcode(barcode, self.store_ref)
                if product is not None:
                    return product
            except TransientError:
                if self.local_catalog is None:
                    raise
                logger.info("Checkout: catalog offline, using local products")

        if self.local_catalog is not None:
            return self.local_catalog.get_product_by_barcode(barcode, self.store_ref)
        return None

    def identify_customer(self, identifier: str) -> CustomerInfo:
        """
        Resolve the customer for this sale and refresh the local ledger.

        The local balance becomes the remote balance plus the deltas of
        this customer's sales still waiting in the outbox.

        Raises:
            NotFoundError: If the directory does not know the customer
            TransientError: If the directory is unreachable
        """
        if self.directory is None:
            raise TransientError("REMOTE_UNAVAILABLE", message="No customer directory")

        # A commit in flight would be counted twice: once in the remote
        # balance and again when it applies its local delta
        with self._commit_lock:
            info = self.directory.lookup_customer(identifier)
            if info is None:
                raise NotFoundError("CUSTOMER_NOT_FOUND", identifier=identifier)

            if self.store_ref in info.points_balance:
                pending_delta = sum(
                    sale.ledger_delta
                    for sale in self.outbox.list_pending()
                    if sale.customer_ref == info.ref and sale.store_ref == self.store_ref
                )
                LedgerService.mirror(
                    info.ref,
                    self.store_ref,
                    info.points_balance[self.store_ref],
                    pending_delta,
                )

        self.customer = info
        return info

    def balance(self, customer_ref: str | None = None) -> int:
        """Ledger balance at this store for customer (default: identified one)."""
        ref = customer_ref or (self.customer.ref if self.customer else None)
        if not ref:
            return 0
        return LedgerService.balance(ref, self.store_ref)

    # ======================================================================
    # Cart
    # ======================================================================

    def add(self, product: Product, quantity: int = 1) -> CartLine:
        with self._lock:
            self._ensure_drafting()
            return self.cart.add(product, quantity)

    def update_quantity(self, product_ref: str, quantity: int) -> CartLine | None:
        with self._lock:
            self._ensure_drafting()
            return self.cart.update_quantity(product_ref, quantity)

    def remove(self, product_ref: str) -> None:
        with self._lock:
            self._ensure_drafting()
            self.cart.remove(product_ref)

    def _ensure_drafting(self) -> None:
        if self._state != CheckoutState.DRAFTING:
            raise ValidationError("CHECKOUT_IN_PROGRESS", state=self._state.value)

    # ======================================================================
    # Checkout
    # ======================================================================

    def freeze(self, customer_ref: str | None = None, points_to_use: int = 0) -> FrozenSale:
        """
        Lock the sale totals.

        Runs the tier resolver and the redemption calculator exactly once.

        Raises:
            ValidationError: Empty cart, no customer, not enough points,
                or another sale already frozen
        """
        with self._lock:
            self._ensure_drafting()
            Gates.cart_not_empty(len(self.cart))

            customer_ref = customer_ref or (self.customer.ref if self.customer else None)
            if not customer_ref:
                raise ValidationError("CUSTOMER_REQUIRED")

            Gates.points_available(points_to_use, self.balance(customer_ref))

            self._frozen = FrozenSale(
                customer_ref=customer_ref,
                snapshot=self.cart.snapshot(),
                totals=freeze_totals(self.cart.snapshot(), self.points_config, points_to_use),
                currency=self.points_config.currency,
            )
            self._state = CheckoutState.FROZEN
            return self._frozen

    def cancel(self) -> None:
        """Discard frozen totals and return to drafting. The cart is kept."""
        with self._lock:
            self._frozen = None
            self._state = CheckoutState.DRAFTING

    def confirm(
        self,
        payment_method: str,
        cash_received: Decimal | None = None,
    ) -> CheckoutResult:
        """
        Validate payment and commit the frozen sale.

        Raises:
            ValidationError: Nothing frozen, or a gate failed (the sale
                returns to drafting with its cart intact)
        """
        with self._lock:
            frozen = self._frozen
            if self._state != CheckoutState.FROZEN or frozen is None:
                raise ValidationError("NOT_FROZEN", state=self._state.value)

            totals = frozen.totals
            # Earlier commits must have applied their deltas before G2 reads the balance
            self._commit_lock.acquire()
            try:
                Gates.payment_method(payment_method)
                if payment_method == "cash":
                    Gates.cash_tendered(totals.total, cash_received)
                Gates.points_available(
                    totals.points_used,
                    self.balance(frozen.customer_ref),
                )
                sale = self._build_sale(frozen, payment_method, cash_received)
            except GateError:
                self._commit_lock.release()
                self.cancel()
                raise
            except Exception:
                self._commit_lock.release()
                raise

            self.cart.clear()
            self.customer = None
            self._frozen = None
            self._state = CheckoutState.DRAFTING

        try:
            result = CheckoutService.commit(sale, self.remote, self.outbox)
        finally:
            self._commit_lock.release()

        self.last_result = result
        return result

    def checkout(
        self,
        payment_method: str,
        customer_ref: str | None = None,
        points_to_use: int = 0,
        cash_received: Decimal | None = None,
    ) -> CheckoutResult:
        """Freeze and confirm in one step."""
        self.freeze(customer_ref, points_to_use)
        return self.confirm(payment_method, cash_received)

    def _build_sale(
        self,
        frozen: FrozenSale,
        payment_method: str,
        cash_received: Decimal | None,
    ) -> Sale:
        totals = frozen.totals
        is_cash = payment_method == "cash"
        return Sale(
            store_ref=self.store_ref,
            cashier_ref=self.cashier_ref,
            customer_ref=frozen.customer_ref,
            items=tuple(
                SaleItem(
                    product_ref=line.product_ref,
                    product_name=line.name,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    line_total=line.line_total,
                )
                for line in frozen.snapshot.lines
            ),
            subtotal=totals.subtotal,
            discount=totals.discount,
            points_used=totals.points_used,
            points_earned=totals.points_earned,
            total=totals.total,
            payment_method=payment_method,
            currency=frozen.currency,
            cash_received=cash_received if is_cash else None,
            change=(cash_received - totals.total) if is_cash else None,
        )
