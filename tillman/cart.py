"""Cart aggregator: the working order on a terminal.

In-memory only: no network, no persistence. Lines merge by product,
and every mutation leaves the snapshot consistent.
"""

from dataclasses import dataclass
from decimal import Decimal

from tillman.exceptions import ValidationError
from tillman.protocols.catalog import Product


@dataclass
class CartLine:
    """A product in the cart with the unit price captured at add-time."""

    product_ref: str
    name: str
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class CartSnapshot:
    """Immutable view of the cart used to freeze a sale."""

    lines: tuple[CartLine, ...]
    subtotal: Decimal

    @property
    def is_empty(self) -> bool:
        return not self.lines


class Cart:
    """Scanned/selected line items of the sale being drafted."""

    def __init__(self):
        self._lines: dict[str, CartLine] = {}

    def __len__(self):
        return len(self._lines)

    def __iter__(self):
        return iter(list(self._lines.values()))

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        """Total units across all lines."""
        return sum(line.quantity for line in self._lines.values())

    @property
    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self._lines.values()), Decimal("0"))

    def get(self, product_ref: str) -> CartLine | None:
        return self._lines.get(product_ref)

    def add(self, product: Product, quantity: int = 1) -> CartLine:
        """Add product, merging with an existing line for the same product."""
        if quantity <= 0:
            raise ValidationError("INVALID_QUANTITY", quantity=quantity)

        line = self._lines.get(product.ref)
        if line:
            line.quantity += quantity
            return line

        line = CartLine(
            product_ref=product.ref,
            name=product.name,
            quantity=quantity,
            unit_price=product.price,
        )
        self._lines[product.ref] = line
        return line

    def update_quantity(self, product_ref: str, quantity: int) -> CartLine | None:
        """Set quantity; zero or less removes the line."""
        if quantity <= 0:
            self.remove(product_ref)
            return None

        line = self._lines.get(product_ref)
        if line:
            line.quantity = quantity
        return line

    def remove(self, product_ref: str) -> None:
        self._lines.pop(product_ref, None)

    def clear(self) -> None:
        self._lines.clear()

    def snapshot(self) -> CartSnapshot:
        lines = tuple(
            CartLine(
                product_ref=line.product_ref,
                name=line.name,
                quantity=line.quantity,
                unit_price=line.unit_price,
            )
            for line in self._lines.values()
        )
        return CartSnapshot(lines=lines, subtotal=self.subtotal)
