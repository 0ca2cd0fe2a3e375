"""Catalog protocol: product lookups owned by the store catalog."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class Product:
    """Catalog product as seen by the terminal."""

    ref: str
    barcode: str
    name: str
    price: Decimal
    currency: str = "MZN"


@runtime_checkable
class CatalogBackend(Protocol):
    """
    Protocol for product lookups.

    Implemented by adapters/http_remote.py. Raises TransientError when the
    catalog cannot be reached.
    """

    def get_product_by_barcode(self, barcode: str, store_ref: str) -> Product | None:
        """Return the product for barcode in store, or None if unknown."""
        ...
