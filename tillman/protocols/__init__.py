"""Tillman protocols."""

from tillman.protocols.sales import Sale, SaleItem, SaleStatus
from tillman.protocols.catalog import CatalogBackend, Product
from tillman.protocols.customers import CustomerDirectory, CustomerInfo
from tillman.protocols.remote import RemoteBackend
from tillman.protocols.outbox import OutboxStore

__all__ = [
    # Sales
    "Sale",
    "SaleItem",
    "SaleStatus",
    # Catalog
    "CatalogBackend",
    "Product",
    # Customers
    "CustomerDirectory",
    "CustomerInfo",
    # Remote store
    "RemoteBackend",
    # Offline queue
    "OutboxStore",
]
