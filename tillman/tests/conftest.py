"""Pytest fixtures for Tillman tests."""

from decimal import Decimal

import pytest

from tillman.adapters.catalog_static import StaticCatalog
from tillman.adapters.outbox_db import DatabaseOutbox
from tillman.conf import DEFAULT_POINTS_CONFIG
from tillman.points import PointsConfig
from tillman.protocols.catalog import Product
from tillman.protocols.sales import Sale, SaleItem
from tillman.services.checkout import Terminal
from tillman.services.ledger import LedgerService
from tillman.tests.fakes import FakeRemote

STORE = "store-1"


@pytest.fixture
def points_config():
    """Default MZN tier table, 1 MZN per point, minimum 10."""
    return PointsConfig.from_dict(DEFAULT_POINTS_CONFIG)


@pytest.fixture
def bread():
    return Product(ref="P-BREAD", barcode="5600000000011", name="Pão", price=Decimal("50.00"))


@pytest.fixture
def rice():
    return Product(ref="P-RICE", barcode="5600000000028", name="Arroz 5kg", price=Decimal("525.00"))


@pytest.fixture
def oil():
    return Product(ref="P-OIL", barcode="5600000000035", name="Óleo 1L", price=Decimal("200.00"))


@pytest.fixture
def catalog(bread, rice, oil):
    return StaticCatalog([bread, rice, oil])


@pytest.fixture
def remote():
    """Online remote store with one known customer."""
    fake = FakeRemote()
    fake.add_customer("CUST-001", "Ana Machava", email="ana@example.com", phone="+258841234567")
    return fake


@pytest.fixture
def outbox(db):
    return DatabaseOutbox()


@pytest.fixture
def terminal(remote, outbox, catalog, points_config):
    """Terminal wired to the fake remote and the database outbox."""
    return Terminal(
        store_ref=STORE,
        cashier_ref="cashier-1",
        remote=remote,
        outbox=outbox,
        catalog=catalog,
        directory=remote,
        points_config=points_config,
    )


@pytest.fixture
def customer_with_points(db, remote):
    """CUST-001 with 150 points at store-1, both locally and remotely."""
    remote.ledger[("CUST-001", STORE)] = 150
    LedgerService.adjust("CUST-001", STORE, 150, "seed:CUST-001", "Saldo inicial")
    return "CUST-001"


@pytest.fixture
def make_sale():
    """Factory for frozen sales of one rice bag (+10 points by default)."""

    def factory(customer_ref="CUST-001", points_earned=10, points_used=0, **kwargs):
        item = SaleItem(
            product_ref="P-RICE",
            product_name="Arroz 5kg",
            quantity=1,
            unit_price=Decimal("525.00"),
            line_total=Decimal("525.00"),
        )
        discount = Decimal(points_used)
        defaults = dict(
            store_ref=STORE,
            cashier_ref="cashier-1",
            customer_ref=customer_ref,
            items=(item,),
            subtotal=Decimal("525.00"),
            discount=discount,
            points_used=points_used,
            points_earned=points_earned,
            total=Decimal("525.00") - discount,
            payment_method="card",
            currency="MZN",
        )
        defaults.update(kwargs)
        return Sale(**defaults)

    return factory
