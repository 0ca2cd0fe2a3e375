"""Static product list implementing CatalogBackend."""

from tillman.protocols.catalog import Product


class StaticCatalog:
    """
    Catalog over a fixed list of products.

    Used as the terminal's local fallback when the remote catalog is
    unreachable. Products are not store-specific here.
    """

    def __init__(self, products: list[Product] | tuple[Product, ...] = ()):
        self._by_barcode = {p.barcode: p for p in products}

    def __len__(self):
        return len(self._by_barcode)

    def get_product_by_barcode(self, barcode: str, store_ref: str) -> Product | None:
        return self._by_barcode.get(barcode)
