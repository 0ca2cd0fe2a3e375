"""HTTP adapter for the remote store (sales, ledger, catalog, customers)."""

import logging
from decimal import Decimal
from urllib.parse import quote

import httpx

from tillman.exceptions import TransientError
from tillman.protocols.catalog import Product
from tillman.protocols.customers import CustomerInfo
from tillman.protocols.sales import Sale

logger = logging.getLogger(__name__)


class HttpRemoteBackend:
    """
    Implements RemoteBackend, CatalogBackend and CustomerDirectory over HTTP.

    Writes carry an Idempotency-Key header with the sale id; the server
    answers 409 for a sale it already has, which counts as success.

    Configuration in settings.py:
        TILLMAN = {
            "REMOTE_BACKEND": "tillman.adapters.http_remote.HttpRemoteBackend",
            "REMOTE_BASE_URL": "https://hq.example.com/api",
            "REMOTE_API_KEY": "...",
            "REMOTE_TIMEOUT_SECONDS": 10,
        }
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        folds_ledger_delta: bool = False,
        transport: httpx.BaseTransport | None = None,
    ):
        from tillman.conf import tillman_settings

        self.base_url = (base_url or tillman_settings.REMOTE_BASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else tillman_settings.REMOTE_API_KEY
        self.timeout = timeout if timeout is not None else tillman_settings.REMOTE_TIMEOUT_SECONDS
        self.folds_ledger_delta = folds_ledger_delta
        self._transport = transport
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {"Content-Type": "application/json"}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers=headers,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            self._client.close()
            self._client = None

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Send a request, translating transport failures to TransientError."""
        if not self.base_url:
            raise TransientError("REMOTE_UNAVAILABLE", message="Remote store not configured")
        try:
            return self._get_client().request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise TransientError("REMOTE_TIMEOUT", path=path, detail=str(e)) from e
        except httpx.HTTPError as e:
            raise TransientError("REMOTE_UNAVAILABLE", path=path, detail=str(e)) from e

    @staticmethod
    def _raise_for_status(response: httpx.Response, path: str) -> None:
        if response.status_code >= 500:
            raise TransientError(
                "REMOTE_UNAVAILABLE",
                path=path,
                status=response.status_code,
            )
        if response.status_code >= 400:
            raise TransientError(
                "REMOTE_REJECTED",
                path=path,
                status=response.status_code,
                detail=response.text[:200],
            )

    # ======================================================================
    # RemoteBackend
    # ======================================================================

    def commit_sale(self, sale: Sale) -> None:
        path = "/purchases"
        response = self._request(
            "POST",
            path,
            json=sale.as_dict(),
            headers={"Idempotency-Key": sale.id},
        )
        if response.status_code == 409:
            logger.debug("Remote: sale %s already committed", sale.id)
            return
        self._raise_for_status(response, path)

    def commit_ledger_delta(
        self,
        customer_ref: str,
        store_ref: str,
        delta: int,
        sale_ref: str,
    ) -> None:
        path = "/points/ledger"
        response = self._request(
            "POST",
            path,
            json={
                "customerId": customer_ref,
                "storeId": store_ref,
                "delta": delta,
                "saleId": sale_ref,
            },
            headers={"Idempotency-Key": f"ledger:{sale_ref}"},
        )
        if response.status_code == 409:
            return
        self._raise_for_status(response, path)

    def ping(self) -> bool:
        try:
            response = self._request("HEAD", "/")
        except TransientError:
            return False
        # A bare API root may answer 404 and still be reachable
        return response.is_success or response.status_code == 404

    # ======================================================================
    # CatalogBackend
    # ======================================================================

    def get_product_by_barcode(self, barcode: str, store_ref: str) -> Product | None:
        path = f"/products/barcode/{quote(barcode, safe='')}"
        response = self._request("GET", path, params={"storeId": store_ref})
        if response.status_code == 404:
            return None
        self._raise_for_status(response, path)

        data = response.json()
        if not data:
            return None

        from tillman.conf import tillman_settings

        return Product(
            ref=str(data["id"]),
            barcode=data.get("barcode", barcode),
            name=data.get("name", ""),
            price=Decimal(str(data["price"])),
            currency=data.get("currency", tillman_settings.DEFAULT_CURRENCY),
        )

    # ======================================================================
    # CustomerDirectory
    # ======================================================================

    def lookup_customer(self, identifier: str) -> CustomerInfo | None:
        path = self._customer_path(identifier)
        response = self._request("GET", path)
        if response.status_code == 404:
            return None
        self._raise_for_status(response, path)

        data = response.json()
        if not data:
            return None
        return CustomerInfo(
            ref=str(data["id"]),
            name=data.get("name", ""),
            email=data.get("email", ""),
            phone=data.get("phone", ""),
            points_balance={
                store: int(points)
                for store, points in (data.get("pointsBalance") or {}).items()
            },
        )

    @staticmethod
    def _customer_path(identifier: str) -> str:
        """Customers are looked up by email, phone or id."""
        value = identifier.strip()
        if "@" in value:
            return f"/customers/email/{quote(value, safe='')}"
        digits = value.lstrip("+").replace(" ", "")
        if digits.isdigit() and len(digits) >= 7:
            return f"/customers/phone/{quote(value, safe='')}"
        return f"/customers/{quote(value, safe='')}"
