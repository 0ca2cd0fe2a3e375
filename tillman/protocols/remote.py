"""Remote store protocol: where sales are committed."""

from typing import Protocol, runtime_checkable

from tillman.protocols.sales import Sale


@runtime_checkable
class RemoteBackend(Protocol):
    """
    Protocol for the remote store.

    Every method raises TransientError on network failure, timeout or
    remote rejection. Both writes must be idempotent keyed by sale id:
    submitting the same sale twice must not double-apply the remote
    ledger delta.

    Backends that apply the ledger delta inside commit_sale set
    folds_ledger_delta = True and commit_ledger_delta is skipped.

    Configuration in settings.py:
        TILLMAN = {
            "REMOTE_BACKEND": "tillman.adapters.http_remote.HttpRemoteBackend",
        }
    """

    folds_ledger_delta: bool

    def commit_sale(self, sale: Sale) -> None:
        """Persist a sale with its frozen totals."""
        ...

    def commit_ledger_delta(
        self,
        customer_ref: str,
        store_ref: str,
        delta: int,
        sale_ref: str,
    ) -> None:
        """Apply a sale's points delta to the remote ledger."""
        ...

    def ping(self) -> bool:
        """Return True if the remote store is reachable."""
        ...
