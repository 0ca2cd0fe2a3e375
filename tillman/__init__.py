"""
Django Tillman - Point of Sale & Loyalty Ledger.

Usage:
    from tillman import Terminal, SyncService
    from tillman.gates import Gates, GateError, GateResult

    terminal = Terminal(store_ref="store-maputo", cashier_ref="cashier-1")
    terminal.scan("5601234567890", quantity=2)
    terminal.identify_customer("ana@example.com")
    result = terminal.checkout("cash", points_to_use=50, cash_received=Decimal("1000"))
    if result.offline:
        show("Venda guardada offline")

    # Later, when the remote store is back
    SyncService.replay()
"""


def __getattr__(name):
    if name in ("Terminal", "CheckoutService", "CheckoutResult"):
        from tillman.services import checkout

        return getattr(checkout, name)
    if name == "LedgerService":
        from tillman.services.ledger import LedgerService

        return LedgerService
    if name == "SyncService":
        from tillman.services.sync import SyncService

        return SyncService
    if name in ("Gates", "GateError", "GateResult"):
        from tillman import gates

        return getattr(gates, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "Terminal",
    "CheckoutService",
    "CheckoutResult",
    "LedgerService",
    "SyncService",
    "Gates",
    "GateError",
    "GateResult",
]
__version__ = "0.1.0"
