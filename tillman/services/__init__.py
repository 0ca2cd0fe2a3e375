"""Tillman services.

- ledger: LedgerService (local points balances)
- checkout: CheckoutService, Terminal (freeze, confirm, commit)
- sync: SyncService (outbox replay)
- connectivity: ConnectivityMonitor
- backends: configured remote store and outbox
"""
