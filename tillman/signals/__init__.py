"""
Tillman signals: public event API.

Emitted signals:
- connectivity_changed: Emitted by services.connectivity.ConnectivityMonitor
  (or by the host environment) on transition to/from reachable
- sale_settled: Emitted when a remote commit succeeds (immediate or replayed)
- sale_queued: Emitted when a sale is saved to the offline outbox
- sale_replay_failed: Emitted when a queued sale fails again during sync
- sale_ledger_rejected: Emitted when the local ledger refuses a committed
  sale's delta (the sale itself is kept)
"""

from django.dispatch import Signal

# Connectivity (sent by the host or ConnectivityMonitor)
connectivity_changed = Signal()  # online=bool

# Sale lifecycle (emitted by services)
sale_settled = Signal()  # sale=Sale, replayed=bool
sale_queued = Signal()  # sale=Sale, error=TransientError
sale_replay_failed = Signal()  # sale=Sale, error=TransientError
sale_ledger_rejected = Signal()  # sale=Sale, error=ValidationError
