"""Connectivity monitor: cached reachability of the remote store."""

import logging
import threading
import time

from tillman.protocols.remote import RemoteBackend
from tillman.services.backends import get_remote_backend
from tillman.signals import connectivity_changed

logger = logging.getLogger(__name__)


class ConnectivityMonitor:
    """
    Probes the remote store at most once per interval.

    Sends connectivity_changed(online=...) on every transition, which
    triggers an outbox replay when the store comes back.
    """

    def __init__(self, remote: RemoteBackend | None = None, interval: float | None = None):
        from tillman.conf import tillman_settings

        self.remote = remote or get_remote_backend()
        self.interval = (
            interval if interval is not None else tillman_settings.CONNECTIVITY_CHECK_INTERVAL
        )
        self._online: bool | None = None
        self._checked_at: float | None = None
        self._lock = threading.Lock()

    @property
    def last_known(self) -> bool | None:
        return self._online

    def is_online(self, force: bool = False) -> bool:
        with self._lock:
            now = time.monotonic()
            fresh = self._checked_at is not None and now - self._checked_at < self.interval
            if fresh and not force:
                return bool(self._online)

            online = bool(self.remote.ping())
            previous = self._online
            self._online = online
            self._checked_at = now

        if previous is not None and previous != online:
            logger.info("Connectivity: remote store %s", "online" if online else "offline")
            connectivity_changed.send(sender=self.__class__, online=online)
        return online
