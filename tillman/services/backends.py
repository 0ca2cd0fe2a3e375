"""Configured backend lookup."""

from django.utils.module_loading import import_string

from tillman.conf import tillman_settings
from tillman.protocols.outbox import OutboxStore
from tillman.protocols.remote import RemoteBackend


def get_remote_backend() -> RemoteBackend:
    """Instantiate the configured REMOTE_BACKEND."""
    backend_class = import_string(tillman_settings.REMOTE_BACKEND)
    return backend_class()


def get_outbox() -> OutboxStore:
    """Instantiate the configured OUTBOX_BACKEND."""
    backend_class = import_string(tillman_settings.OUTBOX_BACKEND)
    return backend_class()
