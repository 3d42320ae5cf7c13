"""
Service layer helpers that keep the session in sync with a remote store.
"""

from .codec import CHILDREN_KEY, DATES_KEY
from .sync_coordinator import PollingStoreProtocol, RemoteStoreProtocol, SyncCoordinator

__all__ = ["CHILDREN_KEY", "DATES_KEY", "PollingStoreProtocol", "RemoteStoreProtocol", "SyncCoordinator"]
