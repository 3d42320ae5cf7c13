"""
Change notification shared by all store adapters.
"""

from __future__ import annotations

import abc
import asyncio
import logging
from typing import Callable, List, Optional

from ..domain.exceptions import PersistenceError

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[], None]


class ChangeNotifier:
    """Subscriber bookkeeping for stores that notify after each write."""

    def __init__(self) -> None:
        self._subscribers: List[ChangeCallback] = []

    def subscribe(self, callback: ChangeCallback) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback()


class PollingStore(ChangeNotifier, abc.ABC):
    """
    Store shared with other processes that cannot push change events.

    Subclasses provide a content fingerprint; ``watch`` compares it at a
    fixed interval and notifies subscribers when it moves.
    """

    def __init__(self) -> None:
        super().__init__()
        self._last_fingerprint: Optional[str] = None

    @abc.abstractmethod
    async def _fingerprint(self) -> str:
        """Digest of everything stored, equal digests mean equal contents."""

    async def poll_changes(self) -> bool:
        """
        Compare the store contents with the last poll and notify on change.

        The first poll only records a baseline.

        Returns:
            True if subscribers were notified
        """
        fingerprint = await self._fingerprint()
        previous, self._last_fingerprint = self._last_fingerprint, fingerprint

        if previous is None or previous == fingerprint:
            return False

        logger.debug("Remote store changed, notifying %d subscriber(s)", len(self._subscribers))
        self._notify()
        return True

    async def watch(self, interval_seconds: float) -> None:
        """Poll forever; cancel the task to stop."""
        while True:
            try:
                await self.poll_changes()
            except PersistenceError as exc:
                logger.warning("Polling for remote changes failed: %s", exc)
            await asyncio.sleep(interval_seconds)
