"""
Keeps the local session mirrored to a shared remote store.

Writes are blind whole-record upserts keyed by collection name, so the last
completed write wins. Any remote change notification triggers a full reload
that replaces local state, including local edits that were not saved yet.
That loss is accepted behaviour; a per-slot merge would be the natural next
step but changes what users observe.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional, Protocol, Set, runtime_checkable

from ..domain.date_window import DEFAULT_WINDOW_DAYS, DateWindow
from ..domain.exceptions import PersistenceError
from ..domain.models import SaveStatus
from ..domain.session import PlaydateSession
from .codec import (
    CHILDREN_KEY,
    COLLECTIONS,
    DATES_KEY,
    decode_dates,
    decode_participants,
    encode_dates,
    encode_participants,
)

logger = logging.getLogger(__name__)

DEFAULT_STATUS_RESET_SECONDS = 2.0
DEFAULT_POLL_INTERVAL_SECONDS = 5.0

StatusListener = Callable[[SaveStatus], None]


class RemoteStoreProtocol(Protocol):
    """Protocol describing the shared key-value store needed by the coordinator."""

    async def get(self, key: str) -> Optional[str]:
        """Return the JSON-encoded value for ``key`` or None if absent."""

    async def upsert(self, key: str, value: str) -> None:
        """Insert or replace the single row stored under ``key``."""

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Call ``callback`` after any write; return a function that unsubscribes."""


@runtime_checkable
class PollingStoreProtocol(Protocol):
    """Store that only learns about other clients' writes by polling."""

    async def poll_changes(self) -> bool:
        """Notify subscribers if the contents changed since the last poll."""

    async def watch(self, interval_seconds: float) -> None:
        """Call ``poll_changes`` every ``interval_seconds`` until cancelled."""


class SyncCoordinator:
    """
    Persists the session and reloads it when the remote store changes.

    Save status moves IDLE -> SAVING -> SAVED -> IDLE (after
    ``status_reset_seconds``), or SAVING -> IDLE straight away on failure.
    While several saves overlap the status stays SAVING until the last one
    finishes.

    Stores that cannot push changes are polled every
    ``poll_interval_seconds`` while the coordinator is started.
    """

    def __init__(
        self,
        session: PlaydateSession,
        store: RemoteStoreProtocol,
        status_reset_seconds: float = DEFAULT_STATUS_RESET_SECONDS,
        window_days: int = DEFAULT_WINDOW_DAYS,
        timezone: str = "local",
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        self.session = session
        self._store = store
        self._status_reset_seconds = status_reset_seconds
        self._window_days = window_days
        self._timezone = timezone
        self._poll_interval_seconds = poll_interval_seconds

        self._status = SaveStatus.IDLE
        self._status_listeners: List[StatusListener] = []
        self._reset_handle: Optional[asyncio.TimerHandle] = None
        self._saves_in_flight = 0
        self._reload_tasks: Set[asyncio.Task] = set()
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._watch_task: Optional[asyncio.Task] = None

    async def __aenter__(self) -> "SyncCoordinator":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def status(self) -> SaveStatus:
        return self._status

    def add_status_listener(self, listener: StatusListener) -> Callable[[], None]:
        """Register a callback for status changes; returns a remover."""
        self._status_listeners.append(listener)

        def remove() -> None:
            if listener in self._status_listeners:
                self._status_listeners.remove(listener)

        return remove

    def _set_status(self, status: SaveStatus) -> None:
        if status is self._status:
            return
        self._status = status
        for listener in list(self._status_listeners):
            listener(status)

    def _cancel_reset(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None

    def _reset_status(self) -> None:
        self._reset_handle = None
        self._set_status(SaveStatus.IDLE)

    async def start(self) -> None:
        """Load the remote snapshot and start listening for remote changes."""
        polling = isinstance(self._store, PollingStoreProtocol)
        if polling:
            # Baseline before loading, so a write landing during the load is still reported.
            await self._store.poll_changes()

        await self.load_all()
        if self._unsubscribe is None:
            self._unsubscribe = self._store.subscribe(self._on_remote_change)

        if polling and self._watch_task is None:
            logger.debug("Polling store for remote changes every %ss", self._poll_interval_seconds)
            self._watch_task = asyncio.get_running_loop().create_task(
                self._store.watch(self._poll_interval_seconds)
            )

    async def close(self) -> None:
        """Stop listening, drop pending reloads and timers."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        if self._watch_task is not None:
            self._watch_task.cancel()
            await asyncio.gather(self._watch_task, return_exceptions=True)
            self._watch_task = None

        self._cancel_reset()
        tasks = list(self._reload_tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._reload_tasks.clear()
        self._set_status(SaveStatus.IDLE)

    async def save(self, collection: str) -> None:
        """
        Write the current local snapshot of one collection.

        Args:
            collection: ``"children"`` or ``"dates"``

        Raises:
            PersistenceError: If the remote write fails; local state is kept
        """
        if collection == CHILDREN_KEY:
            payload = encode_participants(self.session.participants.all())
        elif collection == DATES_KEY:
            payload = encode_dates(self.session.window)
        else:
            raise ValueError(f"Unknown collection {collection!r}, expected one of {COLLECTIONS}")

        self._cancel_reset()
        self._saves_in_flight += 1
        self._set_status(SaveStatus.SAVING)

        try:
            await self._store.upsert(collection, payload)
        except PersistenceError:
            logger.warning("Saving '%s' failed; local changes are not persisted", collection)
            if self._saves_in_flight == 1:
                self._set_status(SaveStatus.IDLE)
            raise
        finally:
            self._saves_in_flight -= 1

        logger.debug("Saved '%s' (%d bytes)", collection, len(payload))
        if self._saves_in_flight > 0:
            return

        self._set_status(SaveStatus.SAVED)
        self._cancel_reset()
        self._reset_handle = asyncio.get_running_loop().call_later(
            self._status_reset_seconds, self._reset_status
        )

    async def save_all(self) -> None:
        for collection in COLLECTIONS:
            await self.save(collection)

    async def load_all(self) -> None:
        """
        Replace local participants and date window with the remote snapshot.

        On the very first run there is no ``dates`` record yet; the default
        window is used and written back.

        Raises:
            PersistenceError: If a record cannot be read or decoded
        """
        raw_children = await self._store.get(CHILDREN_KEY)
        raw_dates = await self._store.get(DATES_KEY)

        participants = decode_participants(raw_children)
        window = decode_dates(raw_dates)

        self.session.participants.replace_all(participants)

        if window is None:
            window = DateWindow.default(days=self._window_days, timezone=self._timezone)
            self.session.set_window(window)
            logger.info("No date window stored yet, initialising %r", window)
            try:
                await self._store.upsert(DATES_KEY, encode_dates(window))
            except PersistenceError as exc:
                logger.warning("Could not persist default date window: %s", exc)
        else:
            self.session.set_window(window)

        logger.debug("Loaded %d participant(s), %r", len(participants), window)

    def _on_remote_change(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Remote change notification outside an event loop ignored")
            return

        task = loop.create_task(self._reload())
        self._reload_tasks.add(task)
        task.add_done_callback(self._reload_tasks.discard)

    async def _reload(self) -> None:
        try:
            await self.load_all()
        except PersistenceError as exc:
            logger.warning("Reload after remote change failed: %s", exc)

    async def settle(self) -> None:
        """Wait until every reload triggered by a notification has finished."""
        while True:
            pending = [task for task in self._reload_tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending)
