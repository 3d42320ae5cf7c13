"""
In-process shared store for tests and multi-client simulation.
"""

from __future__ import annotations

from typing import Dict, Optional

from .base import ChangeNotifier


class InMemoryStore(ChangeNotifier):
    """
    Dictionary-backed store that notifies every subscriber after each write.

    Several coordinators can share one instance to behave like clients of
    the same remote table.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        super().__init__()
        self._rows: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._rows.get(key)

    async def upsert(self, key: str, value: str) -> None:
        self._rows[key] = value
        self._notify()

    def snapshot(self) -> Dict[str, str]:
        """Copy of the stored rows."""
        return dict(self._rows)
