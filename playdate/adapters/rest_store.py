"""
Key-value store backed by a PostgREST-style HTTP table.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
from typing import Any, Dict, List, Optional

import requests

from ..domain.exceptions import PersistenceError
from .base import PollingStore

logger = logging.getLogger(__name__)


class RestKeyValueStore(PollingStore):
    """
    Client for a table with ``key`` (primary key) and ``value`` text columns.

    Upserts rely on ``Prefer: resolution=merge-duplicates``, so a missing row
    is inserted and an existing one replaced. The table offers no push
    channel here; remote writes are detected with ``poll_changes``.
    """

    def __init__(
        self,
        base_url: str,
        table: str = "playdate_state",
        api_key: Optional[str] = None,
        timeout: float = 10.0,
    ):
        """
        Initialize the REST client.

        Args:
            base_url: REST root, e.g. ``https://xyz.supabase.co/rest/v1``
            table: Table holding one row per collection
            api_key: Optional key sent as ``apikey`` and bearer token
            timeout: Per-request timeout in seconds
        """
        super().__init__()
        self.url = f"{base_url.rstrip('/')}/{table}"
        self.timeout = timeout
        self.headers = {"Content-Type": "application/json"}
        if api_key:
            self.headers["apikey"] = api_key
            self.headers["Authorization"] = f"Bearer {api_key}"

    def _get_rows(self, params: Dict[str, str]) -> List[Dict[str, Any]]:
        try:
            response = requests.get(
                self.url,
                headers=self.headers,
                params=params,
                timeout=self.timeout,
            )
            response.raise_for_status()
            rows = response.json()
        except requests.exceptions.RequestException as e:
            raise PersistenceError(f"Failed to read from {self.url}: {e}") from e
        except ValueError as e:
            raise PersistenceError(f"Invalid JSON response from {self.url}: {e}") from e

        if not isinstance(rows, list):
            raise PersistenceError(f"Unexpected response from {self.url}: {rows!r}")
        return rows

    def _get_sync(self, key: str) -> Optional[str]:
        rows = self._get_rows({"key": f"eq.{key}", "select": "value"})
        if not rows:
            return None
        return rows[0].get("value")

    def _upsert_sync(self, key: str, value: str) -> None:
        headers = dict(self.headers)
        headers["Prefer"] = "resolution=merge-duplicates,return=minimal"
        try:
            response = requests.post(
                self.url,
                headers=headers,
                params={"on_conflict": "key"},
                json={"key": key, "value": value},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise PersistenceError(f"Failed to write '{key}' to {self.url}: {e}") from e

    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._get_sync, key)

    async def upsert(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._upsert_sync, key, value)
        logger.debug("Upserted '%s' to %s", key, self.url)
        self._notify()

    async def _fingerprint(self) -> str:
        rows = await asyncio.to_thread(self._get_rows, {"select": "key,value"})
        encoded = json.dumps(
            sorted((row.get("key"), row.get("value")) for row in rows)
        ).encode("utf-8")
        return hashlib.sha256(encoded).hexdigest()
