"""
Local JSON files acting as the shared store, used by the command line.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import os
import re
from pathlib import Path
from typing import Optional

from ..domain.exceptions import PersistenceError
from .base import PollingStore

logger = logging.getLogger(__name__)

KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class JsonFileStore(PollingStore):
    """
    Keeps each collection in its own file, ``<directory>/<key>.json``.

    A write replaces one file atomically and never rewrites another key, so
    concurrent writers of different collections cannot undo each other.
    Writes made by other processes are picked up by ``poll_changes``.
    """

    def __init__(self, directory: Path):
        super().__init__()
        self.directory = Path(directory).expanduser()

    def _path_for(self, key: str) -> Path:
        if not KEY_PATTERN.match(key):
            raise ValueError(f"Invalid store key {key!r}")
        return self.directory / f"{key}.json"

    def _read(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Could not read store file {path}: {exc}") from exc

    def _write(self, key: str, value: str) -> None:
        path = self._path_for(key)
        tmp_path = path.with_suffix(f".{os.getpid()}.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as file_handle:
                file_handle.write(value)
            os.replace(tmp_path, path)
        except OSError as exc:
            raise PersistenceError(f"Could not write store file {path}: {exc}") from exc

    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._read, key)

    async def upsert(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, key, value)
        logger.debug("Wrote '%s' to %s", key, self.directory)
        self._notify()

    async def _fingerprint(self) -> str:
        def digest() -> str:
            sha = hashlib.sha256()
            if not self.directory.is_dir():
                return sha.hexdigest()
            try:
                for path in sorted(self.directory.glob("*.json")):
                    sha.update(path.name.encode("utf-8"))
                    sha.update(b"\0")
                    sha.update(path.read_bytes())
                    sha.update(b"\0")
            except OSError as exc:
                raise PersistenceError(f"Could not read store directory {self.directory}: {exc}") from exc
            return sha.hexdigest()

        return await asyncio.to_thread(digest)
