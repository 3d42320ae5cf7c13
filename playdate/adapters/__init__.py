"""
Adapters layer - Remote store implementations.
"""

from .json_file_store import JsonFileStore
from .memory_store import InMemoryStore
from .rest_store import RestKeyValueStore

__all__ = ["JsonFileStore", "InMemoryStore", "RestKeyValueStore"]
