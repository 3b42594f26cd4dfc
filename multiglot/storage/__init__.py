"""
Storage abstractions.

- KeyValueStore → string key to JSON value map (settings, history)
- InMemoryStore → tests and embedding
- JsonFileStore → single file on disk
"""

from multiglot.storage.base import KeyValueStore, StorageKeys
from multiglot.storage.local import InMemoryStore, JsonFileStore, create_local_store

__all__ = [
    "KeyValueStore",
    "StorageKeys",
    "InMemoryStore",
    "JsonFileStore",
    "create_local_store",
]
