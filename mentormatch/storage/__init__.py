"""Storage module: the person store interface and its in-memory implementation."""

from mentormatch.storage.store import InMemoryPersonStore, PersonStore

__all__ = ["InMemoryPersonStore", "PersonStore"]
