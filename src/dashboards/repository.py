"""
Entity repository -- the storage capability the dashboard service depends on.

Callers receive a repository explicitly; there is no process-wide store.
``InMemoryRepository`` keeps entities in a dict and hands out deep copies so
callers can never mutate stored state behind the repository's back.
"""
from __future__ import annotations

import threading
from typing import Generic, Protocol, TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


class Repository(Protocol[T]):
    def get(self, entity_id: str) -> T | None: ...

    def list(self) -> list[T]: ...

    def upsert(self, entity: T) -> T: ...

    def delete(self, entity_id: str) -> bool: ...


class InMemoryRepository(Generic[T]):
    """Dict-backed repository keyed by the entity's ``id`` attribute."""

    def __init__(self, entities: list[T] | None = None):
        self._items: dict[str, T] = {}
        self._lock = threading.Lock()
        for entity in entities or []:
            self.upsert(entity)

    def get(self, entity_id: str) -> T | None:
        with self._lock:
            entity = self._items.get(entity_id)
            return entity.model_copy(deep=True) if entity is not None else None

    def list(self) -> list[T]:
        """All entities in insertion order."""
        with self._lock:
            return [e.model_copy(deep=True) for e in self._items.values()]

    def upsert(self, entity: T) -> T:
        stored = entity.model_copy(deep=True)
        with self._lock:
            self._items[stored.id] = stored
        return stored.model_copy(deep=True)

    def delete(self, entity_id: str) -> bool:
        with self._lock:
            return self._items.pop(entity_id, None) is not None

    def __len__(self) -> int:
        return len(self._items)
