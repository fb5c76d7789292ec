from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Any, Callable, Iterator, Mapping

from ..domain import Item
from ..exceptions import InvalidField, NotFound
from . import MUTABLE_FIELDS, newest_first


class MemoryItemStore:
    """
    Thread-safe in-process item store.

    Items are frozen dataclasses, so records handed to callers can never alias
    the stored state. Individual calls are atomic; ``atomic()`` adds nothing on
    top because there is no transaction to roll back. Stock adjustments rely on
    the ledger's per-item lock for their read-check-write sequence.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._items: dict[str, Item] = {}

    def get(self, item_id: str, *, for_update: bool = False) -> Item:
        with self._lock:
            try:
                return self._items[item_id]
            except KeyError:
                raise NotFound(item_id) from None

    def put(self, item: Item) -> None:
        with self._lock:
            self._items[item.id] = item

    def update(self, item_id: str, fields: Mapping[str, Any]) -> Item:
        unknown = set(fields) - MUTABLE_FIELDS
        if unknown:
            raise InvalidField(f"Cannot update fields: {sorted(unknown)}")

        with self._lock:
            current = self.get(item_id)
            updated = replace(current, **fields)
            self._items[item_id] = updated
            return updated

    def delete(self, item_id: str) -> None:
        with self._lock:
            if self._items.pop(item_id, None) is None:
                raise NotFound(item_id)

    def list(self) -> list[Item]:
        with self._lock:
            snapshot = list(self._items.values())
        return newest_first(snapshot)

    def find(self, predicate: Callable[[Item], bool]) -> list[Item]:
        return [item for item in self.list() if predicate(item)]

    @contextmanager
    def atomic(self) -> Iterator[None]:
        yield
