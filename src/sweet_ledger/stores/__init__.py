from __future__ import annotations

from typing import Any, Callable, ContextManager, Iterable, Mapping, Protocol

from ..domain import Item

#: Fields a partial update may touch. ``id`` and ``created_at`` never change.
MUTABLE_FIELDS = frozenset({"name", "category", "price", "quantity"})


class ItemStore(Protocol):
    """
    Protocol for the item record store.

    Every write is durable before the call returns. ``get``, ``update`` and
    ``delete`` raise NotFound for an unknown id. ``for_update`` asks the
    store to lock the row until the surrounding ``atomic()`` block ends, where
    the store has rows to lock.
    """
    def get(self, item_id: str, *, for_update: bool = False) -> Item: ...
    def put(self, item: Item) -> None: ...
    def update(self, item_id: str, fields: Mapping[str, Any]) -> Item: ...
    def delete(self, item_id: str) -> None: ...
    def list(self) -> list[Item]: ...
    def find(self, predicate: Callable[[Item], bool]) -> list[Item]: ...
    def atomic(self) -> ContextManager[None]: ...


def newest_first(items: Iterable[Item]) -> list[Item]:
    return sorted(items, key=lambda item: item.created_at, reverse=True)
