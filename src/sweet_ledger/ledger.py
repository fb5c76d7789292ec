"""
Stock ledger: the only writer of an item's ``quantity``.

Each operation reads the current quantity, validates the change and writes the
new value as one unit, serialized per item by a lock keyed "item:<id>". Two
purchases racing for the last units of an item therefore cannot both read the
same starting quantity: the second one to enter the critical section sees the
reduced stock and fails with InsufficientStock. Operations on different items
take different locks and never wait on each other.

Input validation happens before the lock is taken. Every error path leaves the
stored quantity untouched.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from .api import LockBackend
from .conf import get_setting
from .decorators import serialized
from .domain import Item, clean_amount, clean_quantity
from .exceptions import InsufficientStock
from .stores import ItemStore

logger = logging.getLogger(__name__)

#: Default for ``lock_timeout``: read the LOCK_TIMEOUT setting. None blocks.
USE_SETTING: Any = object()


class StockLedger:
    """
    Parameters
    ----------
    store : ItemStore
        Store owning the item records.
    lock_backend : LockBackend
        Provides per-item mutual exclusion. Must be shared by every ledger
        that writes to the same store.
    lock_timeout : float | None
        Seconds to wait for an item's lock before raising LockAcquireTimeout.
        Defaults to the ``LOCK_TIMEOUT`` setting.
    """

    def __init__(
        self,
        store: ItemStore,
        lock_backend: LockBackend,
        lock_timeout: float | None = USE_SETTING,
    ) -> None:
        self.store = store
        self.lock_backend = lock_backend
        self.lock_timeout = (
            get_setting("LOCK_TIMEOUT") if lock_timeout is USE_SETTING else lock_timeout
        )

    def initialize(self, item_id: str, quantity: int) -> Item:
        """Set the opening stock of a newly created item."""
        quantity = clean_quantity(quantity)
        return self._write(item_id, "initialize", lambda current: quantity)

    def decrement(self, item_id: str, amount: int) -> Item:
        """
        Remove ``amount`` units (a purchase).

        Raises InvalidAmount, NotFound, or InsufficientStock when the item
        holds fewer than ``amount`` units.
        """
        amount = clean_amount(amount)

        def take(current: int) -> int:
            if current < amount:
                raise InsufficientStock(item_id, requested=amount, available=current)
            return current - amount

        return self._write(item_id, "decrement", take)

    def increment(self, item_id: str, amount: int) -> Item:
        """Add ``amount`` units (a restock). There is no upper bound."""
        amount = clean_amount(amount)
        return self._write(item_id, "increment", lambda current: current + amount)

    def set_quantity(
        self,
        item_id: str,
        quantity: int,
        other_fields: Mapping[str, Any] | None = None,
    ) -> Item:
        """
        Overwrite the stock level outright (an admin correction).

        The new value does not depend on the old one, but the write still
        takes the item's lock so it lands between purchases, never inside one.
        ``other_fields`` (already validated) are written in the same update.
        """
        quantity = clean_quantity(quantity)
        return self._write(
            item_id, "set_quantity", lambda current: quantity, other_fields
        )

    @serialized(key="item:{item_id}")
    def retire(self, item_id: str) -> None:
        """
        Delete the item. Later ledger calls on its id raise NotFound.
        """
        with self.store.atomic():
            self.store.delete(item_id)
        logger.debug("retired item=%s", item_id)

    @serialized(key="item:{item_id}")
    def _write(
        self,
        item_id: str,
        operation: str,
        compute: Callable[[int], int],
        other_fields: Mapping[str, Any] | None = None,
    ) -> Item:
        with self.store.atomic():
            before = self.store.get(item_id, for_update=True)
            quantity = compute(before.quantity)
            after = self.store.update(
                item_id, {**(other_fields or {}), "quantity": quantity}
            )

        logger.debug(
            "%s item=%s quantity %d -> %d",
            operation, item_id, before.quantity, after.quantity,
        )
        return after
