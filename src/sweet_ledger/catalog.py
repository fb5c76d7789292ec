"""
Catalog services: read-only search and the admin write paths.

Admin operations take the caller's resolved role as their first argument and
check it before touching the store. Non-quantity fields are written straight
to the store; every quantity change goes through the StockLedger.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from .domain import (
    Item,
    Role,
    clean_price,
    clean_quantity,
    clean_text,
    require_role,
)
from .exceptions import InvalidField
from .ledger import StockLedger
from .stores import MUTABLE_FIELDS, ItemStore

logger = logging.getLogger(__name__)

_FILTER_ALIASES = {
    "name": "name",
    "category": "category",
    "min_price": "min_price",
    "minPrice": "min_price",
    "max_price": "max_price",
    "maxPrice": "max_price",
}


def _bound(option: str, value: Any) -> Decimal:
    if isinstance(value, bool):
        raise InvalidField(f"{option} must be a number")
    try:
        bound = Decimal(str(value))
    except InvalidOperation as e:
        raise InvalidField(f"{option} must be a number, got {value!r}") from e
    if not bound.is_finite():
        raise InvalidField(f"{option} must be finite")
    return bound


@dataclass(frozen=True)
class SearchFilter:
    """
    Catalog search options, combined with AND. ``None`` means unconstrained.

    ``name`` and ``category`` are case-insensitive substring matches; the
    price bounds are inclusive.
    """

    name: str | None = None
    category: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "SearchFilter":
        """
        Build a filter from request-style options.

        Accepts ``minPrice``/``maxPrice`` as aliases of the snake_case keys.
        Empty strings and ``None`` are treated as absent.
        """
        values: dict[str, Any] = {}
        for key, value in options.items():
            if key not in _FILTER_ALIASES:
                raise InvalidField(f"Unknown search option: {key!r}")
            if value is None or value == "":
                continue
            field = _FILTER_ALIASES[key]
            if field in ("min_price", "max_price"):
                value = _bound(key, value)
            elif not isinstance(value, str):
                raise InvalidField(f"{key} must be a string")
            values[field] = value
        return cls(**values)

    def matches(self, item: Item) -> bool:
        if self.name is not None and self.name.casefold() not in item.name.casefold():
            return False
        if (
            self.category is not None
            and self.category.casefold() not in item.category.casefold()
        ):
            return False
        if self.min_price is not None and item.price < self.min_price:
            return False
        if self.max_price is not None and item.price > self.max_price:
            return False
        return True


class CatalogQueryService:
    def __init__(self, store: ItemStore) -> None:
        self.store = store

    def list_items(self) -> list[Item]:
        """All items, newest first."""
        return self.store.list()

    def get_item(self, item_id: str) -> Item:
        return self.store.get(item_id)

    def search(
        self, options: SearchFilter | Mapping[str, Any] | None = None
    ) -> list[Item]:
        """
        Items matching every given option, newest first.

        An empty result is a normal answer, not an error.
        """
        if options is None:
            search_filter = SearchFilter()
        elif isinstance(options, SearchFilter):
            search_filter = options
        else:
            search_filter = SearchFilter.from_mapping(options)
        return self.store.find(search_filter.matches)


class CatalogAdminService:
    """
    Create, update and delete catalog items, and route stock changes to the
    ledger.

    ``create_item``, ``update_item``, ``delete_item`` and ``restock`` require
    the ADMIN role; ``purchase`` is open to any authenticated role.
    """

    def __init__(self, store: ItemStore, ledger: StockLedger) -> None:
        self.store = store
        self.ledger = ledger

    def create_item(self, role: Role | str | None, fields: Mapping[str, Any]) -> Item:
        require_role(role, Role.ADMIN)
        _reject_unknown(fields)
        for required in ("name", "category", "price", "quantity"):
            if required not in fields:
                raise InvalidField(f"{required} is required")

        name = clean_text("name", fields["name"])
        category = clean_text("category", fields["category"])
        price = clean_price(fields["price"])
        quantity = clean_quantity(fields["quantity"])

        item = Item(
            id=str(uuid.uuid4()),
            name=name,
            category=category,
            price=price,
            quantity=0,
            created_at=datetime.now(timezone.utc),
        )
        with self.store.atomic():
            self.store.put(item)
            created = self.ledger.initialize(item.id, quantity)

        logger.debug("created item=%s name=%r quantity=%d", created.id, created.name, quantity)
        return created

    def update_item(
        self,
        role: Role | str | None,
        item_id: str,
        fields: Mapping[str, Any],
    ) -> Item:
        """
        Apply only the given fields.

        A ``quantity`` here replaces the stock level outright instead of
        adjusting it; use ``purchase``/``restock`` for relative changes.
        """
        require_role(role, Role.ADMIN)
        _reject_unknown(fields)

        changes: dict[str, Any] = {}
        if "name" in fields:
            changes["name"] = clean_text("name", fields["name"])
        if "category" in fields:
            changes["category"] = clean_text("category", fields["category"])
        if "price" in fields:
            changes["price"] = clean_price(fields["price"])
        quantity = clean_quantity(fields["quantity"]) if "quantity" in fields else None

        if quantity is not None:
            item = self.ledger.set_quantity(item_id, quantity, changes)
        elif changes:
            item = self.store.update(item_id, changes)
        else:
            item = self.store.get(item_id)

        logger.debug("updated item=%s fields=%s", item_id, sorted(fields))
        return item

    def delete_item(self, role: Role | str | None, item_id: str) -> None:
        require_role(role, Role.ADMIN)
        self.ledger.retire(item_id)
        logger.debug("deleted item=%s", item_id)

    def restock(self, role: Role | str | None, item_id: str, amount: int) -> Item:
        require_role(role, Role.ADMIN)
        return self.ledger.increment(item_id, amount)

    def purchase(self, role: Role | str | None, item_id: str, amount: int) -> Item:
        require_role(role, Role.USER, Role.ADMIN)
        return self.ledger.decrement(item_id, amount)


def _reject_unknown(fields: Mapping[str, Any]) -> None:
    unknown = set(fields) - MUTABLE_FIELDS
    if unknown:
        raise InvalidField(f"Unknown fields: {sorted(unknown)}")
