from __future__ import annotations

import logging
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Iterator, Mapping

from django.db import DataError, InterfaceError, OperationalError, transaction

from ..domain import Item, clean_price
from ..exceptions import (
    InvalidField,
    InvalidQuantity,
    NotFound,
    Transient,
    ValidationFailed,
)
from ..models import ItemRecord
from . import MUTABLE_FIELDS

logger = logging.getLogger(__name__)

#: Largest value the BIGINT quantity column holds.
QUANTITY_MAX = 2**63 - 1


def _translate_db_errors(fn: Callable[..., Any]):
    """
    Re-raise database failures as ledger errors.

    Connection-level failures become Transient; values the column types
    cannot hold become ValidationFailed. Django rolls back the surrounding
    atomic block before the error leaves it, so neither follows a partial
    write.
    """

    @wraps(fn)
    def wrapper(*args: Any, **kwargs: Any):
        try:
            return fn(*args, **kwargs)
        except (OperationalError, InterfaceError) as e:
            logger.warning("storage error in %s: %s", fn.__name__, e)
            raise Transient(f"Storage unavailable: {e}") from e
        except DataError as e:
            logger.warning("value rejected by storage in %s: %s", fn.__name__, e)
            raise ValidationFailed(f"Value out of range for storage: {e}") from e

    return wrapper


def _to_item(row: ItemRecord) -> Item:
    return Item(
        id=row.id,
        name=row.name,
        category=row.category,
        price=row.price,
        quantity=row.quantity,
        created_at=row.created_at,
    )


def _check_storable(fields: Mapping[str, Any]) -> None:
    if "price" in fields:
        clean_price(fields["price"])
    if "quantity" in fields and fields["quantity"] > QUANTITY_MAX:
        raise InvalidQuantity(f"Quantity cannot exceed {QUANTITY_MAX}")


class OrmItemStore:
    """
    Item store backed by the Django ORM (`ItemRecord`).

    Partial updates are single ``UPDATE ... WHERE id = %s`` statements, so a
    name change never rewrites the quantity column and vice versa. Values the
    columns cannot hold are rejected before any statement runs.

    Parameters
    ----------
    using : str
        Django database alias.
    """

    def __init__(self, using: str = "default") -> None:
        self.using = using

    def _rows(self):
        return ItemRecord.objects.using(self.using)

    @_translate_db_errors
    def get(self, item_id: str, *, for_update: bool = False) -> Item:
        """
        Load one item. ``for_update=True`` takes a row lock held until the
        surrounding ``atomic()`` block ends.
        """
        rows = self._rows().select_for_update() if for_update else self._rows()
        try:
            return _to_item(rows.get(pk=item_id))
        except ItemRecord.DoesNotExist:
            raise NotFound(item_id) from None

    @_translate_db_errors
    def put(self, item: Item) -> None:
        _check_storable({"price": item.price, "quantity": item.quantity})
        ItemRecord(
            id=item.id,
            name=item.name,
            category=item.category,
            price=item.price,
            quantity=item.quantity,
            created_at=item.created_at,
        ).save(using=self.using)

    @_translate_db_errors
    def update(self, item_id: str, fields: Mapping[str, Any]) -> Item:
        unknown = set(fields) - MUTABLE_FIELDS
        if unknown:
            raise InvalidField(f"Cannot update fields: {sorted(unknown)}")
        _check_storable(fields)

        with transaction.atomic(using=self.using):
            if not self._rows().filter(pk=item_id).update(**fields):
                raise NotFound(item_id)
            return _to_item(self._rows().get(pk=item_id))

    @_translate_db_errors
    def delete(self, item_id: str) -> None:
        deleted, _ = self._rows().filter(pk=item_id).delete()
        if not deleted:
            raise NotFound(item_id)

    @_translate_db_errors
    def list(self) -> list[Item]:
        return [_to_item(row) for row in self._rows().order_by("-created_at")]

    def find(self, predicate: Callable[[Item], bool]) -> list[Item]:
        return [item for item in self.list() if predicate(item)]

    @contextmanager
    def atomic(self) -> Iterator[None]:
        try:
            with transaction.atomic(using=self.using):
                yield
        except (OperationalError, InterfaceError) as e:
            logger.warning("storage error, transaction rolled back: %s", e)
            raise Transient(f"Storage unavailable: {e}") from e
