"""
Catalog item record and the input rules every write path shares.
"""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from .exceptions import (
    InvalidAmount,
    InvalidField,
    InvalidPrice,
    InvalidQuantity,
    NotAuthenticated,
    PermissionDenied,
)


@dataclass(frozen=True)
class Item:
    """
    Immutable snapshot of a catalog entry.

    Stores hand out fresh instances; changing an item means writing through
    the store (or the ledger for ``quantity``).
    """

    id: str
    name: str
    category: str
    price: Decimal
    quantity: int
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["price"] = str(self.price)
        data["createdAt"] = data.pop("created_at").isoformat()
        return data


class Role(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


def require_role(role: Role | str | None, *allowed: Role) -> Role:
    """
    Capability check for a mutating operation.

    The role is trusted as resolved by the caller's authentication layer.
    Raises NotAuthenticated when no role is given and PermissionDenied when
    the role is not among ``allowed``.
    """
    if role is None:
        raise NotAuthenticated("Authentication required")
    try:
        resolved = Role(role)
    except ValueError as e:
        raise PermissionDenied(f"Unknown role: {role!r}") from e
    if resolved not in allowed:
        raise PermissionDenied(f"Role {resolved.value} may not perform this operation")
    return resolved


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def clean_text(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidField(f"{field} must be a non-empty string")
    return value.strip()


#: Prices are money: at most two decimal places and PRICE_MAX_DIGITS digits in
#: total, so every backend stores exactly the value it was given.
PRICE_DECIMAL_PLACES = 2
PRICE_MAX_DIGITS = 12
PRICE_EXPONENT = Decimal("0.01")


def clean_price(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        raise InvalidPrice("Price is required")
    try:
        price = Decimal(str(value))
    except InvalidOperation as e:
        raise InvalidPrice(f"Price is not a number: {value!r}") from e
    if not price.is_finite() or price <= 0:
        raise InvalidPrice("Price must be positive")
    if price.adjusted() >= PRICE_MAX_DIGITS - PRICE_DECIMAL_PLACES:
        raise InvalidPrice(
            f"Price must be below 10^{PRICE_MAX_DIGITS - PRICE_DECIMAL_PLACES}"
        )
    if price != price.quantize(PRICE_EXPONENT):
        raise InvalidPrice(
            f"Price cannot have more than {PRICE_DECIMAL_PLACES} decimal places"
        )
    return price


def clean_quantity(value: Any) -> int:
    if not _is_int(value):
        raise InvalidQuantity("Quantity must be an integer")
    if value < 0:
        raise InvalidQuantity("Quantity cannot be negative")
    return value


def clean_amount(value: Any) -> int:
    if not _is_int(value) or value <= 0:
        raise InvalidAmount("Amount must be a positive integer")
    return value
