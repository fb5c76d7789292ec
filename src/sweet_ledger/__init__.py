from .api import lock
from .backends.local import LocalLockBackend
from .catalog import CatalogAdminService, CatalogQueryService, SearchFilter
from .domain import Item, Role
from .exceptions import (
    Conflict,
    InsufficientStock,
    InvalidAmount,
    InvalidField,
    InvalidPrice,
    InvalidQuantity,
    LedgerError,
    LockAcquireTimeout,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    Transient,
    ValidationFailed,
)
from .factory import Shop, build_memory_shop, build_orm_shop, build_shop
from .ledger import StockLedger

__all__ = [
    "lock",
    "LocalLockBackend",
    "CatalogAdminService",
    "CatalogQueryService",
    "SearchFilter",
    "Item",
    "Role",
    "StockLedger",
    "Shop",
    "build_shop",
    "build_memory_shop",
    "build_orm_shop",
    "LedgerError",
    "NotFound",
    "ValidationFailed",
    "InvalidAmount",
    "InvalidPrice",
    "InvalidQuantity",
    "InvalidField",
    "InsufficientStock",
    "Conflict",
    "Transient",
    "LockAcquireTimeout",
    "NotAuthenticated",
    "PermissionDenied",
]
