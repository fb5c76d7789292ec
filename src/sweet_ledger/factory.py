"""
Wiring helpers. Every dependency is passed explicitly; nothing here keeps
process-wide state.

``lock_timeout`` defaults to the ``LOCK_TIMEOUT`` setting; pass ``None`` to
block until an item's lock is free.
"""

from __future__ import annotations

from dataclasses import dataclass

from .api import LockBackend
from .backends.local import LocalLockBackend
from .catalog import CatalogAdminService, CatalogQueryService
from .conf import get_setting
from .ledger import USE_SETTING, StockLedger
from .stores import ItemStore


@dataclass(frozen=True)
class Shop:
    store: ItemStore
    ledger: StockLedger
    catalog: CatalogQueryService
    admin: CatalogAdminService


def build_shop(
    store: ItemStore,
    lock_backend: LockBackend,
    lock_timeout: float | None = USE_SETTING,
) -> Shop:
    """Wire a ledger and both services around ``store``."""
    ledger = StockLedger(store, lock_backend, lock_timeout=lock_timeout)
    return Shop(
        store=store,
        ledger=ledger,
        catalog=CatalogQueryService(store),
        admin=CatalogAdminService(store, ledger),
    )


def build_memory_shop(lock_timeout: float | None = USE_SETTING) -> Shop:
    """In-process shop: dict-backed store, thread locks."""
    from .stores.memory import MemoryItemStore

    return build_shop(MemoryItemStore(), LocalLockBackend(), lock_timeout)


def build_orm_shop(
    using: str | None = None,
    lock_timeout: float | None = USE_SETTING,
) -> Shop:
    """
    Shop backed by the Django ORM and PostgreSQL advisory locks.

    Requires Django to be set up with ``sweet_ledger`` in INSTALLED_APPS.
    """
    from .backends.postgres import PostgresAdvisoryLockBackend
    from .stores.orm import OrmItemStore

    using = using or get_setting("DATABASE_ALIAS")
    return build_shop(
        OrmItemStore(using=using),
        PostgresAdvisoryLockBackend(using=using),
        lock_timeout,
    )
