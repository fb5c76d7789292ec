import threading
import time
from decimal import Decimal

import pytest

from sweet_ledger import (
    CatalogAdminService,
    InsufficientStock,
    InvalidAmount,
    InvalidQuantity,
    LocalLockBackend,
    LockAcquireTimeout,
    NotFound,
    Role,
    StockLedger,
    build_memory_shop,
    lock,
)
from sweet_ledger.stores.memory import MemoryItemStore


@pytest.fixture
def shop():
    return build_memory_shop(lock_timeout=5.0)


def _create(shop, quantity=10, **fields):
    data = {"name": "Choco", "category": "Bar", "price": "2.5", "quantity": quantity}
    data.update(fields)
    return shop.admin.create_item(Role.ADMIN, data)


def test_purchase_and_restock_scenario(shop):
    item = _create(shop, quantity=10)

    assert shop.ledger.decrement(item.id, 4).quantity == 6

    with pytest.raises(InsufficientStock) as exc:
        shop.ledger.decrement(item.id, 10)
    assert exc.value.requested == 10
    assert exc.value.available == 6
    assert shop.store.get(item.id).quantity == 6

    assert shop.ledger.increment(item.id, 3).quantity == 9


def test_decrement_to_exactly_zero(shop):
    item = _create(shop, quantity=3)

    assert shop.ledger.decrement(item.id, 3).quantity == 0

    with pytest.raises(InsufficientStock):
        shop.ledger.decrement(item.id, 1)


def test_decrement_returns_full_item(shop):
    item = _create(shop, quantity=5)

    after = shop.ledger.decrement(item.id, 2)

    assert after.id == item.id
    assert after.name == "Choco"
    assert after.price == Decimal("2.5")
    assert after.created_at == item.created_at


@pytest.mark.parametrize("amount", [0, -1, 1.5, "2", True, None])
def test_invalid_amount_never_writes(shop, amount):
    item = _create(shop, quantity=5)
    before = shop.store.get(item.id)

    with pytest.raises(InvalidAmount):
        shop.ledger.decrement(item.id, amount)
    with pytest.raises(InvalidAmount):
        shop.ledger.increment(item.id, amount)

    assert shop.store.get(item.id) == before


def test_invalid_amount_is_reported_before_missing_item(shop):
    with pytest.raises(InvalidAmount):
        shop.ledger.decrement("missing", 0)


def test_unknown_item(shop):
    with pytest.raises(NotFound) as exc:
        shop.ledger.decrement("missing", 1)
    assert exc.value.item_id == "missing"

    with pytest.raises(NotFound):
        shop.ledger.increment("missing", 1)


def test_decrement_after_delete_is_not_found(shop):
    item = _create(shop)

    shop.admin.delete_item(Role.ADMIN, item.id)

    with pytest.raises(NotFound):
        shop.ledger.decrement(item.id, 1)
    with pytest.raises(NotFound):
        shop.ledger.increment(item.id, 1)


def test_restock_has_no_upper_bound(shop):
    item = _create(shop, quantity=0)

    assert shop.ledger.increment(item.id, 10**12).quantity == 10**12


def test_initialize_rejects_negative(shop):
    item = _create(shop, quantity=1)

    with pytest.raises(InvalidQuantity):
        shop.ledger.initialize(item.id, -1)

    assert shop.store.get(item.id).quantity == 1


def test_set_quantity_overwrites(shop):
    item = _create(shop, quantity=7)

    assert shop.ledger.set_quantity(item.id, 2).quantity == 2
    with pytest.raises(InvalidQuantity):
        shop.ledger.set_quantity(item.id, -3)
    assert shop.store.get(item.id).quantity == 2


def test_concurrent_unit_purchases_sell_exactly_the_stock(shop):
    stock, buyers = 7, 25
    item = _create(shop, quantity=stock)
    barrier = threading.Barrier(buyers)
    outcomes: list[str] = []
    outcomes_lock = threading.Lock()

    def buy() -> None:
        barrier.wait(timeout=5.0)
        try:
            shop.ledger.decrement(item.id, 1)
            result = "ok"
        except InsufficientStock:
            result = "insufficient"
        with outcomes_lock:
            outcomes.append(result)

    threads = [threading.Thread(target=buy) for _ in range(buyers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10.0)

    assert outcomes.count("ok") == stock
    assert outcomes.count("insufficient") == buyers - stock
    assert shop.store.get(item.id).quantity == 0


class SlowReadStore(MemoryItemStore):
    """Widens the gap between reading and writing a quantity."""

    def get(self, item_id, *, for_update=False):
        item = super().get(item_id, for_update=for_update)
        if for_update:
            time.sleep(0.02)
        return item


def test_no_lost_updates_with_slow_storage():
    store = SlowReadStore()
    shop_ledger = StockLedger(store, LocalLockBackend(), lock_timeout=10.0)
    admin = CatalogAdminService(store, shop_ledger)
    item = admin.create_item(
        Role.ADMIN, {"name": "Gum", "category": "Chew", "price": 1, "quantity": 10}
    )

    def worker(op) -> None:
        op(item.id, 1)

    threads = [threading.Thread(target=worker, args=(shop_ledger.increment,)) for _ in range(5)]
    threads += [threading.Thread(target=worker, args=(shop_ledger.decrement,)) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10.0)

    assert store.get(item.id).quantity == 10 + 5 - 8


def test_two_purchases_whose_sum_exceeds_stock():
    store = SlowReadStore()
    ledger = StockLedger(store, LocalLockBackend(), lock_timeout=5.0)
    item = CatalogAdminService(store, ledger).create_item(
        Role.ADMIN, {"name": "Toffee", "category": "Chew", "price": 1, "quantity": 5}
    )
    barrier = threading.Barrier(2)
    results: list[object] = []

    def buy(amount: int) -> None:
        barrier.wait(timeout=5.0)
        try:
            results.append(ledger.decrement(item.id, amount).quantity)
        except InsufficientStock as e:
            results.append(e)

    threads = [threading.Thread(target=buy, args=(a,)) for a in (3, 4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10.0)

    failures = [r for r in results if isinstance(r, InsufficientStock)]
    successes = [r for r in results if not isinstance(r, InsufficientStock)]
    assert len(failures) == 1
    assert len(successes) == 1
    assert store.get(item.id).quantity == successes[0]
    assert store.get(item.id).quantity in (1, 2)


def test_lock_timeout_is_transient_and_leaves_stock_unchanged(shop):
    item = _create(shop, quantity=4)
    ledger = StockLedger(shop.store, shop.ledger.lock_backend, lock_timeout=0.05)
    started = threading.Event()
    release = threading.Event()

    def hold() -> None:
        with lock(f"item:{item.id}", timeout=2.0, backend=shop.ledger.lock_backend):
            started.set()
            release.wait(timeout=2.0)

    t = threading.Thread(target=hold)
    t.start()
    assert started.wait(timeout=2.0)

    with pytest.raises(LockAcquireTimeout):
        ledger.decrement(item.id, 1)

    release.set()
    t.join(timeout=5.0)
    assert shop.store.get(item.id).quantity == 4
