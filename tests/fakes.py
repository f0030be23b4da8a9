"""In-memory fake repositories for testing.

These implement the same abstract interfaces as the SQL repositories
but keep everything in dicts. No database, no side effects.

Entities are deep-copied on the way in and out, so a change that is not
saved does not stick, just like with a real database.  ``FakeUnitOfWork``
holds the store's lock for the whole ``with`` block and restores a
snapshot on rollback.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal

from mycomarket.application.notifications import Notifier
from mycomarket.domain.exceptions import ConcurrencyConflict
from mycomarket.domain.model.booking import Booking, BookingStatus
from mycomarket.domain.model.delivery_slot import DeliverySlot
from mycomarket.domain.model.order import Order, OrderStatus
from mycomarket.domain.model.product import CatalogProduct
from mycomarket.domain.model.stock import ProductStock
from mycomarket.domain.model.value_objects import Money
from mycomarket.domain.model.wallet import (
    TransactionStatus,
    TransactionType,
    Wallet,
    WalletTransaction,
)
from mycomarket.domain.model.withdrawal import Withdrawal, WithdrawalStatus
from mycomarket.domain.repository.booking_repository import BookingRepository
from mycomarket.domain.repository.catalog import ProductCatalog
from mycomarket.domain.repository.delivery_slot_repository import DeliverySlotRepository
from mycomarket.domain.repository.order_repository import OrderRepository
from mycomarket.domain.repository.stock_repository import StockRepository
from mycomarket.domain.repository.unit_of_work import UnitOfWork
from mycomarket.domain.repository.wallet_repository import (
    WalletRepository,
    WalletTransactionRepository,
    WithdrawalRepository,
)

TABLES = (
    "products", "stock", "slots", "bookings", "orders",
    "wallets", "transactions", "withdrawals",
)


class InMemoryStore:

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.tables: dict[str, dict] = {name: {} for name in TABLES}
        self.counters: dict[str, int] = {name: 0 for name in TABLES}

    def next_id(self, table: str) -> int:
        self.counters[table] += 1
        return self.counters[table]

    def snapshot(self) -> tuple[dict, dict]:
        return copy.deepcopy((self.tables, self.counters))

    def restore(self, snapshot: tuple[dict, dict]) -> None:
        tables, counters = copy.deepcopy(snapshot)
        self.tables = tables
        self.counters = counters


class _FakeRepository:

    table: str

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    @property
    def _rows(self) -> dict:
        return self._store.tables[self.table]

    def _load(self, key):
        return copy.deepcopy(self._rows.get(key))

    def _all(self) -> list:
        return [copy.deepcopy(v) for v in self._rows.values()]

    def _insert_or_update(self, entity) -> None:
        if entity.id is None:
            entity.id = self._store.next_id(self.table)
        self._rows[entity.id] = copy.deepcopy(entity)


class FakeProductCatalog(_FakeRepository, ProductCatalog):

    table = "products"

    def get(self, product_id: str) -> CatalogProduct | None:
        return self._load(product_id)

    def list_all(self) -> list[CatalogProduct]:
        return sorted(self._all(), key=lambda p: p.id)

    def save(self, product: CatalogProduct) -> None:
        self._rows[product.id] = copy.deepcopy(product)


class FakeStockRepository(_FakeRepository, StockRepository):

    table = "stock"

    def get(self, product_id: str) -> ProductStock | None:
        return self._load(product_id)

    def save(self, stock: ProductStock) -> None:
        self._rows[stock.product_id] = copy.deepcopy(stock)

    def try_decrement(self, product_id: str, quantity: Decimal) -> bool:
        row = self._rows.get(product_id)
        if row is None or not row.can_reserve(quantity):
            return False
        row.quantity -= quantity
        return True

    def increment(self, product_id: str, quantity: Decimal) -> bool:
        row = self._rows.get(product_id)
        if row is None:
            return False
        row.quantity += quantity
        return True


class FakeDeliverySlotRepository(_FakeRepository, DeliverySlotRepository):

    table = "slots"

    def get(self, slot_id: int, for_update: bool = False) -> DeliverySlot | None:
        return self._load(slot_id)

    def list_for_product(self, product_id: str) -> list[DeliverySlot]:
        return sorted(
            (s for s in self._all() if s.product_id == product_id),
            key=lambda s: (s.date, s.id),
        )

    def save(self, slot: DeliverySlot) -> None:
        self._insert_or_update(slot)

    def delete(self, slot_id: int) -> None:
        self._rows.pop(slot_id, None)

    def try_increment_reserved(self, slot_id: int, quantity: Decimal) -> bool:
        row = self._rows.get(slot_id)
        if row is None or not row.is_available or row.reserved + quantity > row.max_capacity:
            return False
        row.reserved += quantity
        return True

    def decrement_reserved(self, slot_id: int, quantity: Decimal) -> bool:
        row = self._rows.get(slot_id)
        if row is None:
            return False
        row.release(quantity)
        return True


class FakeBookingRepository(_FakeRepository, BookingRepository):

    table = "bookings"

    def get(self, booking_id: int) -> Booking | None:
        return self._load(booking_id)

    def list_by_order(self, order_id: int) -> list[Booking]:
        return sorted((b for b in self._all() if b.order_id == order_id), key=lambda b: b.id)

    def list_live_by_slot(self, slot_id: int) -> list[Booking]:
        return sorted(
            (b for b in self._all() if b.slot_id == slot_id and b.is_live),
            key=lambda b: b.id,
        )

    def list_expired(self, now: datetime, limit: int) -> list[Booking]:
        expired = sorted(
            (b for b in self._all() if b.is_expired(now)),
            key=lambda b: (b.expires_at, b.id),
        )
        return expired[:limit]

    def save(self, booking: Booking) -> None:
        self._insert_or_update(booking)

    def compare_and_set_status(
        self,
        booking: Booking,
        expected: Iterable[BookingStatus],
        expired_before: datetime | None = None,
    ) -> bool:
        row = self._rows.get(booking.id)
        if row is None or row.status not in tuple(expected):
            return False
        if expired_before is not None and (
            row.expires_at is None or row.expires_at > expired_before
        ):
            return False
        row.status = booking.status
        row.expires_at = booking.expires_at
        return True


class FakeOrderRepository(_FakeRepository, OrderRepository):

    table = "orders"

    def get(self, order_id: int, for_update: bool = False) -> Order | None:
        return self._load(order_id)

    def list_history(self, user_id: str) -> list[Order]:
        orders = [
            o for o in self._all()
            if o.user_id == user_id and o.status != OrderStatus.DRAFT
        ]
        return sorted(orders, key=lambda o: (o.created_at, o.id), reverse=True)

    def save(self, order: Order) -> None:
        self._insert_or_update(order)


class FakeWalletRepository(_FakeRepository, WalletRepository):

    table = "wallets"

    def get(self, wallet_id: int, for_update: bool = False) -> Wallet | None:
        return self._load(wallet_id)

    def get_by_producer(self, producer_id: str, for_update: bool = False) -> Wallet | None:
        for wallet in self._rows.values():
            if wallet.producer_id == producer_id:
                return copy.deepcopy(wallet)
        return None

    def list_all(self) -> list[Wallet]:
        return sorted(self._all(), key=lambda w: w.id)

    def save(self, wallet: Wallet) -> None:
        for other in self._rows.values():
            if other.producer_id == wallet.producer_id and other.id != wallet.id:
                raise ConcurrencyConflict(f"Wallet for {wallet.producer_id} already exists")
        self._insert_or_update(wallet)


class FakeWalletTransactionRepository(_FakeRepository, WalletTransactionRepository):

    table = "transactions"

    def find_sale(self, wallet_id: int, order_id: int) -> WalletTransaction | None:
        for tx in self._all():
            if (tx.wallet_id, tx.order_id, tx.type) == (wallet_id, order_id, TransactionType.SALE):
                return tx
        return None

    def find_by_withdrawal(self, withdrawal_id: int) -> WalletTransaction | None:
        for tx in self._all():
            if tx.withdrawal_id == withdrawal_id:
                return tx
        return None

    def list_by_order(
        self,
        order_id: int,
        type: TransactionType,
        status: TransactionStatus | None = None,
    ) -> list[WalletTransaction]:
        return sorted(
            (
                tx for tx in self._all()
                if tx.order_id == order_id and tx.type == type
                and (status is None or tx.status == status)
            ),
            key=lambda tx: tx.id,
        )

    def list_recent(self, wallet_id: int, limit: int) -> list[WalletTransaction]:
        txs = [tx for tx in self._all() if tx.wallet_id == wallet_id]
        return sorted(txs, key=lambda tx: (tx.created_at, tx.id), reverse=True)[:limit]

    def save(self, transaction: WalletTransaction) -> None:
        self._insert_or_update(transaction)

    def all(self) -> list[WalletTransaction]:
        return sorted(self._all(), key=lambda tx: tx.id)


class FakeWithdrawalRepository(_FakeRepository, WithdrawalRepository):

    table = "withdrawals"

    def get(self, withdrawal_id: int) -> Withdrawal | None:
        return self._load(withdrawal_id)

    def list_recent(self, wallet_id: int, limit: int) -> list[Withdrawal]:
        ws = [w for w in self._all() if w.wallet_id == wallet_id]
        return sorted(ws, key=lambda w: (w.requested_at, w.id), reverse=True)[:limit]

    def list_pending(self) -> list[Withdrawal]:
        return sorted(
            (w for w in self._all() if w.status == WithdrawalStatus.PENDING),
            key=lambda w: w.id,
        )

    def save(self, withdrawal: Withdrawal) -> None:
        self._insert_or_update(withdrawal)

    def compare_and_set_status(self, withdrawal: Withdrawal, expected: WithdrawalStatus) -> bool:
        row = self._rows.get(withdrawal.id)
        if row is None or row.status != expected:
            return False
        row.status = withdrawal.status
        row.processed_at = withdrawal.processed_at
        row.processor_note = withdrawal.processor_note
        return True


class FakeUnitOfWork(UnitOfWork):
    """Unit of work over an ``InMemoryStore``.

    ``conflicts`` makes the next N commits fail with ConcurrencyConflict
    (after rolling back), to exercise retries.
    """

    def __init__(self, store: InMemoryStore | None = None, conflicts: int = 0) -> None:
        self.store = store or InMemoryStore()
        self.catalog = FakeProductCatalog(self.store)
        self.stock = FakeStockRepository(self.store)
        self.slots = FakeDeliverySlotRepository(self.store)
        self.bookings = FakeBookingRepository(self.store)
        self.orders = FakeOrderRepository(self.store)
        self.wallets = FakeWalletRepository(self.store)
        self.transactions = FakeWalletTransactionRepository(self.store)
        self.withdrawals = FakeWithdrawalRepository(self.store)
        self.conflicts = conflicts
        self.commits = 0
        self.rollbacks = 0
        self._snapshot: tuple[dict, dict] | None = None

    def __enter__(self) -> FakeUnitOfWork:
        self.store.lock.acquire()
        self._snapshot = self.store.snapshot()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            super().__exit__(exc_type, exc, tb)
        finally:
            self._snapshot = None
            self.store.lock.release()

    def commit(self) -> None:
        if self.conflicts > 0:
            self.conflicts -= 1
            self.store.restore(self._snapshot)
            raise ConcurrencyConflict("simulated write conflict")
        self.commits += 1

    def rollback(self) -> None:
        self.store.restore(self._snapshot)
        self.rollbacks += 1


class RecordingNotifier(Notifier):

    def __init__(self, fail: bool = False) -> None:
        self.events: list[tuple] = []
        self._fail = fail

    def _record(self, *event) -> None:
        self.events.append(event)
        if self._fail:
            raise RuntimeError("mail server down")

    def order_placed(self, order: Order) -> None:
        self._record("order_placed", order.id)

    def order_status_changed(self, order: Order, previous: OrderStatus) -> None:
        self._record("order_status_changed", order.id, previous, order.status)

    def withdrawal_requested(self, producer_id: str, withdrawal: Withdrawal) -> None:
        self._record("withdrawal_requested", producer_id, withdrawal.id)

    def withdrawal_resolved(self, withdrawal: Withdrawal) -> None:
        self._record("withdrawal_resolved", withdrawal.id, withdrawal.status)


def seed_product(
    uow: FakeUnitOfWork,
    product_id: str,
    producer_id: str,
    price: str,
    stock: str | None = None,
    name: str | None = None,
) -> CatalogProduct:
    """Put a product (and optionally its stock) straight into the store."""
    product = CatalogProduct(
        id=product_id,
        producer_id=producer_id,
        name=name or f"Product {product_id}",
        price=Money.of(price),
    )
    uow.catalog.save(product)
    if stock is not None:
        uow.stock.save(ProductStock(product_id=product_id, quantity=Decimal(stock)))
    return product


def seed_slot(uow: FakeUnitOfWork, product_id: str, slot_date, capacity: str) -> DeliverySlot:
    slot = DeliverySlot(id=None, product_id=product_id, date=slot_date, max_capacity=Decimal(capacity))
    uow.slots.save(slot)
    return slot
