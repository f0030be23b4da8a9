"""Tests for the SQLAlchemy repositories and unit of work."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from mycomarket.domain.exceptions import ConcurrencyConflict
from mycomarket.domain.model.booking import Booking, BookingStatus
from mycomarket.domain.model.delivery_slot import DeliverySlot
from mycomarket.domain.model.order import Order, OrderItem, OrderStatus
from mycomarket.domain.model.stock import ProductStock
from mycomarket.domain.model.value_objects import Money, Quantity
from mycomarket.domain.model.wallet import (
    TransactionStatus,
    TransactionType,
    Wallet,
    WalletTransaction,
)
from mycomarket.infrastructure.persistence.sql_unit_of_work import is_conflict

T0 = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)


def _slot(uow, capacity="50"):
    slot = DeliverySlot(
        id=None, product_id="1", date=date(2026, 10, 20), max_capacity=Decimal(capacity)
    )
    uow.slots.save(slot)
    return slot


def _order(uow):
    order = Order.create("alice")
    uow.orders.save(order)
    return order


class TestStockRepository:

    def test_decrement_is_conditional(self, uow):
        with uow:
            uow.stock.save(ProductStock(product_id="1", quantity=Decimal("10")))

        with uow:
            assert uow.stock.try_decrement("1", Decimal("10"))
            assert not uow.stock.try_decrement("1", Decimal("0.001"))

        with uow:
            assert uow.stock.get("1").quantity == Decimal("0")

    def test_unknown_product(self, uow):
        with uow:
            assert not uow.stock.try_decrement("nope", Decimal("1"))
            assert not uow.stock.increment("nope", Decimal("1"))
            assert uow.stock.get("nope") is None

    def test_fractional_quantities_add_up_exactly(self, uow):
        with uow:
            uow.stock.save(ProductStock(product_id="1"))
            for _ in range(3):
                uow.stock.increment("1", Decimal("0.1"))

        with uow:
            assert uow.stock.get("1").quantity == Decimal("0.3")


class TestDeliverySlotRepository:

    def test_reserve_up_to_capacity(self, uow):
        with uow:
            slot = _slot(uow, capacity="10")

        with uow:
            assert uow.slots.try_increment_reserved(slot.id, Decimal("9.5"))
            assert not uow.slots.try_increment_reserved(slot.id, Decimal("0.501"))
            assert uow.slots.try_increment_reserved(slot.id, Decimal("0.5"))

        with uow:
            assert uow.slots.get(slot.id).reserved == Decimal("10")

    def test_closed_slot_takes_nothing(self, uow):
        with uow:
            slot = _slot(uow)
            slot.is_available = False
            uow.slots.save(slot)

        with uow:
            assert not uow.slots.try_increment_reserved(slot.id, Decimal("1"))

    def test_release_is_floored_at_zero(self, uow):
        with uow:
            slot = _slot(uow)
            uow.slots.try_increment_reserved(slot.id, Decimal("3"))
            assert uow.slots.decrement_reserved(slot.id, Decimal("5"))
            assert uow.slots.get(slot.id).reserved == Decimal("0")

    def test_list_and_delete(self, uow):
        with uow:
            late = DeliverySlot(id=None, product_id="1", date=date(2026, 10, 25), max_capacity=Decimal("5"))
            uow.slots.save(late)
            early = _slot(uow)
            uow.slots.save(DeliverySlot(id=None, product_id="2", date=date(2026, 10, 19), max_capacity=Decimal("5")))

        with uow:
            assert [s.id for s in uow.slots.list_for_product("1")] == [early.id, late.id]
            uow.slots.delete(late.id)

        with uow:
            assert uow.slots.get(late.id) is None


class TestBookingRepository:

    def _booking(self, uow):
        order = _order(uow)
        booking = Booking.hold(
            slot_id=1,
            order_id=order.id,
            product_id="1",
            producer_id="prod-a",
            quantity=Quantity.of("2.5"),
            price=Money.of("12.00"),
            now=T0,
        )
        uow.bookings.save(booking)
        return booking

    def test_round_trip(self, uow):
        with uow:
            booking = self._booking(uow)

        with uow:
            loaded = uow.bookings.get(booking.id)

        assert loaded.quantity == Quantity.of("2.5")
        assert loaded.price == Money.of("12.00")
        assert loaded.status == BookingStatus.TEMPORARY
        assert loaded.expires_at == datetime(2026, 10, 18, 11, 0, tzinfo=timezone.utc)
        assert loaded.created_at == T0

    def test_compare_and_set(self, uow):
        with uow:
            booking = self._booking(uow)

        with uow:
            booking.promote()
            assert uow.bookings.compare_and_set_status(booking, expected=(BookingStatus.TEMPORARY,))
            booking.status = BookingStatus.CANCELLED
            assert not uow.bookings.compare_and_set_status(booking, expected=(BookingStatus.TEMPORARY,))

        with uow:
            loaded = uow.bookings.get(booking.id)
            assert loaded.status == BookingStatus.PENDING
            assert loaded.expires_at is None

    def test_expiry_guard(self, uow):
        with uow:
            booking = self._booking(uow)

        with uow:
            booking.cancel()
            assert not uow.bookings.compare_and_set_status(
                booking, expected=(BookingStatus.TEMPORARY,), expired_before=T0
            )

    def test_list_expired(self, uow):
        with uow:
            booking = self._booking(uow)

        with uow:
            assert uow.bookings.list_expired(datetime(2026, 10, 18, 10, 59, tzinfo=timezone.utc), 10) == []
            expired = uow.bookings.list_expired(datetime(2026, 10, 18, 11, 0, tzinfo=timezone.utc), 10)
            assert [b.id for b in expired] == [booking.id]
            assert [b.id for b in uow.bookings.list_live_by_slot(1)] == [booking.id]


class TestOrderRepository:

    def test_items_round_trip_and_replace(self, uow):
        with uow:
            order = _order(uow)
            for product_id in ("1", "2"):
                order.add_item(OrderItem(
                    product_id=product_id,
                    producer_id="prod-a",
                    product_name=f"Product {product_id}",
                    quantity=Quantity.of("1.25"),
                    unit_price=Money.of("8.00"),
                ))
            order.recompute_total([])
            uow.orders.save(order)

        with uow:
            loaded = uow.orders.get(order.id)
            assert [i.product_id for i in loaded.items] == ["1", "2"]
            assert loaded.total == Money.of("20.00")
            assert loaded.platform_fee is None
            loaded.remove_item("1")
            loaded.transition_to(OrderStatus.PENDING)
            loaded.set_platform_fee(Money.of("1.00"))
            uow.orders.save(loaded)

        with uow:
            loaded = uow.orders.get(order.id)
            assert [i.product_id for i in loaded.items] == ["2"]
            assert loaded.status == OrderStatus.PENDING
            assert loaded.platform_fee == Money.of("1.00")
            assert [o.id for o in uow.orders.list_history("alice")] == [order.id]


class TestWalletRepositories:

    def test_signed_amounts_round_trip(self, uow):
        with uow:
            wallet = Wallet(id=None, producer_id="prod-a", balance=Money.of("40.00"))
            uow.wallets.save(wallet)
            uow.transactions.save(WalletTransaction(
                id=None,
                wallet_id=wallet.id,
                type=TransactionType.WITHDRAWAL,
                amount=Decimal("-60.00"),
                created_at=T0,
            ))

        with uow:
            [tx] = uow.transactions.list_recent(wallet.id, 10)
            assert tx.amount == Decimal("-60.00")
            assert tx.magnitude == Money.of("60.00")
            assert tx.status == TransactionStatus.PENDING
            assert uow.wallets.get_by_producer("prod-a").balance == Money.of("40.00")


class TestUnitOfWork:

    def test_exception_rolls_back(self, uow):
        with pytest.raises(RuntimeError):
            with uow:
                uow.stock.save(ProductStock(product_id="1", quantity=Decimal("5")))
                raise RuntimeError("boom")

        with uow:
            assert uow.stock.get("1") is None

    def test_duplicate_wallet_is_a_conflict(self, uow):
        with uow:
            uow.wallets.save(Wallet(id=None, producer_id="prod-a"))

        with pytest.raises(ConcurrencyConflict):
            with uow:
                uow.wallets.save(Wallet(id=None, producer_id="prod-a"))

        with uow:
            assert len(uow.wallets.list_all()) == 1

    def test_duplicate_sale_line_is_a_conflict(self, uow):
        with uow:
            wallet = Wallet(id=None, producer_id="prod-a")
            uow.wallets.save(wallet)
            order = _order(uow)

        def sale():
            return WalletTransaction(
                id=None, wallet_id=wallet.id, type=TransactionType.SALE,
                amount=Decimal("9.00"), order_id=order.id,
            )

        with uow:
            uow.transactions.save(sale())
        with pytest.raises(ConcurrencyConflict):
            with uow:
                uow.transactions.save(sale())

    def test_session_is_closed_after_the_block(self, uow):
        with uow:
            pass

        with pytest.raises(RuntimeError, match="not open"):
            uow.session

    def test_cannot_be_opened_twice(self, uow):
        with uow:
            with pytest.raises(RuntimeError, match="already open"):
                uow.__enter__()

    def test_lock_errors_count_as_conflicts(self):
        locked = OperationalError("UPDATE x", {}, Exception("database is locked"))
        missing = OperationalError("SELECT x", {}, Exception("no such table: x"))

        assert is_conflict(locked)
        assert not is_conflict(missing)
