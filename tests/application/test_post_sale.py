"""Integration tests for posting and settling sales by hand."""

import json
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from mycomarket.application.book_slot import BookSlotHandler
from mycomarket.application.cancel_booking import CancelBookingHandler
from mycomarket.application.post_sale import PostSaleHandler, SettlePendingHandler
from mycomarket.application.transition_order import TransitionOrderHandler
from mycomarket.domain.exceptions import EntityNotFoundError, ValidationError
from mycomarket.domain.model.value_objects import Money
from mycomarket.domain.model.wallet import TransactionStatus, TransactionType
from mycomarket.domain.service.wallet_ledger import LedgerPolicy
from tests.fakes import FakeUnitOfWork, seed_product, seed_slot

T0 = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)
POLICY = LedgerPolicy()


@pytest.fixture
def uow():
    uow = FakeUnitOfWork()
    seed_product(uow, "1", "prod-a", "20.00", stock="100")
    seed_slot(uow, "1", date(2026, 10, 20), "50")
    return uow


def _sales(uow, order_id):
    return uow.transactions.list_by_order(order_id, TransactionType.SALE)


class TestPostSale:

    def test_reposting_is_idempotent(self, uow):
        booking = BookSlotHandler(uow).handle(1, "alice", "4", now=T0)
        TransitionOrderHandler(uow, POLICY).handle(booking.order_id, "PENDING", now=T0)

        fee = PostSaleHandler(uow, POLICY).handle(booking.order_id)
        PostSaleHandler(uow, POLICY).handle(booking.order_id)

        assert fee == Money.of("8.00")
        assert len(_sales(uow, booking.order_id)) == 1
        wallet = uow.wallets.get_by_producer("prod-a")
        assert wallet.pending_balance == Money.of("72.00")
        assert wallet.total_earned == Money.of("72.00")

    def test_growth_tops_up_the_same_line(self, uow):
        book = BookSlotHandler(uow)
        first = book.handle(1, "alice", "4", now=T0)
        PostSaleHandler(uow, POLICY).handle(first.order_id)

        book.handle(1, "alice", "1", order_id=first.order_id, now=T0)
        PostSaleHandler(uow, POLICY).handle(first.order_id)

        sales = _sales(uow, first.order_id)
        assert len(sales) == 1
        assert sales[0].amount == Decimal("90.00")
        assert uow.wallets.get_by_producer("prod-a").pending_balance == Money.of("90.00")
        assert uow.orders.get(first.order_id).platform_fee == Money.of("10.00")

    def test_pending_sale_shrinks_in_place(self, uow):
        book = BookSlotHandler(uow)
        first = book.handle(1, "alice", "4", now=T0)
        second = book.handle(1, "alice", "1", order_id=first.order_id, now=T0)
        PostSaleHandler(uow, POLICY).handle(first.order_id)
        CancelBookingHandler(uow).handle(second.id)

        fee = PostSaleHandler(uow, POLICY).handle(first.order_id)

        sales = _sales(uow, first.order_id)
        assert len(sales) == 1
        assert sales[0].amount == Decimal("72.00")
        assert sales[0].status == TransactionStatus.PENDING
        assert fee == Money.of("8.00")
        wallet = uow.wallets.get_by_producer("prod-a")
        assert wallet.pending_balance == Money.of("72.00")
        assert wallet.total_earned == Money.of("90.00")

    def test_settled_sale_cannot_shrink(self, uow):
        book = BookSlotHandler(uow)
        first = book.handle(1, "alice", "4", now=T0)
        second = book.handle(1, "alice", "1", order_id=first.order_id, now=T0)
        PostSaleHandler(uow, POLICY).handle(first.order_id)
        SettlePendingHandler(uow, POLICY).handle(first.order_id)
        CancelBookingHandler(uow).handle(second.id)

        with pytest.raises(ValidationError, match="cannot shrink"):
            PostSaleHandler(uow, POLICY).handle(first.order_id)

        assert _sales(uow, first.order_id)[0].amount == Decimal("90.00")
        assert uow.wallets.get_by_producer("prod-a").balance == Money.of("90.00")

    def test_sale_metadata_lists_lines(self, uow):
        booking = BookSlotHandler(uow).handle(1, "alice", "4", now=T0)
        PostSaleHandler(uow, POLICY).handle(booking.order_id)

        metadata = json.loads(_sales(uow, booking.order_id)[0].metadata)

        assert metadata["grossAmount"] == "80.00"
        assert metadata["fee"] == "8.00"
        assert metadata["netAmount"] == "72.00"
        assert metadata["platformFeePercentage"] == "10"
        assert metadata["items"] == [{"product_id": "1", "quantity": "4.000", "price": "20.00"}]

    def test_unknown_order(self, uow):
        with pytest.raises(EntityNotFoundError):
            PostSaleHandler(uow, POLICY).handle(42)


class TestSettlePending:

    def test_settles_once(self, uow):
        booking = BookSlotHandler(uow).handle(1, "alice", "4", now=T0)
        TransitionOrderHandler(uow, POLICY).handle(booking.order_id, "PENDING", now=T0)
        settle = SettlePendingHandler(uow, POLICY)

        assert settle.handle(booking.order_id) == 1
        assert settle.handle(booking.order_id) == 0

        wallet = uow.wallets.get_by_producer("prod-a")
        assert wallet.balance == Money.of("72.00")
        assert wallet.pending_balance == Money.zero()
        assert _sales(uow, booking.order_id)[0].status == TransactionStatus.COMPLETED
