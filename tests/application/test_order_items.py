"""Integration tests for catalog items in the cart."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from mycomarket.application.add_order_item import AddOrderItemHandler
from mycomarket.application.remove_order_item import RemoveOrderItemHandler
from mycomarket.application.show_order import ShowOrderHandler
from mycomarket.application.transition_order import TransitionOrderHandler
from mycomarket.application.update_product import UpdateProductPriceHandler
from mycomarket.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStock,
    InvalidStateTransition,
    ValidationError,
)
from mycomarket.domain.service.wallet_ledger import LedgerPolicy
from tests.fakes import FakeUnitOfWork, seed_product

T0 = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def uow():
    uow = FakeUnitOfWork()
    seed_product(uow, "2", "prod-b", "10.00", stock="20", name="Shiitake")
    return uow


class TestAddOrderItem:

    def test_add_reserves_stock(self, uow):
        dto = AddOrderItemHandler(uow).handle("alice", "2", "3")

        assert dto.status == "DRAFT"
        assert dto.total == "30.00 CHF"
        line = dto.items[0]
        assert (line.product_name, line.quantity, line.unit_price, line.line_total) == (
            "Shiitake", "3", "10.00 CHF", "30.00 CHF",
        )
        assert uow.stock.get("2").quantity == Decimal("17")

    def test_same_product_merges_into_one_line(self, uow):
        handler = AddOrderItemHandler(uow)
        first = handler.handle("alice", "2", "3")

        dto = handler.handle("alice", "2", "1.5", order_id=first.id)

        assert len(dto.items) == 1
        assert dto.items[0].quantity == "4.5"
        assert dto.total == "45.00 CHF"

    def test_price_is_snapshotted(self, uow):
        handler = AddOrderItemHandler(uow)
        first = handler.handle("alice", "2", "3")

        UpdateProductPriceHandler(uow).handle("2", "14.00")
        dto = handler.handle("alice", "2", "1", order_id=first.id)

        assert dto.items[0].unit_price == "10.00 CHF"
        assert dto.total == "40.00 CHF"

    def test_insufficient_stock_changes_nothing(self, uow):
        with pytest.raises(InsufficientStock):
            AddOrderItemHandler(uow).handle("alice", "2", "21")

        assert uow.stock.get("2").quantity == Decimal("20")
        assert uow.orders.get(1) is None

    def test_unknown_product(self, uow):
        with pytest.raises(EntityNotFoundError):
            AddOrderItemHandler(uow).handle("alice", "99", "1")

    def test_someone_elses_cart(self, uow):
        order = AddOrderItemHandler(uow).handle("alice", "2", "1")

        with pytest.raises(ValidationError, match="does not belong"):
            AddOrderItemHandler(uow).handle("mallory", "2", "1", order_id=order.id)

        assert uow.stock.get("2").quantity == Decimal("19")

    def test_checked_out_order_is_frozen(self, uow):
        order = AddOrderItemHandler(uow).handle("alice", "2", "1")
        TransitionOrderHandler(uow, LedgerPolicy()).handle(order.id, "PENDING", now=T0)

        with pytest.raises(InvalidStateTransition):
            AddOrderItemHandler(uow).handle("alice", "2", "1", order_id=order.id)


class TestRemoveOrderItem:

    def test_remove_releases_stock(self, uow):
        order = AddOrderItemHandler(uow).handle("alice", "2", "3")

        dto = RemoveOrderItemHandler(uow).handle("alice", order.id, "2")

        assert dto.items == []
        assert dto.total == "0.00 CHF"
        assert uow.stock.get("2").quantity == Decimal("20")

    def test_product_not_in_cart(self, uow):
        order = AddOrderItemHandler(uow).handle("alice", "2", "3")

        with pytest.raises(ValidationError, match="not in order"):
            RemoveOrderItemHandler(uow).handle("alice", order.id, "7")

    def test_someone_elses_cart(self, uow):
        order = AddOrderItemHandler(uow).handle("alice", "2", "3")

        with pytest.raises(ValidationError):
            RemoveOrderItemHandler(uow).handle("mallory", order.id, "2")

        assert uow.stock.get("2").quantity == Decimal("17")


class TestShowOrder:

    def test_show(self, uow):
        order = AddOrderItemHandler(uow).handle("alice", "2", "3")

        dto = ShowOrderHandler(uow).handle(order.id)

        assert dto.user_id == "alice"
        assert dto.platform_fee is None
        assert dto.bookings == []

    def test_unknown_order(self, uow):
        with pytest.raises(EntityNotFoundError):
            ShowOrderHandler(uow).handle(5)
