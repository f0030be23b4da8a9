"""Splitting an order's gross amount between producers and the platform."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from mycomarket.domain.exceptions import ValidationError
from mycomarket.domain.model.booking import Booking
from mycomarket.domain.model.order import OrderItem
from mycomarket.domain.model.value_objects import Money


@dataclass(frozen=True)
class CommissionSplit:
    gross: Money
    fee: Money
    net: Money


@dataclass
class ProducerSale:
    """What one producer sold within one order."""

    producer_id: str
    gross: Money = field(default_factory=Money.zero)
    lines: list[dict] = field(default_factory=list)

    def add_line(self, product_id: str, quantity: Decimal, price: Money) -> None:
        amount = price * quantity
        self.gross = self.gross + amount
        self.lines.append({
            "product_id": product_id,
            "quantity": str(quantity),
            "price": str(price.amount),
        })


def split_commission(gross: Money, percentage: Decimal) -> CommissionSplit:
    """Take ``percentage``% of ``gross`` as fee, rounded half-up to cents."""
    if not Decimal("0") <= percentage <= Decimal("100"):
        raise ValidationError(f"Commission percentage must be within 0..100, got {percentage}")
    fee = gross.percentage(percentage)
    return CommissionSplit(gross=gross, fee=fee, net=gross - fee)


def group_by_producer(
    items: Iterable[OrderItem],
    bookings: Iterable[Booking],
) -> dict[str, ProducerSale]:
    """Sum item and live booking lines per producer."""
    sales: dict[str, ProducerSale] = {}
    for item in items:
        sale = sales.setdefault(item.producer_id, ProducerSale(item.producer_id))
        sale.add_line(item.product_id, item.quantity.value, item.unit_price)
    for booking in bookings:
        if not booking.is_live:
            continue
        sale = sales.setdefault(booking.producer_id, ProducerSale(booking.producer_id))
        sale.add_line(booking.product_id, booking.quantity.value, booking.price)
    return sales
