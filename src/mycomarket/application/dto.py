"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from mycomarket.domain.model.booking import Booking
from mycomarket.domain.model.delivery_slot import DeliverySlot
from mycomarket.domain.model.order import Order
from mycomarket.domain.model.wallet import WalletTransaction
from mycomarket.domain.model.withdrawal import Withdrawal


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single cart line as displayed to the user."""

    product_name: str
    quantity: str
    unit_price: str  # formatted, e.g. "15.00 CHF"
    line_total: str


@dataclass(frozen=True)
class BookingDTO:
    id: int
    slot_id: int
    order_id: int
    product_id: str
    quantity: str
    price: str
    line_total: str
    status: str
    expires_at: str | None

    @staticmethod
    def from_domain(booking: Booking) -> BookingDTO:
        return BookingDTO(
            id=booking.id,  # type: ignore[arg-type]
            slot_id=booking.slot_id,
            order_id=booking.order_id,
            product_id=booking.product_id,
            quantity=str(booking.quantity),
            price=str(booking.price),
            line_total=str(booking.line_total),
            status=booking.status.value,
            expires_at=(
                booking.expires_at.strftime("%Y-%m-%d %H:%M UTC")
                if booking.expires_at else None
            ),
        )


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    user_id: str
    status: str
    items: list[OrderLineItemDTO]
    bookings: list[BookingDTO]
    total: str
    platform_fee: str | None
    created_at: str

    @staticmethod
    def from_domain(order: Order, bookings: Iterable[Booking] = ()) -> OrderDTO:
        return OrderDTO(
            id=order.id,  # type: ignore[arg-type]
            user_id=order.user_id,
            status=order.status.value,
            items=[
                OrderLineItemDTO(
                    product_name=item.product_name,
                    quantity=str(item.quantity),
                    unit_price=str(item.unit_price),
                    line_total=str(item.line_total),
                )
                for item in order.items
            ],
            bookings=[BookingDTO.from_domain(b) for b in bookings],
            total=str(order.total),
            platform_fee=(
                str(order.platform_fee) if order.platform_fee is not None else None
            ),
            created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        )


@dataclass(frozen=True)
class SlotDTO:
    id: int
    product_id: str
    date: str
    max_capacity: str
    reserved: str
    remaining: str
    is_available: bool

    @staticmethod
    def from_domain(slot: DeliverySlot) -> SlotDTO:
        return SlotDTO(
            id=slot.id,  # type: ignore[arg-type]
            product_id=slot.product_id,
            date=slot.date.isoformat(),
            max_capacity=str(slot.max_capacity),
            reserved=str(slot.reserved),
            remaining=str(slot.remaining_capacity),
            is_available=slot.is_available,
        )


@dataclass(frozen=True)
class TransactionDTO:
    id: int
    type: str
    status: str
    amount: str
    order_id: int | None
    description: str

    @staticmethod
    def from_domain(tx: WalletTransaction) -> TransactionDTO:
        return TransactionDTO(
            id=tx.id,  # type: ignore[arg-type]
            type=tx.type.value,
            status=tx.status.value,
            amount=f"{tx.amount:.2f}",
            order_id=tx.order_id,
            description=tx.description,
        )


@dataclass(frozen=True)
class WithdrawalDTO:
    id: int
    amount: str
    status: str
    requested_at: str
    processed_at: str | None
    processor_note: str | None

    @staticmethod
    def from_domain(withdrawal: Withdrawal) -> WithdrawalDTO:
        return WithdrawalDTO(
            id=withdrawal.id,  # type: ignore[arg-type]
            amount=str(withdrawal.amount),
            status=withdrawal.status.value,
            requested_at=withdrawal.requested_at.strftime("%Y-%m-%d %H:%M UTC"),
            processed_at=(
                withdrawal.processed_at.strftime("%Y-%m-%d %H:%M UTC")
                if withdrawal.processed_at else None
            ),
            processor_note=withdrawal.processor_note,
        )


@dataclass(frozen=True)
class WalletDTO:
    """Output: a producer's balances with recent activity."""

    producer_id: str
    balance: str
    pending_balance: str
    total_earned: str
    total_withdrawn: str
    transactions: list[TransactionDTO]
    withdrawals: list[WithdrawalDTO]
