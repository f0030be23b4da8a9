"""SQLAlchemy table mappings.

Money is stored as integer cents and quantities as integer thousandths,
so conditional updates compare exact integers on every backend.
Timestamps are written in UTC.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    LargeBinary,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from mycomarket.domain.model.value_objects import CENTS, QUANTITY_STEP, Money


class Base(DeclarativeBase):
    pass


# --- Unit conversion ----------------------------------------------------------

def to_cents(money: Money | Decimal) -> int:
    amount = money.amount if isinstance(money, Money) else money
    return int(amount / CENTS)


def from_cents(cents: int) -> Decimal:
    return Decimal(cents) * CENTS


def to_milli(quantity: Decimal) -> int:
    return int(quantity / QUANTITY_STEP)


def from_milli(milli: int) -> Decimal:
    return Decimal(milli) * QUANTITY_STEP


def to_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# --- Tables -------------------------------------------------------------------

class ProductRow(Base):
    __tablename__ = "catalog_products"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    producer_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    price_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    unit: Mapped[str] = mapped_column(String(16), nullable=False, default="kg")


class StockRow(Base):
    __tablename__ = "product_stock"

    product_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    quantity_milli: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)


class SlotRow(Base):
    __tablename__ = "delivery_slots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[str] = mapped_column(String(64), nullable=False)
    slot_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    max_capacity_milli: Mapped[int] = mapped_column(BigInteger, nullable=False)
    reserved_milli: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (Index("ix_delivery_slots_product_date", "product_id", "date"),)


class OrderRow(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    total_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    platform_fee_cents: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    metadata_: Mapped[bytes] = mapped_column("metadata", LargeBinary, nullable=False, default=b"")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    items: Mapped[list[OrderItemRow]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemRow.position",
    )


class OrderItemRow(Base):
    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    product_id: Mapped[str] = mapped_column(String(64), nullable=False)
    producer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    product_name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity_milli: Mapped[int] = mapped_column(BigInteger, nullable=False)
    unit_price_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)

    order: Mapped[OrderRow] = relationship(back_populates="items")


class BookingRow(Base):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slot_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)  # slots may be deleted
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"), nullable=False, index=True)
    product_id: Mapped[str] = mapped_column(String(64), nullable=False)
    producer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    quantity_milli: Mapped[int] = mapped_column(BigInteger, nullable=False)
    price_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("ix_bookings_status_expires", "status", "expires_at"),)


class WalletRow(Base):
    __tablename__ = "wallets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    producer_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    balance_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    pending_balance_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_earned_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_withdrawn_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)


class WithdrawalRow(Base):
    __tablename__ = "withdrawals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    wallet_id: Mapped[int] = mapped_column(ForeignKey("wallets.id"), nullable=False, index=True)
    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    bank_details: Mapped[bytes] = mapped_column(LargeBinary, nullable=False, default=b"")
    requested_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    processor_note: Mapped[str | None] = mapped_column(Text, nullable=True)


class TransactionRow(Base):
    __tablename__ = "wallet_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    wallet_id: Mapped[int] = mapped_column(ForeignKey("wallets.id"), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)  # signed
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    order_id: Mapped[int | None] = mapped_column(ForeignKey("orders.id"), nullable=True, index=True)
    withdrawal_id: Mapped[int | None] = mapped_column(
        ForeignKey("withdrawals.id"), nullable=True, index=True
    )
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    metadata_: Mapped[bytes] = mapped_column("metadata", LargeBinary, nullable=False, default=b"")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        # One SALE line per producer wallet and order.
        UniqueConstraint("wallet_id", "order_id", "type", name="uq_wallet_tx_wallet_order_type"),
    )
