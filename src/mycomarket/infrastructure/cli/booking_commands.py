"""CLI commands for delivery-slot bookings."""

from __future__ import annotations

import click

from mycomarket.application.book_slot import BookSlotHandler
from mycomarket.application.cancel_booking import CancelBookingHandler
from mycomarket.application.change_booking_quantity import ChangeBookingQuantityHandler
from mycomarket.application.dto import BookingDTO
from mycomarket.domain.exceptions import DomainException
from mycomarket.infrastructure.bootstrap import ledger_policy, retry_attempts, unit_of_work


def _display_booking(dto: BookingDTO) -> None:
    click.echo(
        f"Booking #{dto.id}  slot=#{dto.slot_id}  product={dto.product_id}  "
        f"qty={dto.quantity} x {dto.price} = {dto.line_total}  ({dto.status})"
    )
    if dto.expires_at:
        click.echo(f"  Held until {dto.expires_at}")


@click.command("book")
@click.option("--slot", "slot_id", required=True, type=int, help="Delivery slot ID.")
@click.option("--user", "user_id", required=True, help="Client user ID.")
@click.option("--quantity", required=True, help="Quantity to hold.")
@click.option("--order", "order_id", default=None, type=int,
              help="Cart (DRAFT order) to add to; a new one is opened if omitted.")
def booking_book(slot_id: int, user_id: str, quantity: str, order_id: int | None) -> None:
    """Hold capacity on a delivery slot for two hours."""
    handler = BookSlotHandler(unit_of_work(), retry_attempts=retry_attempts())

    try:
        dto = handler.handle(slot_id, user_id, quantity, order_id=order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.order_id}")
    _display_booking(dto)


@click.command("cancel")
@click.option("--id", "booking_id", required=True, type=int, help="Booking ID.")
def booking_cancel(booking_id: int) -> None:
    """Cancel a booking and release its hold."""
    handler = CancelBookingHandler(
        unit_of_work(), ledger_policy(), retry_attempts=retry_attempts()
    )

    try:
        dto = handler.handle(booking_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_booking(dto)


@click.command("change")
@click.option("--id", "booking_id", required=True, type=int, help="Booking ID.")
@click.option("--quantity", required=True, help="New quantity.")
def booking_change(booking_id: int, quantity: str) -> None:
    """Change the quantity of a booking."""
    handler = ChangeBookingQuantityHandler(
        unit_of_work(), ledger_policy(), retry_attempts=retry_attempts()
    )

    try:
        dto = handler.handle(booking_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_booking(dto)
