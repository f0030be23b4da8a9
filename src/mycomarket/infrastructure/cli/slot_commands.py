"""CLI commands for delivery slots."""

from __future__ import annotations

from datetime import datetime

import click

from mycomarket.application.create_slot import CreateSlotHandler
from mycomarket.application.delete_slot import DeleteSlotHandler
from mycomarket.application.dto import SlotDTO
from mycomarket.application.list_slots import ListSlotsHandler
from mycomarket.application.update_slot import UpdateSlotHandler
from mycomarket.domain.exceptions import DomainException
from mycomarket.infrastructure.bootstrap import retry_attempts, unit_of_work


def _display_slot(dto: SlotDTO) -> None:
    state = "open" if dto.is_available else "closed"
    click.echo(
        f"Slot #{dto.id}  product={dto.product_id}  date={dto.date}  "
        f"capacity={dto.max_capacity}  reserved={dto.reserved}  "
        f"remaining={dto.remaining}  ({state})"
    )


@click.command("create")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--date", "slot_date", required=True, type=click.DateTime(formats=["%Y-%m-%d"]),
              help="Delivery date (YYYY-MM-DD).")
@click.option("--capacity", required=True, help="Maximum quantity deliverable that day.")
def slot_create(product_id: str, slot_date: datetime, capacity: str) -> None:
    """Open a delivery slot for a product."""
    handler = CreateSlotHandler(unit_of_work())

    try:
        dto = handler.handle(product_id, slot_date.date(), capacity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_slot(dto)


@click.command("update")
@click.option("--id", "slot_id", required=True, type=int, help="Slot ID.")
@click.option("--capacity", default=None, help="New maximum capacity.")
@click.option("--open/--close", "is_available", default=None, help="Open or close the slot.")
def slot_update(slot_id: int, capacity: str | None, is_available: bool | None) -> None:
    """Resize, open or close a delivery slot."""
    if capacity is None and is_available is None:
        raise click.UsageError("Nothing to update: pass --capacity and/or --open/--close")

    handler = UpdateSlotHandler(unit_of_work(), retry_attempts=retry_attempts())

    try:
        dto = handler.handle(slot_id, max_capacity=capacity, is_available=is_available)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_slot(dto)


@click.command("delete")
@click.option("--id", "slot_id", required=True, type=int, help="Slot ID.")
def slot_delete(slot_id: int) -> None:
    """Delete a delivery slot that holds no reservations."""
    handler = DeleteSlotHandler(unit_of_work())

    try:
        handler.handle(slot_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Slot #{slot_id} deleted.")


@click.command("list")
@click.option("--product", "product_id", required=True, help="Product ID.")
def slot_list(product_id: str) -> None:
    """List the delivery slots of a product."""
    slots = ListSlotsHandler(unit_of_work()).handle(product_id)

    if not slots:
        click.echo("No delivery slots found.")
        return

    for dto in slots:
        _display_slot(dto)
