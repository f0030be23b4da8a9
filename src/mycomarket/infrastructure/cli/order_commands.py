"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from mycomarket.application.add_order_item import AddOrderItemHandler
from mycomarket.application.dto import OrderDTO
from mycomarket.application.remove_order_item import RemoveOrderItemHandler
from mycomarket.application.show_order import OrderHistoryHandler, ShowOrderHandler
from mycomarket.application.transition_order import TransitionOrderHandler
from mycomarket.domain.exceptions import DomainException
from mycomarket.domain.model.order import OrderStatus
from mycomarket.infrastructure.bootstrap import (
    ledger_policy,
    notifier,
    retry_attempts,
    unit_of_work,
)


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"Client:   {dto.user_id}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo()

    if dto.items:
        click.echo(f"  {'Product':<20} {'Qty':>8} {'Price':>12} {'Total':>12}")
        click.echo(f"  {'-'*55}")
        for item in dto.items:
            click.echo(
                f"  {item.product_name:<20} {item.quantity:>8} "
                f"{item.unit_price:>12} {item.line_total:>12}"
            )
        click.echo()

    if dto.bookings:
        click.echo(f"  {'Booking':<8} {'Slot':>6} {'Qty':>8} {'Price':>12} {'Total':>12} {'Status':>10}")
        click.echo(f"  {'-'*61}")
        for b in dto.bookings:
            click.echo(
                f"  #{b.id:<7} #{b.slot_id:>5} {b.quantity:>8} "
                f"{b.price:>12} {b.line_total:>12} {b.status:>10}"
            )
        click.echo()

    click.echo(f"  {'Order Total':<27} {dto.total:>20}")
    if dto.platform_fee is not None:
        click.echo(f"  {'Platform fee':<27} {dto.platform_fee:>20}")


@click.command("item-add")
@click.option("--user", "user_id", required=True, help="Client user ID.")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, help="Quantity.")
@click.option("--order", "order_id", default=None, type=int,
              help="Cart (DRAFT order) to add to; a new one is opened if omitted.")
def order_item_add(user_id: str, product_id: str, quantity: str, order_id: int | None) -> None:
    """Put a product in the cart (reserves stock)."""
    handler = AddOrderItemHandler(unit_of_work(), retry_attempts=retry_attempts())

    try:
        dto = handler.handle(user_id, product_id, quantity, order_id=order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("item-remove")
@click.option("--user", "user_id", required=True, help="Client user ID.")
@click.option("--order", "order_id", required=True, type=int, help="Order ID.")
@click.option("--product", "product_id", required=True, help="Product ID.")
def order_item_remove(user_id: str, order_id: int, product_id: str) -> None:
    """Remove a product from the cart (releases its stock)."""
    handler = RemoveOrderItemHandler(unit_of_work(), retry_attempts=retry_attempts())

    try:
        dto = handler.handle(user_id, order_id, product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("transition")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--status", required=True,
              type=click.Choice([s.value for s in OrderStatus if s != OrderStatus.DRAFT]),
              help="Target status.")
def order_transition(order_id: int, status: str) -> None:
    """Move an order to a new status."""
    handler = TransitionOrderHandler(
        unit_of_work(),
        ledger_policy(),
        notifier=notifier(),
        retry_attempts=retry_attempts(),
    )

    try:
        dto = handler.handle(order_id, status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} is now {dto.status}.")


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(unit_of_work())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("history")
@click.option("--user", "user_id", required=True, help="Client user ID.")
def order_history(user_id: str) -> None:
    """List a client's placed orders, newest first."""
    orders = OrderHistoryHandler(unit_of_work()).handle(user_id)

    if not orders:
        click.echo("No orders found.")
        return

    for dto in orders:
        click.echo(f"#{dto.id:<6} {dto.status:<16} {dto.total:>14}  {dto.created_at}")
