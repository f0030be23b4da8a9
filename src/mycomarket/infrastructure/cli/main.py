import click

from mycomarket.infrastructure.bootstrap import init_db
from mycomarket.infrastructure.cli.booking_commands import (
    booking_book,
    booking_cancel,
    booking_change,
)
from mycomarket.infrastructure.cli.order_commands import (
    order_history,
    order_item_add,
    order_item_remove,
    order_show,
    order_transition,
)
from mycomarket.infrastructure.cli.product_commands import (
    product_add,
    product_list,
    product_update,
    stock_restock,
)
from mycomarket.infrastructure.cli.slot_commands import (
    slot_create,
    slot_delete,
    slot_list,
    slot_update,
)
from mycomarket.infrastructure.cli.sweep_commands import sweep_run, sweep_schedule
from mycomarket.infrastructure.cli.wallet_commands import (
    wallet_show,
    withdrawal_pending,
    withdrawal_request,
    withdrawal_resolve,
)
from mycomarket.infrastructure.config import get_settings
from mycomarket.infrastructure.logging_config import setup_logging


@click.group()
def cli() -> None:
    """mycomarket: reservations and producer ledger for the mushroom marketplace"""
    setup_logging(get_settings().log_level)


@cli.group()
def db() -> None:
    """Manage the database."""


@db.command("init")
def db_init() -> None:
    """Create the database tables."""
    init_db()
    click.echo("Database initialised.")


@cli.group()
def product() -> None:
    """Manage catalog products."""


@cli.group()
def stock() -> None:
    """Manage product stock."""


@cli.group()
def slot() -> None:
    """Manage delivery slots."""


@cli.group()
def booking() -> None:
    """Manage slot bookings."""


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def wallet() -> None:
    """Inspect producer wallets."""


@cli.group()
def withdrawal() -> None:
    """Manage producer withdrawals."""


@cli.group()
def sweep() -> None:
    """Release expired booking holds."""


# Register subcommands
product.add_command(product_add)
product.add_command(product_list)
product.add_command(product_update)
stock.add_command(stock_restock)
slot.add_command(slot_create)
slot.add_command(slot_update)
slot.add_command(slot_delete)
slot.add_command(slot_list)
booking.add_command(booking_book)
booking.add_command(booking_cancel)
booking.add_command(booking_change)
order.add_command(order_item_add)
order.add_command(order_item_remove)
order.add_command(order_transition)
order.add_command(order_show)
order.add_command(order_history)
wallet.add_command(wallet_show)
withdrawal.add_command(withdrawal_request)
withdrawal.add_command(withdrawal_resolve)
withdrawal.add_command(withdrawal_pending)
sweep.add_command(sweep_run)
sweep.add_command(sweep_schedule)
