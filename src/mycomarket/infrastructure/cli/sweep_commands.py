"""CLI commands for the booking expiry sweep."""

from __future__ import annotations

import click

from mycomarket.infrastructure.bootstrap import sweep_handler
from mycomarket.infrastructure.config import get_settings
from mycomarket.infrastructure.scheduler import build_scheduler, run_sweep


@click.command("run")
def sweep_run() -> None:
    """Run one expiry sweep pass now."""
    released = run_sweep(sweep_handler)
    click.echo(f"Released {len(released)} expired booking(s).")


@click.command("schedule")
@click.option("--interval", "interval_seconds", default=None, type=int,
              help="Seconds between passes (defaults to the configured interval).")
def sweep_schedule(interval_seconds: int | None) -> None:
    """Run the expiry sweep periodically until interrupted."""
    interval = interval_seconds or get_settings().sweep_interval_seconds
    scheduler = build_scheduler(sweep_handler, interval)
    click.echo(f"Sweeping expired bookings every {interval}s. Press Ctrl+C to stop.")
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        scheduler.shutdown(wait=False)
