"""Periodic expiry sweep, run by APScheduler.

The 2-hour hold on bookings is enforced here and nowhere else.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler

from mycomarket.application.sweep_expired_bookings import SweepExpiredBookingsHandler

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "booking-expiry-sweep"


def run_sweep(handler_factory: Callable[[], SweepExpiredBookingsHandler]) -> list[int]:
    released = handler_factory().handle()
    logger.debug("Sweep pass released %d bookings", len(released))
    return released


def add_sweep_job(
    scheduler: BaseScheduler,
    handler_factory: Callable[[], SweepExpiredBookingsHandler],
    interval_seconds: int,
) -> None:
    # One sweep at a time; missed runs collapse into the next one.
    scheduler.add_job(
        run_sweep,
        "interval",
        seconds=interval_seconds,
        args=[handler_factory],
        id=SWEEP_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )


def build_scheduler(
    handler_factory: Callable[[], SweepExpiredBookingsHandler],
    interval_seconds: int,
) -> BlockingScheduler:
    scheduler = BlockingScheduler(timezone="UTC")
    add_sweep_job(scheduler, handler_factory, interval_seconds)
    logger.info("Expiry sweep scheduled every %ss", interval_seconds)
    return scheduler
