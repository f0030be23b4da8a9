"""Bounded retry for operations that lost an optimistic-concurrency race."""

from __future__ import annotations

import functools
import logging
import time

from mycomarket.domain.exceptions import ConcurrencyConflict

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 3
BACKOFF_SECONDS = 0.01


def retry_on_conflict(method):
    """Re-run a handler method when its unit of work hit a write conflict.

    The attempt count comes from the handler's ``retry_attempts``
    attribute.  After the last attempt the conflict propagates.
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        attempts = max(1, getattr(self, "retry_attempts", DEFAULT_ATTEMPTS))
        for attempt in range(1, attempts + 1):
            try:
                return method(self, *args, **kwargs)
            except ConcurrencyConflict as exc:
                if attempt == attempts:
                    logger.error(
                        "%s gave up after %d attempts: %s",
                        type(self).__name__, attempts, exc,
                    )
                    raise
                logger.warning(
                    "%s conflict on attempt %d, retrying: %s",
                    type(self).__name__, attempt, exc,
                )
                time.sleep(BACKOFF_SECONDS * attempt)

    return wrapper
