"""Retry policy for idempotent store reads.

Only reads are retried. Writes surface StorageUnavailableError immediately so
that a booking is never inserted twice.
"""

import logging
import time
from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from django.db import transaction

from scheduling.conf import get_setting
from scheduling.domain.errors import StorageUnavailableError

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def _in_transaction() -> bool:
    # A failed statement poisons the surrounding transaction, so retrying
    # inside it cannot succeed.
    return transaction.get_connection().in_atomic_block


def retry_reads(func: Callable[P, R]) -> Callable[P, R]:
    """Retry a read on StorageUnavailableError with exponential backoff."""

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        attempts = max(1, int(get_setting("STORAGE_READ_ATTEMPTS")))
        backoff_seconds = float(get_setting("STORAGE_RETRY_BACKOFF_SECONDS"))

        for attempt in range(attempts):
            try:
                return func(*args, **kwargs)
            except StorageUnavailableError:
                if attempt == attempts - 1 or _in_transaction():
                    logger.error(
                        "Read %s failed after %d attempt(s)",
                        func.__name__,
                        attempt + 1,
                    )
                    raise
                wait_time = backoff_seconds * (2**attempt)
                logger.warning(
                    "Attempt %d/%d failed for %s, retrying in %.2fs",
                    attempt + 1,
                    attempts,
                    func.__name__,
                    wait_time,
                )
                time.sleep(wait_time)

        raise RuntimeError("Retry failed without capturing exception")

    return wrapper
