import functools
import logging
import random
import time

from django.conf import settings
from django.db import OperationalError, transaction

from .exceptions import ConcurrencyConflict

logger = logging.getLogger(__name__)


def atomic_with_retry(func):
    """Run ``func`` in its own transaction, retrying on lock/serialization failures.

    Attempts are spaced by a jittered backoff that grows with each attempt
    (``BILLING_RETRY_BACKOFF`` seconds per step). A retry only happens when
    this is the outermost atomic block; inside an enclosing transaction the
    failure surfaces immediately as ConcurrencyConflict since the outer
    block is already broken.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        attempts = max(1, settings.BILLING_TRANSACTION_RETRIES)
        nested   = transaction.get_connection().in_atomic_block
        for attempt in range(1, attempts + 1):
            try:
                with transaction.atomic():
                    return func(*args, **kwargs)
            except OperationalError as exc:
                if nested or attempt == attempts:
                    raise ConcurrencyConflict(
                        f'{func.__name__} failed after {attempt} attempt(s): {exc}',
                        attempts=attempt,
                    ) from exc
                delay = random.uniform(0, settings.BILLING_RETRY_BACKOFF * attempt)
                logger.warning('%s hit %s, retrying in %.3fs (%d/%d)',
                               func.__name__, exc, delay, attempt, attempts)
                time.sleep(delay)
    return wrapper
