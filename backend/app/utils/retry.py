"""Bounded retries for transient storage failures."""
import asyncio
import uuid
from typing import Callable, Optional, TypeVar

from app.config import settings
from app.utils.exceptions import TransientStorageError
from app.utils.logger import logger

T = TypeVar("T")


def new_mutation_id() -> str:
    """Write token shared by every attempt of one logical write."""
    return str(uuid.uuid4())


async def with_storage_retries(
    operation: Callable[[], T],
    attempts: Optional[int] = None,
    delay_seconds: Optional[float] = None,
) -> T:
    """
    Run ``operation``, retrying only TransientStorageError.

    A write may have been stored before its failure was reported, so write
    operations must be safe to repeat (see ``new_mutation_id``).

    Args:
        operation: Zero-argument callable doing one repository call
        attempts: Total attempts (defaults to STORAGE_RETRY_ATTEMPTS)
        delay_seconds: Base delay, doubled after every failure

    Returns:
        The operation's result

    Raises:
        TransientStorageError: after the last failed attempt
    """
    attempts = max(1, attempts if attempts is not None else settings.storage_retry_attempts)
    delay = settings.storage_retry_delay_seconds if delay_seconds is None else delay_seconds

    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except TransientStorageError:
            if attempt == attempts:
                raise
            logger.warning(f"Transient storage failure (attempt {attempt}/{attempts}), retrying")
            if delay > 0:
                await asyncio.sleep(delay * (2 ** (attempt - 1)))
