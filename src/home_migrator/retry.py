"""
Bounded retry for fallible filesystem operations.

Operations are retried immediately (no backoff). The final failure is logged
and returned as part of a RetryOutcome rather than raised, so one user's
failure never stops the run.
"""

import logging
from typing import Any, Callable

from .types import RetryOutcome

logger = logging.getLogger(__name__)


def execute_with_retry(
    operation: Callable[[], Any],
    label: str,
    max_retries: int
) -> RetryOutcome:
    """
    Run an operation, retrying on failure.

    At least one attempt is always made, even when max_retries is zero or
    negative.

    Args:
        operation: Zero-argument callable to run
        label: Name of the operation for log messages (e.g. "CopyDirectory:Home:...")
        max_retries: Maximum number of attempts

    Returns:
        RetryOutcome with the attempt count and, if every attempt failed,
        the last exception
    """
    attempt = 0

    while True:
        attempt += 1
        try:
            operation()
            return RetryOutcome(label=label, attempts=attempt)
        except Exception as e:
            if attempt >= max_retries:
                logger.error(
                    f"Operation '{label}' failed after {attempt} attempts: {e}",
                    exc_info=True
                )
                return RetryOutcome(label=label, attempts=attempt, error=e)

            logger.warning(
                f"Operation '{label}' failed on attempt {attempt}: {e}. Retrying..."
            )
