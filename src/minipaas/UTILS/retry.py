"""
Bounded re-invocation of a failing coroutine with a constant delay.
"""
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt, wait_fixed

from ..MODELS.options import RetryOptions

logger = logging.getLogger(__name__)

T = TypeVar("T")

def _log_failed_attempt(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.debug(
        "attempt %d of %s failed: %s",
        retry_state.attempt_number,
        getattr(retry_state.fn, "__name__", "operation"),
        error,
    )

async def retry(operation: Callable[..., Awaitable[T]],
                *args: Any,
                options: Optional[RetryOptions] = None) -> T:
    """
    Awaits ``operation(*args)`` until it succeeds or the attempts run out.

    Every attempt receives the same arguments. Attempts run one at a time,
    separated by ``options.delay`` seconds. Once the attempts are exhausted the
    last error of the operation is re-raised unchanged.

    Args:
        operation: Coroutine function to invoke.
        *args: Positional arguments passed to every attempt.
        options (Optional[RetryOptions]): Attempt count and delay.

    Returns:
        Whatever the first successful attempt returned.
    """
    options = options or RetryOptions()
    retrying = AsyncRetrying(
        stop=stop_after_attempt(options.effective_attempts),
        wait=wait_fixed(options.delay),
        after=_log_failed_attempt,
        reraise=True,
    )
    return await retrying(operation, *args)
