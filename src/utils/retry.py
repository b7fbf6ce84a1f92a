"""
RoMod - Retry Utilities
=======================

Retry logic for external API calls with bounded exponential backoff.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
from typing import Any, Callable, Optional, Tuple, Type

import aiohttp

from src.core.errors import RelayFailure, RelayRejected
from src.core.logger import logger

# Exceptions that should trigger a retry
RETRYABLE_EXCEPTIONS: Tuple[Type[Exception], ...] = (
    RelayFailure,
    aiohttp.ClientError,
    asyncio.TimeoutError,
    ConnectionError,
)

# Subclasses of the above that mean the call can never succeed
NON_RETRYABLE_EXCEPTIONS: Tuple[Type[Exception], ...] = (
    RelayRejected,
)


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Delay before retry number attempt + 1 (0-based): base, 2*base, 4*base..."""
    return min(base_delay * (2 ** attempt), max_delay)


async def retry_async(
    coro_func: Callable[..., Any],
    *args,
    max_attempts: int = 3,
    base_delay: float = 2.0,
    max_delay: float = 30.0,
    exceptions: Tuple[Type[Exception], ...] = RETRYABLE_EXCEPTIONS,
    give_up: Tuple[Type[Exception], ...] = NON_RETRYABLE_EXCEPTIONS,
    label: Optional[str] = None,
    **kwargs,
) -> Any:
    """
    Call an async function until it succeeds or attempts run out.

    Args:
        coro_func: Async function to call.
        *args: Arguments to pass to the function.
        max_attempts: Total number of calls, including the first.
        base_delay: Delay after the first failure (seconds).
        max_delay: Cap on any single delay (seconds).
        exceptions: Exception types that trigger a retry. Anything else
            propagates immediately.
        give_up: Matching exception types that propagate immediately even
            though they also match `exceptions`.
        label: Name used in log lines.
        **kwargs: Keyword arguments to pass to the function.

    Returns:
        Result of the coroutine function.

    Raises:
        The last exception if every attempt fails.
    """
    name = label or getattr(coro_func, "__name__", "call")
    last_exception: Optional[BaseException] = None

    for attempt in range(max_attempts):
        try:
            return await coro_func(*args, **kwargs)
        except give_up as e:
            logger.warning(f"Not retrying: {name}", [
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:100]),
            ])
            raise
        except exceptions as e:
            last_exception = e

            if attempt < max_attempts - 1:
                delay = backoff_delay(attempt, base_delay, max_delay)
                logger.warning(f"Retry {attempt + 1}/{max_attempts - 1}: {name}", [
                    ("Error Type", type(e).__name__),
                    ("Error", str(e)[:100]),
                    ("Next Attempt In", f"{delay:.1f}s"),
                ])
                await asyncio.sleep(delay)
            else:
                logger.error(f"All {max_attempts} attempts failed: {name}", [
                    ("Error Type", type(e).__name__),
                    ("Error", str(e)[:200]),
                ])

    raise last_exception


__all__ = [
    "RETRYABLE_EXCEPTIONS",
    "NON_RETRYABLE_EXCEPTIONS",
    "backoff_delay",
    "retry_async",
]
