"""
Timeout helpers for outbound network calls.

Every call to the database or the mail transport goes through
``with_timeout`` so that a slow dependency surfaces as an
``OperationTimeoutError`` instead of hanging the request.
"""

import asyncio
from typing import Awaitable, TypeVar

from .exceptions import OperationTimeoutError

T = TypeVar("T")


async def with_timeout(awaitable: Awaitable[T], timeout: float, operation: str) -> T:
    """
    Await ``awaitable`` for at most ``timeout`` seconds.

    Args:
        awaitable: Coroutine or future to wait for.
        timeout: Budget in seconds.
        operation: Human-readable name used in the error.

    Raises:
        OperationTimeoutError: If the budget is exceeded.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError as e:
        raise OperationTimeoutError(operation, timeout) from e
