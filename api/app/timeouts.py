"""Per-request time budget for orchestrated storage and repository calls."""

import asyncio
from typing import Awaitable, TypeVar

from app.errors import OperationTimeoutError
from app.logging_config import logger

T = TypeVar("T")


async def with_timeout(operation: str, awaitable: Awaitable[T], timeout: float) -> T:
    """Run ``awaitable`` under a single wall-clock budget.

    Every await inside the wrapped coroutine shares the budget; when it runs
    out the in-flight call is cancelled. Side effects that already completed
    are left in place.

    Raises:
        OperationTimeoutError: If the budget is exceeded
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.error("Operation timed out", operation=operation, timeout_s=timeout)
        raise OperationTimeoutError(f"{operation} timed out after {timeout:g}s") from e
