"""Async utilities for running blocking I/O off the event loop."""

import asyncio
import logging
from typing import Any, Callable, TypeVar

T = TypeVar("T")
logger = logging.getLogger(__name__)


async def run_sync(
    func: Callable[..., T], *args: Any, **kwargs: Any
) -> T:
    """Run a synchronous function in a thread pool without blocking the event loop.

    Used for the ``requests`` transport and for SQLite / file store I/O.

    Args:
        func: Synchronous function to call
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        Result of func(*args, **kwargs)

    Example:
        response = await run_sync(session.get, url, timeout=20)
    """
    return await asyncio.to_thread(func, *args, **kwargs)
