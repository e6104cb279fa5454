"""Async utilities for running pure connector passes in worker threads."""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Sequence, TypeVar

T = TypeVar("T")
logger = logging.getLogger(__name__)


def make_semaphore(max_parallel: int = 4) -> asyncio.Semaphore:
    """Create the semaphore bounding concurrent connector passes.

    One semaphore is created per report run, inside the running event loop,
    so that independent runs never share a limit.
    """
    logger.debug(
        "Connector pass semaphore initialized: max_parallel=%d",
        max_parallel,
    )
    return asyncio.Semaphore(max_parallel)


async def run_sync(
    func: Callable[..., T], *args: Any, **kwargs: Any
) -> T:
    """Run a synchronous function in a thread pool without blocking the event loop.

    Args:
        func: Synchronous function to call
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        Result of func(*args, **kwargs)
    """
    return await asyncio.to_thread(func, *args, **kwargs)


async def run_sync_limited(
    semaphore: asyncio.Semaphore | None,
    func: Callable[..., T],
    *args: Any,
    **kwargs: Any,
) -> T:
    """Run a synchronous function in a thread pool, bounded by *semaphore*.

    Runs unbounded if *semaphore* is None.

    Example:
        semaphore = make_semaphore(config.max_parallel_connectors)
        section = await run_sync_limited(semaphore, build_pass, pilot, prod)
    """
    if semaphore is None:
        return await asyncio.to_thread(func, *args, **kwargs)
    async with semaphore:
        return await asyncio.to_thread(func, *args, **kwargs)


async def gather_limited(
    coros: Sequence[Coroutine[Any, Any, T]],
) -> list[T]:
    """Run coroutines concurrently and return results in input order.

    Each coroutine should use run_sync_limited internally.  Exceptions
    propagate from the first failure; a started thread still runs to
    completion.
    """
    return list(await asyncio.gather(*coros))
