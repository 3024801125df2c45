"""
async_utils.py - Run session coroutines from synchronous callers.

Session.run_sync uses this so scripts and tests that are not themselves
async can drive a flow to completion.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from typing import Any, Coroutine, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_async_safely(coro: Coroutine[Any, Any, T]) -> T:
    """Run ``coro`` to completion and return its result.

    Without a running loop this is ``asyncio.run``. Inside a running loop the
    caller's loop must not be re-entered, so the coroutine gets its own loop
    on a worker thread and a warning is logged.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    logger.warning("run_async_safely called from a running event loop; use 'await' instead")
    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()
