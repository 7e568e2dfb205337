"""
Concurrency utilities.

Provides a `synchronized` decorator that acquires an instance `_lock` if present,
and `run_blocking` for moving blocking storage calls off the event loop.
"""

from __future__ import annotations

import asyncio
from functools import partial, wraps
from typing import Any, Callable, TypeVar

T = TypeVar("T")


def synchronized(func: Callable) -> Callable:
    """Decorator that acquires `self._lock` if present on the instance.

    Intended for synchronous methods only; blocking callers are moved to a
    worker thread with `run_blocking` before they reach the lock.
    """

    @wraps(func)
    def _wrapped(*args, **kwargs):
        self = args[0] if args else None
        lock = getattr(self, "_lock", None)
        if lock is None:
            return func(*args, **kwargs)
        with lock:
            return func(*args, **kwargs)

    return _wrapped


async def run_blocking(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking callable in the default executor and await its result."""
    loop = asyncio.get_running_loop()
    if kwargs:
        func = partial(func, **kwargs)
    return await loop.run_in_executor(None, func, *args)
