"""Async helpers shared by the delivery pipeline and the bot handlers."""

from __future__ import annotations

import asyncio
import functools
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]


async def run_sync(fn: Callable[..., T], *args: object, **kwargs: object) -> T:
    """Run a blocking *fn* (file IO, spreadsheet parsing) off the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(fn, *args, **kwargs))


def jitter(max_jitter: float, rand: Callable[[], float] = random.random) -> float:
    """Return a uniform random delay in ``[0, max_jitter)`` seconds."""
    return rand() * max_jitter


async def sleep_with_jitter(
    base: float,
    max_jitter: float,
    *,
    sleep: SleepFn = asyncio.sleep,
    rand: Callable[[], float] = random.random,
) -> float:
    """Sleep for *base* plus random jitter and return the total delay."""
    delay = base + jitter(max_jitter, rand)
    await sleep(delay)
    return delay
