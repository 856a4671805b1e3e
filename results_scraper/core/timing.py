"""
Clock abstraction and poll-until-deadline primitive
Every wait in the pipeline goes through here so tests can drive time
"""

import asyncio
import inspect
import logging
import time
from typing import Awaitable, Callable, Union

logger = logging.getLogger(__name__)

Predicate = Callable[[], Union[bool, Awaitable[bool]]]


class Clock:
    """Monotonic time source with an awaitable sleep"""

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)


SYSTEM_CLOCK = Clock()


async def poll_until(
    predicate: Predicate,
    timeout: float,
    interval: float = 0.25,
    clock: Clock = SYSTEM_CLOCK
) -> bool:
    """
    Evaluate predicate until it is truthy or the deadline passes

    The predicate is always evaluated at least once, and once more at the
    deadline, so a zero timeout degrades to a single check.

    Args:
        predicate: Sync or async callable returning a bool
        timeout: Seconds until giving up
        interval: Seconds between evaluations
        clock: Time source

    Returns:
        True if the predicate held before the deadline, False otherwise
    """
    deadline = clock.monotonic() + max(0.0, timeout)

    while True:
        outcome = predicate()
        if inspect.isawaitable(outcome):
            outcome = await outcome
        if outcome:
            return True

        remaining = deadline - clock.monotonic()
        if remaining <= 0:
            return False

        await clock.sleep(min(interval, remaining))
