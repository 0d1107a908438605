"""
Polling helpers shared by the tests.
"""

import asyncio
import time


def wait_until(predicate, timeout: float = 2.0):
    """Poll ``predicate`` from a sync test until it holds."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met in time")
        time.sleep(0.01)


async def async_wait_until(predicate, timeout: float = 2.0):
    """Poll ``predicate`` from inside an event loop until it holds."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)
