"""Suspension points: frame boundaries and bounded UI polling."""

import asyncio
from typing import Awaitable, Callable

from .environment import Scene


class UITimeoutError(Exception):
    """Raised when the UI does not reach the expected state in time."""
    pass


async def wait_frames(scene: Scene, count: int = 1) -> None:
    """Wait for `count` consecutive frame boundaries."""
    for _ in range(count):
        await scene.next_frame()


async def wait_for_ui(
    condition: Callable[[], Awaitable[bool]],
    timeout: float = 2.0,
    interval: float = 0.05,
    description: str = "UI update",
) -> None:
    """
    Poll `condition` until it returns True.

    Args:
        condition: Async predicate checked on every poll
        timeout: Seconds before giving up
        interval: Seconds between polls
        description: Used in the timeout message

    Raises:
        UITimeoutError: condition still False after `timeout`
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout

    while True:
        if await condition():
            return
        if loop.time() >= deadline:
            raise UITimeoutError(f"Timed out after {timeout}s waiting for {description}")
        await asyncio.sleep(interval)
