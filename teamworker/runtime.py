"""Cancellation through the shared RunnableConfig.

Besides plain asyncio task cancellation, a caller can place an
``asyncio.Event`` under ``config["configurable"]["abort_event"]``. Setting it
abandons the in-flight model or tool call of every worker sharing the config.
"""

import asyncio
from collections.abc import Awaitable
from typing import Any, TypeVar

from langchain_core.runnables import RunnableConfig

from teamworker.exceptions import InvocationCancelledError

ABORT_EVENT_KEY = "abort_event"

T = TypeVar("T")


def get_abort_event(config: RunnableConfig | None) -> asyncio.Event | None:
    if not config:
        return None
    return (config.get("configurable") or {}).get(ABORT_EVENT_KEY)


def raise_if_aborted(config: RunnableConfig | None) -> None:
    event = get_abort_event(config)
    if event is not None and event.is_set():
        raise InvocationCancelledError("Invocation was aborted")


async def run_abortable(awaitable: Awaitable[T], config: RunnableConfig | None) -> T:
    """Await ``awaitable`` unless the config's abort event fires first.

    Raises:
        InvocationCancelledError: If the abort event is set before completion.
    """
    event = get_abort_event(config)
    if event is None:
        return await awaitable

    if event.is_set():
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise InvocationCancelledError("Invocation was aborted")

    task: asyncio.Future[Any] = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(event.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for pending in (task, waiter):
            if not pending.done():
                pending.cancel()

    if task.done() and not task.cancelled():
        return task.result()
    await asyncio.gather(task, return_exceptions=True)
    raise InvocationCancelledError("Invocation was aborted")
