"""Bridges between futures and async code.

Futures waited on from a coroutine need their continuations delivered by the
running event loop, so install an ``AsyncioScheduler`` (or set
``FUTURA_SCHEDULER=asyncio``) before using these helpers.
"""
import asyncio
import inspect
from typing import Any, Optional

import anyio

from .errors import RejectedError
from .future import Future
from .scheduler import QueueScheduler, Scheduler


def _require_loop_delivery(future: Future) -> None:
    if isinstance(future.scheduler, QueueScheduler):
        raise RuntimeError(
            "Future is delivered by a QueueScheduler that nothing drains while awaiting; "
            "use an AsyncioScheduler (FUTURA_SCHEDULER=asyncio)"
        )


def _as_exception(reason: Any) -> BaseException:
    if isinstance(reason, BaseException):
        return reason
    return RejectedError(reason)


async def wait(future: Future) -> Any:
    """Wait for a future to settle. Returns its value or raises its reason."""
    if future.is_pending:
        _require_loop_delivery(future)
        settled = anyio.Event()
        future.then(lambda _: settled.set(), lambda _: settled.set())
        await settled.wait()

    if future.is_rejected:
        raise _as_exception(future.reason)
    return future.value


def to_asyncio(future: Future, loop: Optional[asyncio.AbstractEventLoop] = None) -> asyncio.Future:
    """Get an asyncio future that mirrors the outcome of ``future``."""
    _require_loop_delivery(future)
    if loop is None:
        loop = asyncio.get_running_loop()
    target = loop.create_future()

    def on_value(value):
        if not target.done():
            target.set_result(value)

    def on_reason(reason):
        if not target.done():
            target.set_exception(_as_exception(reason))

    future.then(on_value, on_reason)
    return target


def from_awaitable(awaitable: Any, scheduler: Optional[Scheduler] = None) -> Future:
    """Run an awaitable on the running loop and return a future for its outcome.

    Plain values are accepted too and give an already fulfilled future.
    """
    if not inspect.isawaitable(awaitable):
        return Future.resolve(awaitable, scheduler)

    def executor(resolve, reject):
        task = asyncio.ensure_future(awaitable)

        def on_done(t: asyncio.Future):
            if t.cancelled():
                reject(asyncio.CancelledError())
            elif t.exception() is not None:
                reject(t.exception())
            else:
                resolve(t.result())

        task.add_done_callback(on_done)

    return Future(executor, scheduler)
