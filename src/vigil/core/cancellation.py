# src/vigil/core/cancellation.py
"""Cooperative cancellation for asynchronous plugin steps.

A CancellableTask wraps an asynchronous computation together with a
CancellationHandle. The computation receives the handle and may check it to
stop early; independently of that, the task itself listens on the handle and
rejects with ValidationCancelledError as soon as the handle is cancelled.

Cancellation is therefore advisory for the body and mandatory for whoever
awaits the task:

    task = CancellableTask(body)
    task.cancel("superseded")
    await task  # raises ValidationCancelledError, whatever body is doing

Exactly one settlement wins. Once the task has resolved or rejected,
cancelling its handle still flips handle.cancelled but no longer changes the
task's outcome.

All of this runs on a single event loop; no locking is involved.
"""

from __future__ import annotations

import asyncio
import inspect
import json
from collections.abc import Awaitable, Callable, Generator
from typing import Any, Generic, TypeVar

from vigil.contracts.errors import RejectionError, ValidationCancelledError

T = TypeVar("T")

CANCELLED_WITHOUT_REASON = "cancelled without reason"

Resolve = Callable[[Any], None]
Reject = Callable[[Any], None]
Executor = Callable[[Resolve, Reject, "CancellationHandle"], Awaitable[Any] | None]


def create_cancellation_error(reason: Any = None) -> ValidationCancelledError:
    """Build the error a cancelled task rejects with.

    Args:
        reason: The value passed to cancel()

    Returns:
        The reason itself if it already is a ValidationCancelledError,
        otherwise a new error whose message describes the reason
    """
    if isinstance(reason, ValidationCancelledError):
        return reason
    if not reason:
        return ValidationCancelledError(CANCELLED_WITHOUT_REASON, reason)
    if isinstance(reason, BaseException):
        return ValidationCancelledError(str(reason), reason)
    if isinstance(reason, str):
        return ValidationCancelledError(f"cancelled due to {reason}", reason)
    return ValidationCancelledError(json.dumps(reason, default=repr), reason)


class CancellationHandle:
    """Cancel signal plus reason, shared by a task and its body.

    Callbacks registered with add_callback() run synchronously, once, when
    cancel() is first called. A callback added after cancellation runs
    immediately.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: Any = None
        self._callbacks: list[Callable[[Any], None]] = []

    def __repr__(self) -> str:
        state = f"cancelled reason={self._reason!r}" if self._cancelled else "active"
        return f"<CancellationHandle {state}>"

    @property
    def cancelled(self) -> bool:
        """Whether cancel() has been called."""
        return self._cancelled

    @property
    def reason(self) -> Any:
        """The reason passed to the first cancel() call."""
        return self._reason

    def cancel(self, reason: Any = None) -> None:
        """Trigger cancellation. Only the first call has any effect."""
        if self._cancelled:
            return
        self._cancelled = True
        self._reason = reason
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(reason)

    def add_callback(self, callback: Callable[[Any], None]) -> None:
        """Run callback(reason) on cancellation."""
        if self._cancelled:
            callback(self._reason)
            return
        self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[Any], None]) -> bool:
        """Detach a callback. Returns False if it was not registered."""
        if callback not in self._callbacks:
            return False
        self._callbacks.remove(callback)
        return True

    def raise_if_cancelled(self) -> None:
        """Raise ValidationCancelledError if the handle has been cancelled.

        Convenience for plugin bodies that want to stop at a checkpoint.
        """
        if self._cancelled:
            raise create_cancellation_error(self._reason)


class CancellableTask(Generic[T]):
    """Awaitable computation that rejects when its handle is cancelled.

    The executor is called immediately with (resolve, reject, handle). It may
    settle the task synchronously, or return an awaitable that is scheduled
    on the running loop and settles the task later. An exception raised by
    the executor, or by the awaitable it returns, rejects the task.

    Must be constructed while an event loop is running.

    Example:
        async def body(resolve, reject, handle):
            data = await fetch()
            if not handle.cancelled:
                resolve(data)

        task = CancellableTask(body)
        value = await task
    """

    def __init__(self, executor: Executor, handle: CancellationHandle | None = None) -> None:
        loop = asyncio.get_running_loop()
        self._future: asyncio.Future[T] = loop.create_future()
        self._handle = handle if handle is not None else CancellationHandle()
        self._locked = False
        # Strong references so scheduled bodies are not garbage collected mid-flight
        self._pending: set[asyncio.Future[Any]] = set()

        self._future.add_done_callback(self._detach)
        self._handle.add_callback(self._on_cancel)

        try:
            outcome = executor(self._resolve, self._reject, self._handle)
        except Exception as error:
            self._reject(error)
        else:
            if inspect.isawaitable(outcome):
                self._schedule(self._drive(outcome))

    @classmethod
    def resolved(cls, value: Any = None, handle: CancellationHandle | None = None) -> CancellableTask[Any]:
        """Wrap a plain value (or awaitable) as a cancellable task."""

        def executor(resolve: Resolve, reject: Reject, handle: CancellationHandle) -> None:
            resolve(value)

        return cls(executor, handle)

    def __await__(self) -> Generator[Any, None, T]:
        return self._future.__await__()

    def __repr__(self) -> str:
        if not self._future.done():
            state = "pending"
        elif self._future.cancelled():
            state = "cancelled"
        elif self._future.exception() is not None:
            state = f"rejected {self._future.exception()!r}"
        else:
            state = "resolved"
        return f"<CancellableTask {state}>"

    @property
    def handle(self) -> CancellationHandle:
        """The cancellation handle shared with the executor."""
        return self._handle

    @property
    def cancelled(self) -> bool:
        """Whether the handle has been cancelled (regardless of outcome)."""
        return self._handle.cancelled

    def done(self) -> bool:
        """Whether the task has settled."""
        return self._future.done()

    def cancel(self, reason: Any = None) -> None:
        """Cancel the handle; rejects the task unless it already settled."""
        self._handle.cancel(reason)

    # === Settlement ===

    def _resolve(self, value: Any) -> None:
        if self._locked or self._future.done():
            return
        self._locked = True
        if inspect.isawaitable(value):
            self._schedule(self._adopt(value))
            return
        self._future.set_result(value)

    def _reject(self, reason: Any) -> None:
        if self._locked or self._future.done():
            return
        self._locked = True
        error = reason if isinstance(reason, Exception) else RejectionError(reason)
        self._future.set_exception(error)

    def _on_cancel(self, reason: Any) -> None:
        if self._future.done():
            return
        self._future.set_exception(create_cancellation_error(reason))

    def _detach(self, future: asyncio.Future[T]) -> None:
        self._handle.remove_callback(self._on_cancel)

    def _schedule(self, coroutine: Any) -> None:
        body = asyncio.ensure_future(coroutine)
        self._pending.add(body)
        body.add_done_callback(self._pending.discard)

    async def _drive(self, awaitable: Awaitable[Any]) -> None:
        try:
            await awaitable
        except asyncio.CancelledError:
            if not self._future.done():
                self._future.cancel()
            raise
        except Exception as error:
            self._reject(error)

    async def _adopt(self, awaitable: Awaitable[Any]) -> None:
        try:
            value = await awaitable
        except asyncio.CancelledError:
            if not self._future.done():
                self._future.cancel()
            raise
        except Exception as error:
            if not self._future.done():
                self._future.set_exception(error)
        else:
            if not self._future.done():
                self._future.set_result(value)
