import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Generator, Optional, Union

from .errors import DeferredPendingError

log = logging.getLogger(__name__)

Operation = Callable[[], Union[Any, Awaitable[Any]]]


class Deferred:
    """
    A value that becomes available a fixed delay after it is created.

    The timer starts in the constructor, not when something awaits the
    deferred, so two deferreds created together count down concurrently.
    A deferred settles exactly once: either to `value`, to whatever its
    `operation` returns, or to the exception its `operation` raises.
    Awaiting it any number of times gives back the same outcome.

    Args:
        delay: Time units until the deferred settles. Must be non-negative.
        value: The payload to resolve with when no operation is given.
        operation: A zero-argument callable, sync or async, run when the
            timer fires. Its result becomes the value.
        time_scale: Seconds per time unit.

    Raises:
        RuntimeError: If created while no event loop is running.
        ValueError: On a negative delay, a non-positive time scale, or
            when both `value` and `operation` are given.
    """

    def __init__(
        self,
        delay: float,
        value: Any = None,
        *,
        operation: Optional[Operation] = None,
        time_scale: float = 1.0,
    ) -> None:
        if delay < 0:
            raise ValueError(f"Deferred delay must be non-negative, got {delay!r}.")
        if time_scale <= 0:
            raise ValueError(f"time_scale must be positive, got {time_scale!r}.")
        if value is not None and operation is not None:
            raise ValueError("A deferred takes either a value or an operation, not both.")

        self.delay = delay
        self.time_scale = time_scale
        self._value = value
        self._operation = operation
        self._observed = False
        self._loop = asyncio.get_running_loop()
        self._future: asyncio.Future = self._loop.create_future()
        self.created_at: float = self._loop.time()
        self.resolved_at: Optional[float] = None
        self._handle = self._loop.call_later(delay * time_scale, self._fire)
        log.debug("Deferred %#x started, settles in %g units", id(self), delay)

    @classmethod
    def rejected(cls, delay: float, error: BaseException, **kwargs: Any) -> "Deferred":
        """Builds a deferred that fails with `error` once `delay` elapses."""

        def fail() -> None:
            raise error

        return cls(delay, operation=fail, **kwargs)

    def _fire(self) -> None:
        if self._operation is None:
            self._settle(self._value)
            return

        try:
            outcome = self._operation()
        except Exception as e:
            self._settle(error=e)
            return

        if inspect.isawaitable(outcome):
            task = asyncio.ensure_future(outcome)
            task.add_done_callback(self._on_operation_done)
        else:
            self._settle(outcome)

    def _on_operation_done(self, task: "asyncio.Future") -> None:
        if task.cancelled():
            self.resolved_at = self._loop.time()
            self._future.cancel()
            return
        error = task.exception()
        if error is not None:
            self._settle(error=error)
        else:
            self._settle(task.result())

    def _settle(self, value: Any = None, error: Optional[BaseException] = None) -> None:
        self.resolved_at = self._loop.time()
        if error is None:
            self._value = value
            self._future.set_result(value)
            log.debug("Deferred %#x resolved after %g units", id(self), self.delay)
        else:
            self._future.set_exception(error)
            log.debug("Deferred %#x failed with %r", id(self), error)

    def done(self) -> bool:
        """True once the deferred has resolved or failed."""
        return self._future.done()

    def exception(self) -> Optional[BaseException]:
        """
        Returns the failure of a settled deferred, or None if it resolved.

        Raises:
            DeferredPendingError: If the deferred has not settled yet.
        """
        if not self._future.done():
            raise DeferredPendingError(self.delay)
        return self._future.exception()

    @property
    def value(self) -> Any:
        """
        The resolved value.

        Raises:
            DeferredPendingError: If the timer has not fired yet.
            Exception: The operation's failure, if it failed.
        """
        if not self._future.done():
            raise DeferredPendingError(self.delay)
        return self._future.result()

    @property
    def observed(self) -> bool:
        """True once something has awaited this deferred."""
        return self._observed

    def __await__(self) -> Generator[Any, None, Any]:
        self._observed = True
        if self._future.done():
            # Settled values still hand the loop one turn before resuming.
            yield
        # Cancelling an awaiting task must not cancel the deferred itself.
        return (yield from asyncio.shield(self._future).__await__())

    def __repr__(self) -> str:
        if not self._future.done():
            state = "pending"
        elif self._future.cancelled():
            state = "cancelled"
        elif self._future.exception() is not None:
            state = f"failed={self._future.exception()!r}"
        else:
            state = f"value={self._value!r}"
        return f"<Deferred delay={self.delay:g} {state}>"
