import asyncio
import inspect
from functools import wraps
from typing import Any, Callable, Coroutine, Optional

from .vars import current_sequence


def procedure(func: Callable[..., Coroutine[Any, Any, Any]]) -> Callable[..., Optional[asyncio.Task]]:
    """
    A decorator that turns a coroutine function into a consuming procedure.

    Calling the decorated function inside an `async with sequence()` block
    starts it right away: its body runs synchronously up to the first
    `await` that has to wait, then control returns to the caller with the
    running task. The sequence waits for the task on exit and records its
    return value under the function's name. In a synchronous `with
    sequence()` block the call is queued, None is returned, and the
    procedure starts when the block exits.

    Raises:
        TypeError: If `func` is not a coroutine function.
        RuntimeError: If the procedure is called outside a sequence block.
    """
    if not inspect.iscoroutinefunction(func):
        raise TypeError(f"@procedure needs an 'async def' function, got {func!r}.")

    @wraps(func)
    def start(*args: Any, **kwargs: Any) -> Optional[asyncio.Task]:
        ctx = current_sequence.get()
        if ctx is None:
            raise RuntimeError(
                "A @procedure function can only be called inside an 'async with sequence()' block."
            )
        return ctx._start_procedure(func, args, kwargs)

    return start
