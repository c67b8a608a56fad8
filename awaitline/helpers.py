from typing import Any, Optional

from .deferred import Deferred, Operation
from .vars import current_sequence

# Time units before a deferred sum resolves.
SUM_DELAY = 2


def defer(delay: float, value: Any = None, *, operation: Optional[Operation] = None) -> Deferred:
    """
    Creates a deferred that settles `delay` time units from now.

    Inside a `sequence` block the deferred uses that block's time scale and
    is waited on when the block exits. Outside one it counts in seconds on
    the running event loop.

    Args:
        delay: Time units until the deferred settles.
        value: The value to resolve with.
        operation: A zero-argument callable, sync or async, whose outcome
            settles the deferred instead of `value`.

    Returns:
        The started `Deferred`.
    """
    ctx = current_sequence.get()
    if ctx is None:
        return Deferred(delay, value, operation=operation)
    return ctx.defer(delay, value, operation=operation)


def emit(*parts: Any) -> str:
    """Writes one line of output through the active sequence, or to stdout."""
    ctx = current_sequence.get()
    if ctx is None:
        line = " ".join(str(part) for part in parts)
        print(line, flush=True)
        return line
    return ctx.emit(*parts)


def sum(a, b, *, delay: float = SUM_DELAY) -> Deferred:
    """Returns a deferred that resolves to `a + b` after `delay` time units."""
    return defer(delay, a + b)
