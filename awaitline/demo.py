"""
Two deferred values awaited one after the other.

`p1` settles after 10 units and `p2` after 5. Both timers start together,
so by the time `handle_deferreds` finishes waiting on `p1`, `p2` has
already resolved and the second await returns without further delay.
The line emitted right after calling `handle_deferreds` shows that the
call returned before anything it awaits had resolved.
"""
import asyncio
from typing import Optional, TextIO

from .context import SequenceContextManager
from .decorator import procedure
from .deferred import Deferred
from .helpers import emit
from .result import SequenceResult

RESOLVED_VALUE = "Resolved Value!!"
FIRST_DELAY = 10
SECOND_DELAY = 5


@procedure
async def handle_deferreds(p1: Deferred, p2: Deferred):
    emit("🚀 Starting procedure: handle_deferreds()")
    emit("👉 Logging immediately before awaiting the first deferred value.")

    val1 = await p1
    emit("✅ First await completed. The deferred value has resolved.")
    emit("deferred 1 value →", val1)

    emit("🧠 Awaiting the second deferred value (p2), which has a shorter delay.")
    val2 = await p2
    emit("✅ Second await completed. The deferred value has resolved.")
    emit("deferred 2 value →", val2)

    return val1, val2


async def amain(
    *,
    time_scale: float = 1.0,
    stream: Optional[TextIO] = None,
    first_delay: float = FIRST_DELAY,
    second_delay: float = SECOND_DELAY,
    debug: bool = False,
) -> SequenceResult:
    """Runs the demonstration inside the current event loop."""
    async with SequenceContextManager(time_scale=time_scale, stream=stream, debug=debug) as s:
        p1 = s.defer(first_delay, RESOLVED_VALUE)
        p2 = s.defer(second_delay, RESOLVED_VALUE)

        handle_deferreds(p1, p2)
        s.emit("👋 This line appears right after calling handle_deferreds(), before the first await resolves.")

    return s.result


def run(**kwargs) -> SequenceResult:
    """Runs the demonstration on a fresh event loop. See `amain` for options."""
    return asyncio.run(amain(**kwargs))
