import sys
from typing import TYPE_CHECKING, Optional, TextIO

if TYPE_CHECKING:
    from .context import SequenceContextManager


def print_debug_report(ctx: "SequenceContextManager", file: Optional[TextIO] = None) -> None:
    """
    Prints what a sequence block did: each deferred with its delay and when
    it settled, and each procedure with its outcome and finish time.
    Times are in units since the block was entered.
    """
    out = file if file is not None else sys.stdout
    started = ctx._started_at or 0.0

    print("--- awaitline debug report ---", file=out)
    print(f"time scale: {ctx.time_scale:g}s per unit", file=out)

    print(f"deferreds ({len(ctx.deferreds)}):", file=out)
    for i, deferred in enumerate(ctx.deferreds):
        created = (deferred.created_at - started) / ctx.time_scale
        if deferred.resolved_at is None:
            settled = "pending"
        else:
            settled = f"settled at {(deferred.resolved_at - started) / ctx.time_scale:.2f}"
        print(f"  [{i}] delay={deferred.delay:g} created at {created:.2f}, {settled}", file=out)

    print(f"procedures ({len(ctx.procedures)}):", file=out)
    for key, task in ctx.procedures.items():
        if not task.done():
            outcome = "running"
        elif task.cancelled():
            outcome = "cancelled"
        elif task.exception() is not None:
            outcome = f"failed: {task.exception()!r}"
        else:
            outcome = "ok"
        begin = ctx._started_procedures.get(key, 0.0)
        end = ctx.result.timings.get(key)
        finish = f"{end:.2f}" if end is not None else "-"
        print(f"  {key}: {outcome} (started {begin:.2f}, finished {finish})", file=out)
