import asyncio
import logging
import sys
from collections import OrderedDict
from typing import (
    Any,
    Callable,
    Coroutine,
    Dict,
    List,
    Optional,
    TextIO,
    Tuple,
    Type,
)

from .debug import print_debug_report
from .deferred import Deferred, Operation
from .result import SequenceResult
from .vars import current_sequence

log = logging.getLogger(__name__)


class SequenceContextManager:
    """
    The context manager behind `async with sequence()` and `with sequence()`
    blocks.

    It owns the deferreds and procedures started inside the block, writes
    emitted lines to its stream, and on exit waits until every timer has
    fired and every procedure has finished. The earliest failure is recorded
    on `result.exception` and re-raised.
    """

    def __init__(
        self,
        *,
        time_scale: float = 1.0,
        stream: Optional[TextIO] = None,
        debug: bool = False,
    ) -> None:
        """
        Initializes the context manager.

        Args:
            time_scale: Seconds per time unit for every deferred created
                through this sequence.
            stream: Where emitted lines go. Defaults to `sys.stdout`,
                looked up at emit time.
            debug: Print a report of deferreds and procedures on exit.
        """
        if time_scale <= 0:
            raise ValueError(f"time_scale must be positive, got {time_scale!r}.")
        self.time_scale = time_scale
        self._stream = stream
        self._debug = debug
        self.result = SequenceResult()
        self.deferreds: List[Deferred] = []
        self.procedures: "OrderedDict[str, asyncio.Task]" = OrderedDict()
        self._started_procedures: Dict[str, float] = {}
        self._failures: List[Tuple[float, BaseException]] = []
        self._queued: List[Tuple[Callable[..., Coroutine[Any, Any, Any]], tuple, Dict[str, Any]]] = []
        self._sync = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._started_at: Optional[float] = None
        self._token = None
        self._sync_token = None

    def elapsed(self) -> float:
        """Time units since the block was entered."""
        if self._loop is None or self._started_at is None:
            return 0.0
        return (self._loop.time() - self._started_at) / self.time_scale

    def defer(
        self,
        delay: float,
        value: Any = None,
        *,
        operation: Optional[Operation] = None,
    ) -> Deferred:
        """Creates a deferred on this sequence's time scale and tracks it."""
        deferred = Deferred(delay, value, operation=operation, time_scale=self.time_scale)
        self.deferreds.append(deferred)
        return deferred

    def emit(self, *parts: Any) -> str:
        """Writes one line, `print`-style, and records it on the result."""
        line = " ".join(str(part) for part in parts)
        self.result._add_line(line)
        stream = self._stream if self._stream is not None else sys.stdout
        print(line, file=stream, flush=True)
        return line

    def _start_procedure(
        self,
        func: Callable[..., Coroutine[Any, Any, Any]],
        args: tuple,
        kwargs: Dict[str, Any],
    ) -> Optional[asyncio.Task]:
        """
        Starts a procedure eagerly: it runs synchronously until its first
        suspension point, then control comes back to the caller.

        Inside a synchronous `with` block there is no loop yet, so the call
        is queued and started when the block exits. None is returned then.
        """
        if self._loop is None:
            if self._sync:
                self._queued.append((func, args, kwargs))
                return None
            raise RuntimeError("The sequence block has not been entered yet.")
        key = self.result._register(func.__name__)
        self._started_procedures[key] = self.elapsed()
        log.debug("Starting procedure '%s'", key)
        task = asyncio.eager_task_factory(self._loop, func(*args, **kwargs), name=key)
        self.procedures[key] = task
        task.add_done_callback(lambda t, key=key: self._on_procedure_done(key, t))
        return task

    def _on_procedure_done(self, key: str, task: asyncio.Task) -> None:
        self.result._add_timing(key, self.elapsed())
        if task.cancelled():
            log.debug("Procedure '%s' was cancelled", key)
            return
        error = task.exception()
        if error is not None:
            log.debug("Procedure '%s' failed with %r", key, error)
            self._failures.append((self._loop.time(), error))
            return
        log.debug("Procedure '%s' finished", key)
        self.result._set_result(key, task.result())

    def _first_failure(self) -> Optional[BaseException]:
        """
        Returns the earliest failure: a procedure that raised, or a deferred
        that failed without anything awaiting it.
        """
        failures = list(self._failures)
        for deferred in self.deferreds:
            if deferred.observed or deferred._future.cancelled():
                continue
            error = deferred.exception()
            if error is not None:
                failures.append((deferred.resolved_at, error))
        if not failures:
            return None
        return min(failures, key=lambda failure: failure[0])[1]

    def __enter__(self) -> "SequenceContextManager":
        self._sync = True
        self._sync_token = current_sequence.set(self)
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any],
    ) -> None:
        try:
            if exc_type:
                return

            async def _runner():
                await self.__aenter__()
                await self.__aexit__(None, None, None)

            asyncio.run(_runner())
        finally:
            current_sequence.reset(self._sync_token)
            self._sync_token = None

    async def __aenter__(self) -> "SequenceContextManager":
        self._loop = asyncio.get_running_loop()
        self._started_at = self._loop.time()
        self._token = current_sequence.set(self)
        queued, self._queued = self._queued, []
        for func, args, kwargs in queued:
            self._start_procedure(func, args, kwargs)
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any],
    ) -> None:
        try:
            if exc_type:
                # The block itself failed, so nothing it started gets waited on.
                for task in self.procedures.values():
                    if not task.done():
                        task.cancel()
                for deferred in self.deferreds:
                    if not deferred.done():
                        deferred._handle.cancel()
                return

            await self._drain()

            error = self._first_failure()
            if error is not None:
                self.result._set_exception(error)

            if self._debug:
                print_debug_report(self)
        finally:
            if self._token is not None:
                current_sequence.reset(self._token)
                self._token = None

        if self.result.exception is not None:
            raise self.result.exception

    async def _drain(self) -> None:
        """Waits until no procedure is running and no timer is pending."""
        # Procedures can start more deferreds and procedures while running.
        while True:
            pending = [task for task in self.procedures.values() if not task.done()]
            pending.extend(d._future for d in self.deferreds if not d.done())
            if not pending:
                break
            await asyncio.wait(pending)
        # Let done callbacks scheduled by the last completions run.
        await asyncio.sleep(0)
