import io
import time

import pytest

from awaitline import __main__ as cli
from awaitline.context import SequenceContextManager
from awaitline.demo import FIRST_DELAY, RESOLVED_VALUE, amain, run

EXPECTED_LINES = [
    "🚀 Starting procedure: handle_deferreds()",
    "👉 Logging immediately before awaiting the first deferred value.",
    "👋 This line appears right after calling handle_deferreds(), before the first await resolves.",
    "✅ First await completed. The deferred value has resolved.",
    f"deferred 1 value → {RESOLVED_VALUE}",
    "🧠 Awaiting the second deferred value (p2), which has a shorter delay.",
    "✅ Second await completed. The deferred value has resolved.",
    f"deferred 2 value → {RESOLVED_VALUE}",
]


@pytest.mark.asyncio
async def test_output_order():
    """Tests the full ordering of the demonstration's output."""
    out = io.StringIO()
    start_time = time.monotonic()
    result = await amain(time_scale=0.01, stream=out)
    duration = time.monotonic() - start_time

    assert result.lines == EXPECTED_LINES
    assert out.getvalue().splitlines() == EXPECTED_LINES
    assert result.handle_deferreds == (RESOLVED_VALUE, RESOLVED_VALUE)
    # p2's timer ran alongside p1's, so the whole run takes ~10 units, not 15.
    assert 0.095 <= duration < 0.14
    assert 9.5 <= result.timings["handle_deferreds"] < 14


@pytest.mark.asyncio
async def test_zero_delays_still_resolve_after_caller_marker():
    """Tests that even zero-delay deferreds resolve after the post-invocation line."""
    result = await amain(time_scale=0.01, stream=io.StringIO(), first_delay=0, second_delay=0)
    assert result.lines == EXPECTED_LINES


@pytest.mark.asyncio
async def test_swapped_delays_keep_order():
    """Tests that a longer second delay only changes timing, never ordering."""
    result = await amain(time_scale=0.01, stream=io.StringIO(), first_delay=5, second_delay=10)
    assert result.lines == EXPECTED_LINES
    assert 9.5 <= result.timings["handle_deferreds"] < 14


def test_run_prints_to_stdout(capsys):
    """Tests the synchronous entry point writes the same lines to stdout."""
    result = run(time_scale=0.01)
    assert capsys.readouterr().out.splitlines() == EXPECTED_LINES
    assert result.exception is None


def test_run_propagates_first_deferred_failure(monkeypatch, capsys):
    """
    Tests that when p1 fails, `run()` raises the original exception and the
    procedure never reaches its second await.
    """
    error = ConnectionError("p1 could not be produced")
    real_defer = SequenceContextManager.defer

    def defer(self, delay, value=None, *, operation=None):
        if delay == FIRST_DELAY:

            def fail():
                raise error

            return real_defer(self, delay, operation=fail)
        return real_defer(self, delay, value, operation=operation)

    monkeypatch.setattr(SequenceContextManager, "defer", defer)

    with pytest.raises(ConnectionError) as exc_info:
        run(time_scale=0.01)

    assert exc_info.value is error
    assert capsys.readouterr().out.splitlines() == EXPECTED_LINES[:3]


def test_main_entry_point(monkeypatch, capsys):
    """Tests that the console entry point runs the demonstration."""
    monkeypatch.setattr(cli, "run", lambda: run(time_scale=0.01))
    cli.main()
    assert capsys.readouterr().out.splitlines() == EXPECTED_LINES
