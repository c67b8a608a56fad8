"""
Example: Failure Propagation
When a deferred's operation raises, the `await` waiting on it re-raises the
same exception inside the procedure. The procedure stops there, so nothing
after that suspension point runs, and the exception leaves the `sequence`
block once every other timer has fired.
"""

import asyncio
from awaitline import emit, procedure, sequence


def flaky_lookup():
    raise ConnectionError("lookup service unavailable")


async def run_error_handling_example():
    print("--- Running Error Handling Example ---")
    try:
        async with sequence(time_scale=0.1) as s:
            p1 = s.defer(2, operation=flaky_lookup)
            p2 = s.defer(1, "second value")

            @procedure
            async def consume():
                emit("-> waiting on p1")
                val1 = await p1
                emit("xx this line never runs", val1)
                return await p2

            consume()
    except ConnectionError as e:
        print(f"\nSuccessfully caught expected exception: {e}")

    assert s.result.exception is not None
    assert "consume" not in s.result
    print("--- Error Handling Example Finished ---")


if __name__ == "__main__":
    asyncio.run(run_error_handling_example())
