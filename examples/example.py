# Save as example.py and run `python example.py`
# or use `python -m awaitline` for the built-in demonstration.
import asyncio
from awaitline import emit, procedure, sequence, sum


async def main():
    # Time units are a tenth of a second here, so the whole run takes ~0.3s.
    async with sequence(time_scale=0.1) as s:
        # Both timers start now, before anything awaits them.
        total = sum(3, 4)
        greeting = s.defer(3, "done waiting")

        @procedure
        async def report():
            emit("waiting for the sum...")
            emit("3 + 4 =", await total)
            emit(await greeting)

        report()
        emit("report() returned before the sum resolved")

    print(f"Lines emitted: {len(s.result.lines)}")


if __name__ == "__main__":
    asyncio.run(main())
