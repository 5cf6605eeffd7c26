import asyncio
from typing import Any, Awaitable, Iterable, List


async def gather_or_fail(aws: Iterable[Awaitable[Any]]) -> List[Any]:
    """
    Run awaitables concurrently and return their results in input order.

    On the first exception the still-pending tasks are cancelled and that
    exception is re-raised; nothing is returned for the ones that succeeded.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    if not tasks:
        return []

    done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)

    failed = [t for t in tasks if t in done and not t.cancelled() and t.exception() is not None]
    if failed:
        for t in pending:
            t.cancel()
        if pending:
            await asyncio.wait(pending)
        raise failed[0].exception()

    return [t.result() for t in tasks]
