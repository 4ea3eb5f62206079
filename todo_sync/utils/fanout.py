"""Run independent store calls concurrently and join on all of them."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Iterable
from typing import TypeVar

E = TypeVar("E", bound=BaseException)


async def gather_first_error(
    calls: Iterable[Awaitable[object]], error_type: type[E]
) -> E | None:
    """Await every call and return the first ``error_type`` raised, by completion order.

    All calls run to completion before this returns; later errors are
    discarded. Exceptions that are not ``error_type`` propagate once the
    join is complete.
    """

    tasks = [asyncio.ensure_future(call) for call in calls]
    if not tasks:
        return None
    first: E | None = None
    unexpected: BaseException | None = None
    for finished in asyncio.as_completed(tasks):
        try:
            await finished
        except error_type as err:
            if first is None:
                first = err
        except Exception as err:  # noqa: BLE001 - re-raised after the join
            if unexpected is None:
                unexpected = err
    if unexpected is not None:
        raise unexpected
    return first
