from __future__ import annotations

import inspect
from typing import Any


async def resolve(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it as-is.

    Lets run functions, hook handlers and tools be plain or ``async`` callables.
    """

    if inspect.isawaitable(value):
        return await value
    return value
