"""Guards and signal listeners may be written with ``def`` or ``async def``.

Callers invoke them directly and pass the return value through
``maybe_await``::

    decision = await maybe_await(guard.evaluate(context))
"""

import inspect
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


async def maybe_await(value: T | Awaitable[T]) -> T:
    """Return *value*, awaiting it first if a coroutine function produced it."""
    if inspect.isawaitable(value):
        return await value
    return value
