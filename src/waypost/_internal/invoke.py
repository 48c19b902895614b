"""Await-if-needed call helper for the async dispatch path.

On ``Router.async_middleware`` a handler may be ``def`` or ``async def``,
and the host's ``next`` may be either as well. Everything on that path is
called through ``invoke``.
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func*; if the result is awaitable, await it and return that."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
