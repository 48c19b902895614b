"""Handler protocol and Next type alias.

A handler is any callable matching::

    def my_handler(request, response, next) -> None: ...

No base class required. The router checks the shape (callable), not the
lineage. On the async dispatch path ``async def`` handlers are accepted
too, and ``next()`` returns an awaitable.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeAlias

# The continuation handed to every handler
Next: TypeAlias = Callable[[], Any]


class RouteHandler(Protocol):
    """Protocol for waypost route handlers.

    Accepts both functions and callable objects::

        # Function handler
        def log_hit(request, response, next) -> None:
            hits[request.path] += 1
            next()

        # Class handler
        class Maintenance:
            def __call__(self, request, response, next) -> None:
                response.send("Down for maintenance", status=503)
    """

    def __call__(self, request: Any, response: Any, next: Next) -> Any: ...


class AsyncRouteHandler(Protocol):
    """Protocol for handlers used with ``Router.async_middleware``."""

    def __call__(
        self, request: Any, response: Any, next: Next
    ) -> Awaitable[None] | None: ...
