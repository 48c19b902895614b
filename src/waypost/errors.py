"""Waypost exception hierarchy.

Shared across the pattern compiler, route table, and router so every
module raises and catches the same types.
"""

from typing import Any


class WaypostError(Exception):
    """Base for all waypost-specific errors."""


class ConfigurationError(WaypostError):
    """Raised when router configuration is invalid.

    Typically raised while building a ``RouterConfig`` or adding a method.
    """


class PatternError(ConfigurationError):
    """A route pattern could not be compiled.

    Raised at registration time, never during dispatch.
    """

    def __init__(self, pattern: object, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid route pattern {pattern!r}: {reason}")


class InvalidHandlerError(WaypostError, TypeError):
    """A registration or removal call received a non-callable handler.

    The call fails before touching the route table, so no binding from the
    same call is inserted.
    """

    def __init__(self, method: str, pattern: str, handler: Any) -> None:
        self.method = method
        self.pattern = pattern
        self.handler = handler
        super().__init__(
            f"Handler for {method} {pattern!r} must be callable, "
            f"got {type(handler).__name__}: {handler!r}"
        )
