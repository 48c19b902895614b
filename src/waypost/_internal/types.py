"""Shared type aliases used across waypost modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler: called as handler(request, response, next)
Handler: TypeAlias = Callable[..., Any]

# Continuation: zero-argument, advances the chain
Next: TypeAlias = Callable[[], Any]
