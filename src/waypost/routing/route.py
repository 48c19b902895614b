"""RouteBinding and RouteMatch frozen dataclasses."""

from dataclasses import dataclass, field

from waypost._internal.types import Handler
from waypost.routing.pattern import CompiledPattern


@dataclass(frozen=True, slots=True, eq=False)
class RouteBinding:
    """A compiled pattern bound to one handler.

    Compared by identity: two registrations of the same pattern and handler
    are distinct bindings.
    """

    pattern: CompiledPattern
    handler: Handler

    @property
    def path(self) -> str:
        """The pattern string this binding was registered with."""
        return self.pattern.path


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """A binding that matched a request path, with its extracted params."""

    binding: RouteBinding
    params: dict[str, str] = field(default_factory=dict)

    @property
    def handler(self) -> Handler:
        return self.binding.handler
