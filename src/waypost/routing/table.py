"""Mutable per-method route table.

Each HTTP method owns an ordered list of ``RouteBinding``. List order is
registration order and doubles as match priority and execution order.
Unlike a compiled trie, the table may change at any time, including while
a request is being dispatched: readers always receive a snapshot.
"""

import logging
from collections.abc import Iterator

from waypost._internal.types import Handler
from waypost.config import normalize_method
from waypost.errors import InvalidHandlerError
from waypost.routing.pattern import CompiledPattern, compile_pattern
from waypost.routing.route import RouteBinding, RouteMatch

logger = logging.getLogger("waypost.router")


class RouteTable:
    """Ordered route lists keyed by canonical method name.

    Usage::

        table = RouteTable(("GET", "POST"))
        table.add("GET", "/users/:id", show_user)
        matches = table.match("GET", "/users/42")
    """

    __slots__ = ("_routes", "case_sensitive", "strict")

    def __init__(
        self,
        methods: tuple[str, ...] = (),
        *,
        case_sensitive: bool = False,
        strict: bool = False,
    ) -> None:
        self._routes: dict[str, list[RouteBinding]] = {}
        self.case_sensitive = case_sensitive
        self.strict = strict
        for method in methods:
            self.add_method(method)

    # -- Introspection --

    @property
    def methods(self) -> tuple[str, ...]:
        """Registered method names, in registration order."""
        return tuple(self._routes)

    def bindings(self, method: str) -> tuple[RouteBinding, ...]:
        """Snapshot of *method*'s bindings. Empty for unknown methods."""
        return tuple(self._routes.get(method.upper(), ()))

    def __contains__(self, method: object) -> bool:
        return isinstance(method, str) and method.upper() in self._routes

    def __iter__(self) -> Iterator[tuple[str, RouteBinding]]:
        for method, bindings in list(self._routes.items()):
            for binding in tuple(bindings):
                yield method, binding

    def __len__(self) -> int:
        return sum(len(bindings) for bindings in self._routes.values())

    # -- Mutation --

    def compile(self, pattern: str) -> CompiledPattern:
        """Compile *pattern* with this table's matching options."""
        return compile_pattern(
            pattern, case_sensitive=self.case_sensitive, strict=self.strict
        )

    def add_method(self, method: str) -> bool:
        """Create an empty route list for *method*.

        Returns False (and keeps the existing bindings) if the method is
        already registered.
        """
        name = normalize_method(method)
        if name in self._routes:
            return False
        self._routes[name] = []
        logger.debug("Registered method %s", name)
        return True

    def add(self, method: str, pattern: str, handler: Handler) -> RouteBinding:
        """Append a binding for *pattern* -> *handler* under *method*.

        Unknown methods get an empty list first. Raises
        ``InvalidHandlerError`` before any mutation if *handler* is not
        callable, and ``PatternError`` if *pattern* does not compile.
        """
        name = normalize_method(method)
        if not callable(handler):
            raise InvalidHandlerError(name, pattern, handler)
        binding = RouteBinding(pattern=self.compile(pattern), handler=handler)
        self._routes.setdefault(name, []).append(binding)
        logger.debug("Added %s %s -> %r", name, pattern, handler)
        return binding

    def remove(self, method: str, pattern: str, handler: Handler) -> bool:
        """Remove the first binding of *pattern* whose handler is *handler*.

        Handlers are compared by identity. Returns True if a binding was
        removed; a missing binding is not an error.
        """
        name = normalize_method(method)
        bindings = self._routes.get(name)
        if not bindings:
            return False
        compiled = self.compile(pattern)
        for index, binding in enumerate(bindings):
            if binding.handler is handler and binding.pattern == compiled:
                del bindings[index]
                logger.debug("Removed %s %s -> %r", name, pattern, handler)
                return True
        return False

    def remove_all(self, method: str, pattern: str) -> int:
        """Remove every binding whose pattern equals *pattern*.

        The surviving list is built first and swapped in, so no binding is
        skipped. Returns the number of bindings removed.
        """
        name = normalize_method(method)
        bindings = self._routes.get(name)
        if not bindings:
            return 0
        compiled = self.compile(pattern)
        kept = [binding for binding in bindings if binding.pattern != compiled]
        removed = len(bindings) - len(kept)
        if removed:
            # Slice assignment keeps the list object owned by the table
            bindings[:] = kept
            logger.debug("Removed %d binding(s) for %s %s", removed, name, pattern)
        return removed

    # -- Lookup --

    def match(self, method: str, path: str) -> tuple[RouteMatch, ...] | None:
        """Every binding matching *path*, in registration order.

        Returns ``None`` if *method* is not registered. The result is a
        snapshot: later table mutation does not affect it.
        """
        bindings = self._routes.get(method.upper())
        if bindings is None:
            return None
        matches: list[RouteMatch] = []
        for binding in tuple(bindings):
            params = binding.pattern.match(path)
            if params is not None:
                matches.append(RouteMatch(binding=binding, params=params))
        return tuple(matches)
