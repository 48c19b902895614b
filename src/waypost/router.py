"""The waypost router.

A ``Router`` owns a ``RouteTable`` and hands out one middleware callable
that a host pipeline mounts once. Routes can be added and removed at any
time afterwards; the mounted middleware always sees the current table.

Usage::

    from waypost import Router

    router = Router()
    app.use(router.middleware)

    router.get("/", index)
    router.get("/users/:id", load_user, show_user)
    router.unget("/users/:id", show_user)
"""

import logging
import threading
from collections.abc import Callable, Iterable, Iterator
from functools import partial
from typing import Any

from waypost._internal.types import Handler
from waypost.config import RouterConfig, normalize_method
from waypost.dispatch import Dispatcher
from waypost.errors import ConfigurationError, InvalidHandlerError
from waypost.routing.route import RouteBinding
from waypost.routing.table import RouteTable

logger = logging.getLogger("waypost.router")


def flatten_handlers(handlers: Iterable[Any]) -> list[Any]:
    """Flatten nested lists and tuples of handlers, preserving order."""
    flat: list[Any] = []
    for item in handlers:
        if isinstance(item, (list, tuple)):
            flat.extend(flatten_handlers(item))
        else:
            flat.append(item)
    return flat


class Router:
    """A mutable route table with a single dispatch entry point.

    Every registered method ``M`` gets two convenience calls, ``m(...)``
    and ``unm(...)``, forwarding to ``register`` and ``unregister``.
    Methods added later with ``add_method`` get them too.

    Thread safety:
        Building the middleware uses a Lock + double-check so exactly one
        dispatcher exists per router. Table mutation is not locked.
    """

    __slots__ = (
        "_async_middleware",
        "_build_lock",
        "_middleware",
        "_table",
        "config",
    )

    def __init__(
        self,
        config: RouterConfig | None = None,
        *,
        methods: Iterable[str] | None = None,
    ) -> None:
        if config is None:
            config = RouterConfig() if methods is None else RouterConfig(methods=tuple(methods))
        elif methods is not None:
            config = RouterConfig(
                methods=tuple(methods),
                case_sensitive=config.case_sensitive,
                strict=config.strict,
            )
        self.config: RouterConfig = config
        self._table = RouteTable(
            config.methods,
            case_sensitive=config.case_sensitive,
            strict=config.strict,
        )
        self._build_lock: threading.Lock = threading.Lock()
        self._middleware: Callable[..., None] | None = None
        self._async_middleware: Callable[..., Any] | None = None

    # -- Methods --

    @property
    def methods(self) -> tuple[str, ...]:
        """Registered method names."""
        return self._table.methods

    def add_method(self, method: str) -> "Router":
        """Register a new HTTP method with an empty route list.

        Adding a method that already exists keeps its routes. After this,
        ``router.<method>()`` and ``router.un<method>()`` are available::

            router.add_method("PURGE")
            router.purge("/cache/*", purge_cache)
        """
        self._table.add_method(method)
        return self

    # -- Registration --

    def register(self, method: str, pattern: str, *handlers: Any) -> "Router":
        """Bind one or more handlers to *pattern* under *method*.

        Accepts handlers as separate arguments, lists, or nested lists; each
        one becomes its own binding, in order. Every handler is checked
        before any is added, so a bad one leaves the table unchanged.
        Unknown methods are created on the fly.
        """
        method = normalize_method(method)
        flat = flatten_handlers(handlers)
        if not flat:
            raise InvalidHandlerError(method, pattern, None)
        for handler in flat:
            if not callable(handler):
                raise InvalidHandlerError(method, pattern, handler)
        # Compile up front: a bad pattern must not leave a partial insert either
        self._table.compile(pattern)
        for handler in flat:
            self._table.add(method, pattern, handler)
        return self

    def unregister(self, method: str, pattern: str, *handlers: Any) -> "Router":
        """Remove bindings of *pattern* under *method*.

        With no handlers, every binding of the pattern goes. With handlers,
        each one removes at most its first matching binding. Unknown
        methods and missing bindings are ignored.
        """
        if method not in self._table:
            return self
        if not handlers:
            self._table.remove_all(method, pattern)
            return self
        flat = flatten_handlers(handlers)
        for handler in flat:
            if not callable(handler):
                raise InvalidHandlerError(method.upper(), pattern, handler)
        for handler in flat:
            self._table.remove(method, pattern, handler)
        return self

    def route(
        self,
        pattern: str,
        *,
        methods: Iterable[str] = ("GET",),
    ) -> Callable[[Handler], Handler]:
        """Register a handler via decorator.

        Usage::

            @router.route("/health", methods=["GET", "HEAD"])
            def health(request, response, next):
                response.send("ok")
        """
        if isinstance(methods, str):
            msg = "route() methods must be a sequence of names, not a single string"
            raise ConfigurationError(msg)
        method_names = tuple(methods)

        def decorator(func: Handler) -> Handler:
            for method in method_names:
                self.register(method, pattern, func)
            return func

        return decorator

    # -- Per-method convenience calls --

    def __getattr__(self, name: str) -> Callable[..., "Router"]:
        if name.startswith("_"):
            raise AttributeError(name)
        method = name.upper()
        # An exact method wins over the "un" prefix (UNLOCK vs un+LOCK)
        if method in self._table:
            return partial(self.register, method)
        if method.startswith("UN") and method[2:] in self._table:
            return partial(self.unregister, method[2:])
        msg = f"{type(self).__name__!r} object has no attribute {name!r}"
        raise AttributeError(msg)

    # -- Introspection --

    @property
    def table(self) -> RouteTable:
        """The underlying route table."""
        return self._table

    def bindings(self, method: str) -> tuple[RouteBinding, ...]:
        """Snapshot of the bindings registered for *method*."""
        return self._table.bindings(method)

    def __iter__(self) -> Iterator[tuple[str, RouteBinding]]:
        return iter(self._table)

    def __repr__(self) -> str:
        return f"<Router methods={list(self.methods)!r} bindings={len(self._table)}>"

    # -- Dispatch --

    @property
    def middleware(self) -> Callable[..., None]:
        """The synchronous dispatch entry point.

        Built once and cached, so every access returns the same callable::

            app.use(router.middleware)
        """
        if self._middleware is None:
            self._ensure_dispatcher()
        return self._middleware  # type: ignore[return-value]

    @property
    def async_middleware(self) -> Callable[..., Any]:
        """The async dispatch entry point. Accepts ``def`` and ``async def`` handlers."""
        if self._async_middleware is None:
            self._ensure_dispatcher()
        return self._async_middleware  # type: ignore[return-value]

    def _ensure_dispatcher(self) -> None:
        """Thread-safe construction with double-check locking."""
        with self._build_lock:
            if self._middleware is not None:
                return
            dispatcher = Dispatcher(self._table)
            self._async_middleware = dispatcher.call_async
            self._middleware = dispatcher
            logger.debug("Built dispatcher for %r", self)


def create_router(
    methods: Iterable[str] | None = None,
    **options: Any,
) -> Router:
    """Build a ``Router`` from a method list and ``RouterConfig`` options.

    Usage::

        router = create_router(["GET", "POST"], strict=True)
    """
    if methods is not None:
        options["methods"] = tuple(methods)
    return Router(RouterConfig(**options))
