"""Waypost: a dynamic route-dispatch table for HTTP-style middleware.

Register, remove, and run method-specific handler chains at runtime,
behind one middleware callable that plugs into a larger pipeline.

Basic usage::

    from waypost import Router

    router = Router()
    app.use(router.middleware)

    def hello(request, response, next):
        response.send("Hello, World!")

    router.get("/", hello)
    router.unget("/", hello)
"""

__version__ = "0.1.0"
__all__ = [
    "DEFAULT_METHODS",
    "CompiledPattern",
    "ConfigurationError",
    "InvalidHandlerError",
    "Next",
    "PatternError",
    "RouteBinding",
    "RouteHandler",
    "RouteMatch",
    "RouteTable",
    "Router",
    "RouterConfig",
    "WaypostError",
    "compile_pattern",
    "create_router",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import waypost`` fast while providing a clean top-level API.
    """
    if name in ("Router", "create_router"):
        from waypost.router import Router, create_router

        return Router if name == "Router" else create_router

    if name in ("RouterConfig", "DEFAULT_METHODS"):
        from waypost.config import DEFAULT_METHODS, RouterConfig

        return RouterConfig if name == "RouterConfig" else DEFAULT_METHODS

    if name in ("WaypostError", "ConfigurationError", "PatternError", "InvalidHandlerError"):
        import waypost.errors

        return getattr(waypost.errors, name)

    if name in ("CompiledPattern", "compile_pattern"):
        from waypost.routing.pattern import CompiledPattern, compile_pattern

        return CompiledPattern if name == "CompiledPattern" else compile_pattern

    if name in ("RouteBinding", "RouteMatch"):
        from waypost.routing.route import RouteBinding, RouteMatch

        return RouteBinding if name == "RouteBinding" else RouteMatch

    if name == "RouteTable":
        from waypost.routing.table import RouteTable

        return RouteTable

    if name in ("Next", "RouteHandler"):
        from waypost.protocol import Next, RouteHandler

        return Next if name == "Next" else RouteHandler

    msg = f"module 'waypost' has no attribute {name!r}"
    raise AttributeError(msg)
