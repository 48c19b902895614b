"""Router configuration.

RouterConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass

from waypost.errors import ConfigurationError

# Methods from RFC 7231 plus PATCH (RFC 5789)
DEFAULT_METHODS: tuple[str, ...] = (
    "GET",
    "HEAD",
    "POST",
    "PUT",
    "DELETE",
    "CONNECT",
    "OPTIONS",
    "TRACE",
    "PATCH",
)


def normalize_method(method: object) -> str:
    """Return the canonical (upper case) form of a method name.

    Raises ``ConfigurationError`` for anything that is not a non-empty string.
    """
    if not isinstance(method, str) or not method.strip():
        msg = f"HTTP method names must be non-empty strings, got {method!r}"
        raise ConfigurationError(msg)
    return method.strip().upper()


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(methods=("GET", "POST"), strict=True)
    """

    # Methods that get an (initially empty) route list at construction
    methods: tuple[str, ...] = DEFAULT_METHODS

    # Pattern matching
    case_sensitive: bool = False
    strict: bool = False  # True: "/users" no longer matches "/users/"

    def __post_init__(self) -> None:
        if isinstance(self.methods, str):
            msg = "RouterConfig.methods must be a sequence of names, not a single string"
            raise ConfigurationError(msg)
        seen: dict[str, None] = {}
        for method in self.methods:
            seen.setdefault(normalize_method(method), None)
        # Frozen dataclass: bypass __setattr__ to store the normalized tuple
        object.__setattr__(self, "methods", tuple(seen))
