"""Route pattern compilation.

Turns an express-style route string into an anchored regular expression::

    "/users"              literal
    "/users/:id"          named parameter, one segment
    "/users/:id?"         optional parameter (segment and its slash)
    "/users/:id(\\d+)"    parameter with a custom regex
    "/files/:path*"       zero or more segments
    "/files/:path+"       one or more segments
    "/assets/(.*)"        unnamed group, captured under key "0"
    "/a/*"                wildcard, captured under a positional key

Compiled patterns compare equal when their regex source and flags are
equal, so ``/a/:id`` and ``/a/:name`` are the same pattern for removal.
"""

import re
from dataclasses import dataclass, field
from functools import lru_cache
from urllib.parse import unquote

from waypost.errors import PatternError

# Groups: 1 escaped char, 2 slash prefix, 3 param name, 4 param regex,
# 5 unnamed group regex, 6 modifier, 7 bare asterisk
_TOKEN_RE = re.compile(
    r"(\\.)"
    r"|(/)?(?:(?::(\w+)(?:\(((?:\\.|[^\\()])+)\))?|\(((?:\\.|[^\\()])+)\))([+*?])?|(\*))"
)

_DEFAULT_SEGMENT = r"[^/]+?"


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """A compiled route pattern.

    ``path`` is the source string, ``keys`` the parameter names in capture
    order. Equality ignores ``path`` and ``keys``.
    """

    path: str = field(compare=False)
    regex: re.Pattern[str]
    keys: tuple[str, ...] = field(compare=False, default=())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CompiledPattern):
            return NotImplemented
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))

    def __str__(self) -> str:
        flags = "i" if self.regex.flags & re.IGNORECASE else ""
        return f"/{self.regex.pattern}/{flags}"

    def test(self, path: str) -> bool:
        """True if *path* matches this pattern."""
        return self.regex.fullmatch(path) is not None

    def match(self, path: str) -> dict[str, str] | None:
        """Return decoded parameters for *path*, or ``None`` on no match.

        Optional parameters that did not participate are left out.
        """
        m = self.regex.fullmatch(path)
        if m is None:
            return None
        params: dict[str, str] = {}
        for index, key in enumerate(self.keys):
            value = m.group(f"_p{index}")
            if value is not None:
                params[key] = unquote(value)
        return params


def compile_pattern(
    path: str,
    *,
    case_sensitive: bool = False,
    strict: bool = False,
) -> CompiledPattern:
    """Compile *path* into a ``CompiledPattern``.

    Results are cached; equal arguments return the same object.
    Raises ``PatternError`` if *path* is not a string or yields an
    invalid regular expression.
    """
    if not isinstance(path, str):
        raise PatternError(path, f"expected a string, got {type(path).__name__}")
    return _compile(path, case_sensitive, strict)


@lru_cache(maxsize=1024)
def _compile(path: str, case_sensitive: bool, strict: bool) -> CompiledPattern:
    keys: list[str] = []
    parts: list[str] = []
    positional = 0
    last = 0

    for m in _TOKEN_RE.finditer(path):
        parts.append(_literal(path, path[last : m.start()]))
        last = m.end()

        escaped, prefix, name, custom, group, modifier, asterisk = m.groups()
        if escaped:
            parts.append(re.escape(escaped[1]))
            continue

        if name is None:
            name = str(positional)
            positional += 1

        pattern = custom or group or (".*" if asterisk else _DEFAULT_SEGMENT)
        _check_group(path, pattern)

        capture = pattern
        if modifier in ("+", "*"):
            capture = f"{pattern}(?:/{pattern})*"

        group_name = f"_p{len(keys)}"
        keys.append(name)
        slash = re.escape(prefix or "")
        if modifier in ("?", "*"):
            parts.append(f"(?:{slash}(?P<{group_name}>{capture}))?")
        else:
            parts.append(f"{slash}(?P<{group_name}>{capture})")

    parts.append(_literal(path, path[last:]))
    source = "".join(parts)

    if not strict:
        if source.endswith("/"):
            source = source[:-1]
        source += "(?:/)?"

    try:
        regex = re.compile(source, 0 if case_sensitive else re.IGNORECASE)
    except re.error as exc:
        raise PatternError(path, str(exc)) from exc

    return CompiledPattern(path=path, regex=regex, keys=tuple(keys))


def _literal(path: str, text: str) -> str:
    """Escape literal text between tokens; unescaped parens mean a broken group."""
    if "(" in text or ")" in text:
        raise PatternError(path, "unbalanced group parentheses")
    return re.escape(text)


def _check_group(path: str, pattern: str) -> None:
    """Reject custom regexes that would break the generated pattern."""
    try:
        re.compile(pattern)
    except re.error as exc:
        raise PatternError(path, f"bad parameter regex {pattern!r}: {exc}") from exc
