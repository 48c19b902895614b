"""Test helpers for code that mounts a waypost router.

Stand-ins for the request/response objects a transport layer would
supply, plus a recorder for asserting on handler chains.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class FakeRequest:
    """Minimal request: method, url, and a params mapping the router fills."""

    method: str = "GET"
    url: str = "/"
    params: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class FakeResponse:
    """Minimal response that records what handlers sent."""

    status: int = 200
    body: list[str] = field(default_factory=list)
    finished: bool = False

    def send(self, text: str = "", *, status: int | None = None) -> None:
        if status is not None:
            self.status = status
        self.body.append(text)
        self.finished = True

    @property
    def text(self) -> str:
        return "".join(self.body)


class ChainRecorder:
    """Builds handlers that log their calls, and an outer continuation.

    Usage::

        rec = ChainRecorder()
        router.get("/x", rec.handler("h1"), rec.handler("h2", advance=False))
        router.middleware(FakeRequest("GET", "/x"), FakeResponse(), rec.next)
        assert rec.calls == ["h1", "h2"]
        assert rec.next_calls == 0
    """

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.params: list[dict[str, str]] = []
        self.next_calls = 0

    def handler(self, name: str, *, advance: bool = True) -> Any:
        """A sync handler that records *name* and optionally calls next()."""

        def _handler(request: Any, response: Any, next: Any) -> None:
            self.calls.append(name)
            self.params.append(dict(getattr(request, "params", {}) or {}))
            if advance:
                next()

        _handler.__name__ = name
        return _handler

    def async_handler(self, name: str, *, advance: bool = True) -> Any:
        """An ``async def`` handler that records *name* and awaits next()."""

        async def _handler(request: Any, response: Any, next: Any) -> None:
            self.calls.append(name)
            self.params.append(dict(getattr(request, "params", {}) or {}))
            if advance:
                await next()

        _handler.__name__ = name
        return _handler

    def next(self) -> None:
        """Outer continuation; counts how often the chain fell through."""
        self.next_calls += 1
        self.calls.append("<next>")

    def reset(self) -> None:
        self.calls.clear()
        self.params.clear()
        self.next_calls = 0
