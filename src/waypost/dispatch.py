"""Request dispatch: run matching handlers as a continuation chain.

For each request the dispatcher takes a snapshot of the bindings that
match its method and path, then calls them one at a time::

    handler(request, response, advance)

``advance()`` moves to the next matching handler, or to the caller's own
``next`` once the chain is exhausted. A handler that never calls it ends
the chain. Handler exceptions are not caught here.
"""

import asyncio
import logging
import re
from collections.abc import Generator, MutableMapping
from typing import Any
from urllib.parse import urlsplit

from waypost._internal.invoke import invoke
from waypost._internal.types import Next
from waypost.routing.route import RouteMatch
from waypost.routing.table import RouteTable

logger = logging.getLogger("waypost.dispatch")

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")

# Chains resumed after their handler returned; referenced until done
_late_chains: set[asyncio.Task[None]] = set()


def request_path(request: Any) -> str:
    """The path to route on: ``request.path``, else ``request.url`` minus query.

    Only absolute URLs (``scheme://host/...``) are split; anything else is
    cut at the first ``?`` or ``#``, so ``//host/x`` stays a path.
    """
    path = getattr(request, "path", None)
    if path is None:
        url = str(getattr(request, "url", ""))
        path = url.split("?", 1)[0].split("#", 1)[0]
        if _SCHEME_RE.match(path):
            path = urlsplit(url).path
    return path or "/"


def _expose_params(request: Any, params: dict[str, str]) -> None:
    """Refresh ``request.params`` if the request carries a mutable mapping."""
    target = getattr(request, "params", None)
    if isinstance(target, MutableMapping):
        target.clear()
        target.update(params)


class _Advance:
    """One-shot continuation for the sync chain.

    Calling it runs the handler at ``index`` with a fresh ``_Advance`` for
    the one after it, or the caller's ``next`` once the targets run out.
    Each handler costs two stack frames: its own and this ``__call__``.
    """

    __slots__ = ("_called", "_index", "_next", "_request", "_response", "_targets")

    def __init__(
        self,
        targets: tuple[RouteMatch, ...],
        index: int,
        request: Any,
        response: Any,
        next: Next,
    ) -> None:
        self._targets = targets
        self._index = index
        self._request = request
        self._response = response
        self._next = next
        self._called = False

    def __call__(self) -> None:
        if self._called:
            logger.debug("Ignoring repeated call to next()")
            return
        self._called = True
        if self._index >= len(self._targets):
            self._next()
            return
        match = self._targets[self._index]
        _expose_params(self._request, match.params)
        match.handler(
            self._request,
            self._response,
            _Advance(self._targets, self._index + 1, self._request, self._response, self._next),
        )


class _AsyncAdvance:
    """One-shot continuation for the async chain.

    Calling it marks the chain as advanced and returns an awaitable. An
    ``async def`` handler awaits it in place; for a handler that calls it
    without awaiting, the dispatcher runs the rest of the chain once the
    handler returns. Called after that point (a stored ``next``), the rest
    of the chain is scheduled as a task on the running asyncio loop; the
    returned awaitable may still be awaited instead.
    """

    __slots__ = ("_called", "_done", "_settled", "_step")

    def __init__(self, step: Next) -> None:
        self._step = step
        self._called = False
        self._done = False
        self._settled = False

    def __call__(self) -> "_AsyncAdvance":
        if self._called:
            logger.debug("Ignoring repeated call to next()")
        self._called = True
        if self._settled and not self._done:
            self._schedule()
        return self

    def _schedule(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("next() called late outside an asyncio loop; await its result")
            return
        task = loop.create_task(self._run())
        _late_chains.add(task)
        task.add_done_callback(_late_chains.discard)

    def __await__(self) -> Generator[Any, None, None]:
        return self._run().__await__()

    async def _run(self) -> None:
        if self._done:
            return
        self._done = True
        await self._step()

    async def settle(self) -> None:
        """Run the remaining chain if next() was called but never awaited."""
        if self._called:
            await self._run()
        self._settled = True


class Dispatcher:
    """Dispatch entry points bound to one ``RouteTable``.

    ``__call__`` is the synchronous middleware; ``call_async`` the async one.
    Both read the table at request time, so routes added or removed after
    the dispatcher is built take effect on the next request.
    """

    __slots__ = ("_table",)

    def __init__(self, table: RouteTable) -> None:
        self._table = table

    def targets(self, request: Any) -> tuple[RouteMatch, ...]:
        """Snapshot of matching bindings for *request*, in registration order."""
        method = str(request.method).upper()
        path = request_path(request)
        matches = self._table.match(method, path)
        if matches is None:
            logger.debug("Method %s not registered, passing %s through", method, path)
            return ()
        if not matches:
            logger.debug("No route for %s %s, passing through", method, path)
        return matches

    # -- Sync chain --

    def __call__(self, request: Any, response: Any, next: Next) -> None:
        targets = self.targets(request)
        if not targets:
            next()
            return
        _Advance(targets, 0, request, response, next)()

    # -- Async chain --

    async def call_async(self, request: Any, response: Any, next: Next) -> None:
        targets = self.targets(request)
        if not targets:
            await invoke(next)
            return
        await self._step_async(targets, 0, request, response, next)

    async def _step_async(
        self,
        targets: tuple[RouteMatch, ...],
        index: int,
        request: Any,
        response: Any,
        next: Next,
    ) -> None:
        if index >= len(targets):
            await invoke(next)
            return
        match = targets[index]
        _expose_params(request, match.params)
        advance = _AsyncAdvance(
            lambda: self._step_async(targets, index + 1, request, response, next)
        )
        await invoke(match.handler, request, response, advance)
        await advance.settle()
