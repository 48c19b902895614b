"""Tests for Router.async_middleware: mixed sync/async handler chains."""

import anyio
import pytest

from waypost.router import Router
from waypost.testing import ChainRecorder, FakeRequest, FakeResponse


async def _run(router: Router, rec: ChainRecorder, method: str, url: str) -> FakeResponse:
    response = FakeResponse()
    await router.async_middleware(FakeRequest(method, url), response, rec.next)
    return response


@pytest.mark.anyio
async def test_async_handlers_in_order() -> None:
    rec = ChainRecorder()
    router = Router()
    router.get("/x", rec.async_handler("h1"), rec.async_handler("h2"))
    await _run(router, rec, "GET", "/x")
    assert rec.calls == ["h1", "h2", "<next>"]
    assert rec.next_calls == 1


@pytest.mark.anyio
async def test_sync_and_async_mixed() -> None:
    rec = ChainRecorder()
    router = Router()
    router.get("/x", rec.handler("sync"), rec.async_handler("async"), rec.handler("sync2"))
    await _run(router, rec, "GET", "/x")
    assert rec.calls == ["sync", "async", "sync2", "<next>"]


@pytest.mark.anyio
async def test_async_handler_can_work_after_next() -> None:
    rec = ChainRecorder()
    router = Router()

    async def wrapper(request, response, next) -> None:
        rec.calls.append("before")
        await next()
        rec.calls.append("after")

    router.get("/x", wrapper, rec.async_handler("inner"))
    await _run(router, rec, "GET", "/x")
    assert rec.calls == ["before", "inner", "<next>", "after"]


@pytest.mark.anyio
async def test_async_handler_halts_chain() -> None:
    rec = ChainRecorder()
    router = Router()

    async def respond(request, response, next) -> None:
        await anyio.sleep(0)
        response.send("done")

    router.get("/x", respond, rec.async_handler("never"))
    response = await _run(router, rec, "GET", "/x")
    assert response.text == "done"
    assert rec.calls == []
    assert rec.next_calls == 0


@pytest.mark.anyio
async def test_no_match_calls_next() -> None:
    rec = ChainRecorder()
    router = Router()
    router.get("/a", rec.async_handler("a"))
    await _run(router, rec, "GET", "/b")
    assert rec.calls == ["<next>"]


@pytest.mark.anyio
async def test_unregistered_method_calls_next() -> None:
    rec = ChainRecorder()
    router = Router(methods=["GET"])
    await _run(router, rec, "BREW", "/")
    assert rec.next_calls == 1


@pytest.mark.anyio
async def test_async_outer_continuation_awaited() -> None:
    router = Router()
    seen: list[str] = []

    async def outer() -> None:
        await anyio.sleep(0)
        seen.append("outer")

    router.get("/x", ChainRecorder().async_handler("h"))
    await router.async_middleware(FakeRequest("GET", "/x"), FakeResponse(), outer)
    assert seen == ["outer"]


@pytest.mark.anyio
async def test_next_awaited_twice_runs_once() -> None:
    rec = ChainRecorder()
    router = Router()

    async def eager(request, response, next) -> None:
        await next()
        await next()

    router.get("/x", eager, rec.async_handler("after"))
    await _run(router, rec, "GET", "/x")
    assert rec.calls == ["after", "<next>"]


@pytest.mark.anyio
async def test_handler_exception_propagates() -> None:
    rec = ChainRecorder()
    router = Router()

    async def boom(request, response, next) -> None:
        raise RuntimeError("boom")

    router.get("/x", boom, rec.async_handler("after"))
    with pytest.raises(RuntimeError, match="boom"):
        await _run(router, rec, "GET", "/x")
    assert rec.next_calls == 0


@pytest.mark.anyio
async def test_params_exposed() -> None:
    rec = ChainRecorder()
    router = Router()
    router.get("/users/:id", rec.async_handler("h"))
    await _run(router, rec, "GET", "/users/7")
    assert rec.params == [{"id": "7"}]


@pytest.mark.anyio
async def test_snapshot_survives_removal() -> None:
    rec = ChainRecorder()
    router = Router()
    later = rec.async_handler("later")

    async def remover(request, response, next) -> None:
        router.unget("/x")
        await next()

    router.get("/x", remover, later)
    await _run(router, rec, "GET", "/x")
    assert rec.calls == ["later", "<next>"]
    assert router.bindings("GET") == ()


@pytest.mark.anyio
async def test_stored_next_resumes_chain_later() -> None:
    rec = ChainRecorder()
    router = Router()
    pending = []

    def deferring(request, response, next) -> None:
        pending.append(next)

    router.get("/x", deferring, rec.handler("later"))
    await _run(router, rec, "GET", "/x")
    assert rec.calls == []

    pending.pop()()
    for _ in range(3):
        await anyio.sleep(0)
    assert rec.calls == ["later", "<next>"]
    assert rec.next_calls == 1


@pytest.mark.anyio
async def test_stored_next_can_be_awaited_later() -> None:
    rec = ChainRecorder()
    router = Router()
    pending = []

    async def deferring(request, response, next) -> None:
        pending.append(next)

    router.get("/x", deferring, rec.async_handler("later"))
    await _run(router, rec, "GET", "/x")

    advance = pending.pop()
    await advance()
    await advance()
    for _ in range(3):
        await anyio.sleep(0)
    assert rec.calls == ["later", "<next>"]
    assert rec.next_calls == 1
