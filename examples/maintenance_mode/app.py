"""Maintenance Mode: toggling routes at runtime behind one WSGI app.

Demonstrates:
- Mounting ``router.middleware`` once in a host pipeline (plain WSGI here)
- Several handlers per route, run in registration order
- Swapping routes for a catch-all handler while the app is serving
- Falling through to the host's 404 when no handler ends the chain

Run:
    cd examples/maintenance_mode && python app.py
"""

import logging
from dataclasses import dataclass, field
from wsgiref.simple_server import make_server

from waypost import Router

router = Router(methods=["GET", "POST"])


@dataclass
class Request:
    method: str
    path: str
    params: dict[str, str] = field(default_factory=dict)


@dataclass
class Response:
    status: str = "200 OK"
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: str = ""

    def send(self, body: str, status: str = "200 OK") -> None:
        self.status = status
        self.body = body
        self.headers.append(("Content-Type", "text/plain; charset=utf-8"))


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def add_powered_by(request: Request, response: Response, next) -> None:
    response.headers.append(("X-Powered-By", "waypost"))
    next()


def index(request: Request, response: Response, next) -> None:
    response.send("OK")


def greet(request: Request, response: Response, next) -> None:
    response.send(f"Hello, {request.params['name']}!")


def maintenance(request: Request, response: Response, next) -> None:
    response.send("Down for maintenance", status="503 Service Unavailable")


def enable_maintenance(request: Request, response: Response, next) -> None:
    router.unget("/").unget("/hello/:name")
    router.get("*", maintenance)
    response.send("maintenance on")


def disable_maintenance(request: Request, response: Response, next) -> None:
    # Only the maintenance binding of "*"; add_powered_by stays
    router.unget("*", maintenance)
    router.get("/", index).get("/hello/:name", greet)
    response.send("maintenance off")


router.get("*", add_powered_by)
router.get("/", index)
router.get("/hello/:name", greet)
router.post("/admin/maintenance", enable_maintenance)
router.post("/admin/maintenance/off", disable_maintenance)


# ---------------------------------------------------------------------------
# Host pipeline
# ---------------------------------------------------------------------------


def app(environ, start_response):
    request = Request(environ["REQUEST_METHOD"], environ.get("PATH_INFO") or "/")
    response = Response()

    def not_found() -> None:
        response.send("Not Found", status="404 Not Found")

    router.middleware(request, response, not_found)
    start_response(response.status, response.headers)
    return [response.body.encode()]


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    with make_server("127.0.0.1", 8000, app) as server:
        server.serve_forever()
