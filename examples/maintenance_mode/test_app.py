"""Tests for the maintenance mode example."""

from wsgiref.util import setup_testing_defaults


def _call(module, method: str, path: str) -> tuple[str, dict[str, str], str]:
    environ: dict = {"REQUEST_METHOD": method, "PATH_INFO": path}
    setup_testing_defaults(environ)
    captured: dict = {}

    def start_response(status, headers):
        captured["status"] = status
        captured["headers"] = dict(headers)

    body = b"".join(module.app(environ, start_response)).decode()
    return captured["status"], captured["headers"], body


class TestMaintenanceMode:
    def test_index(self, example_app) -> None:
        status, headers, body = _call(example_app, "GET", "/")
        assert status == "200 OK"
        assert body == "OK"
        assert headers["X-Powered-By"] == "waypost"

    def test_params(self, example_app) -> None:
        status, _, body = _call(example_app, "GET", "/hello/ada")
        assert status == "200 OK"
        assert body == "Hello, ada!"

    def test_unknown_path_falls_through(self, example_app) -> None:
        status, _, body = _call(example_app, "GET", "/missing")
        assert status == "404 Not Found"
        assert body == "Not Found"

    def test_unregistered_method_falls_through(self, example_app) -> None:
        status, _, _ = _call(example_app, "DELETE", "/")
        assert status == "404 Not Found"

    def test_toggle(self, example_app) -> None:
        _call(example_app, "POST", "/admin/maintenance")

        status, headers, body = _call(example_app, "GET", "/hello/ada")
        assert status == "503 Service Unavailable"
        assert body == "Down for maintenance"
        assert headers["X-Powered-By"] == "waypost"

        status, _, _ = _call(example_app, "GET", "/")
        assert status == "503 Service Unavailable"

        _call(example_app, "POST", "/admin/maintenance/off")
        status, _, body = _call(example_app, "GET", "/hello/ada")
        assert status == "200 OK"
        assert body == "Hello, ada!"

    def test_post_routes_unaffected(self, example_app) -> None:
        status, _, body = _call(example_app, "POST", "/admin/maintenance")
        assert status == "200 OK"
        assert body == "maintenance on"
        status, _, _ = _call(example_app, "POST", "/admin/maintenance")
        assert status == "200 OK"
