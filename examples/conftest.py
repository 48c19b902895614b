"""Fixtures for the waypost examples.

Each example directory holds an ``app.py`` with a module-level router.
Routers are mutated by requests, so every test gets its own copy of the
module.
"""

import importlib.util
from pathlib import Path

import pytest


@pytest.fixture
def example_app(request: pytest.FixtureRequest):
    """Execute the test's sibling ``app.py`` as a new module and return it."""
    app_path = Path(request.path).with_name("app.py")
    spec = importlib.util.spec_from_file_location(
        f"waypost_example_{app_path.parent.name}", app_path
    )
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module
