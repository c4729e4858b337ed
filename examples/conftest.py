"""Fixtures for the tether examples.

Each example directory holds an ``app.py`` defining a module-level
``app``. Bindings register at import time and an ``App`` freezes on
first use, so the module is executed again for every test instead of
being imported once.
"""

import importlib.util
from collections.abc import AsyncIterator
from pathlib import Path

import pytest

from tether.app import App
from tether.testing import TestClient


def _load_app(app_path: Path) -> App:
    spec = importlib.util.spec_from_file_location(f"tether_example_{app_path.parent.name}", app_path)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module.app


@pytest.fixture
def example_app(request: pytest.FixtureRequest) -> App:
    """A freshly executed, still unfrozen App from the test's sibling app.py."""
    app = _load_app(Path(request.path).parent / "app.py")
    assert not app.bindings.frozen
    return app


@pytest.fixture
async def example_client(example_app: App) -> AsyncIterator[TestClient]:
    """A TestClient already entered (app frozen, startup hooks run)."""
    async with TestClient(example_app) as client:
        yield client
