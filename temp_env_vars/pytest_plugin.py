"""pytest integration for environment scopes.

Enable it from a conftest.py::

    pytest_plugins = ["temp_env_vars.pytest_plugin"]

Then either request the ``temp_env`` fixture or mark a test with
``@pytest.mark.temp_env_vars``.
"""

from __future__ import annotations

import logging
from typing import Any, Generator

import pytest

from temp_env_vars.constants import PYTEST_MARKER
from temp_env_vars.scope import TempEnvScope

logger = logging.getLogger(__name__)


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        f"{PYTEST_MARKER}(blocking, timeout): restore every environment "
        "variable change made by the test when it finishes",
    )


def _scope_kwargs(marker: pytest.Mark | None) -> dict[str, Any]:
    if marker is None:
        return {}
    return {
        key: marker.kwargs[key] for key in ("blocking", "timeout") if key in marker.kwargs
    }


@pytest.fixture
def temp_env(request: pytest.FixtureRequest) -> Generator[TempEnvScope, None, None]:
    """Provide an active environment scope for the test.

    Marker arguments, if the test is marked, configure the scope.

    Yields
    ------
    TempEnvScope
        Scope disposed at teardown, failing the test if restoration fails
    """
    marker = request.node.get_closest_marker(PYTEST_MARKER)
    scope = TempEnvScope(**_scope_kwargs(marker))
    try:
        yield scope
    finally:
        scope.dispose()


@pytest.fixture(autouse=True)
def _temp_env_vars_marker(request: pytest.FixtureRequest) -> Generator[None, None, None]:
    marker = request.node.get_closest_marker(PYTEST_MARKER)
    if marker is None or "temp_env" in request.fixturenames:
        yield
        return

    logger.debug("Opening environment scope for %s", request.node.nodeid)
    with TempEnvScope(**_scope_kwargs(marker)):
        yield
