"""Pytest configuration and fixtures for temp_env_vars tests."""

import os
import threading
import time
from pathlib import Path
from typing import Callable, Generator

import pytest

from temp_env_vars.config import reset_settings
from temp_env_vars.constants import (
    BLOCKING_ENV_VAR,
    CONFIG_PATH_ENV_VAR,
    TIMEOUT_ENV_VAR,
)

pytest_plugins = ["pytester", "temp_env_vars.pytest_plugin"]


@pytest.fixture(autouse=True)
def restore_os_environ() -> Generator[None, None, None]:
    """Put os.environ back after every test, whatever the test did."""
    original = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original)


@pytest.fixture(autouse=True)
def isolated_settings(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """Keep user settings files and overrides away from the tests.

    Parameters
    ----------
    tmp_path : Path
        Pytest temporary directory path
    monkeypatch : pytest.MonkeyPatch
        Pytest monkeypatch fixture
    """
    monkeypatch.setenv(CONFIG_PATH_ENV_VAR, str(tmp_path / "missing.yaml"))
    monkeypatch.delenv(BLOCKING_ENV_VAR, raising=False)
    monkeypatch.delenv(TIMEOUT_ENV_VAR, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def wait_until() -> Callable[[Callable[[], bool], float], None]:
    """Poll a condition until it holds.

    Returns
    -------
    callable
        Function that takes a predicate and a timeout in seconds and fails
        the test if the predicate is still false when the timeout expires
    """

    def _wait(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
        deadline = time.monotonic() + timeout
        while not predicate():
            if time.monotonic() > deadline:
                pytest.fail("Condition not met before timeout")
            time.sleep(0.005)

    return _wait


@pytest.fixture
def run_in_thread() -> Generator[Callable[..., threading.Thread], None, None]:
    """Start daemon threads and join them at teardown.

    Yields
    ------
    callable
        Function that takes a target and its args and returns the started thread
    """
    threads: list[threading.Thread] = []

    def _start(target: Callable[..., None], *args: object) -> threading.Thread:
        thread = threading.Thread(target=target, args=args, daemon=True)
        threads.append(thread)
        thread.start()
        return thread

    yield _start

    for thread in threads:
        thread.join(timeout=5)
