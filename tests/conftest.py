"""Shared test fixtures for forkpool tests."""

import pytest
from rich.console import Console


@pytest.fixture
def console() -> Console:
    return Console(
        width=100,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
    )


@pytest.fixture(autouse=True)
def _isolate_log_env(monkeypatch: pytest.MonkeyPatch) -> None:  # pyright: ignore[reportUnusedFunction]
    monkeypatch.delenv("FORKPOOL_DEBUG", raising=False)
    monkeypatch.delenv("FORKPOOL_LOG_LEVEL", raising=False)
