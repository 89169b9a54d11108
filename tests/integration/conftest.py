import shutil
from collections.abc import Generator
from pathlib import Path

import pytest

from tests.integration._harness import FIXTURE_APP, PoolProcess


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def app_dir(tmp_path: Path) -> Path:
    """Copy the fixture application into a fresh directory."""
    target = tmp_path / "app"
    _ = shutil.copytree(FIXTURE_APP, target)
    return target


@pytest.fixture
def pool(app_dir: Path, tmp_path: Path) -> Generator[PoolProcess]:
    pool = PoolProcess(
        app_dir=app_dir,
        callback_log=tmp_path / "callbacks.log",
        output_log=tmp_path / "forkpool.log",
    )
    yield pool
    pool.stop()
