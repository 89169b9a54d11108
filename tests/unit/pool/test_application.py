"""Unit tests for the application loader."""

import sys
from collections.abc import Generator
from pathlib import Path

import pytest

from forkpool.exceptions import ApplicationLoadError
from forkpool.pool import APPLICATION_MODULE_NAME, load_application, resolve_app_path


@pytest.fixture
def app_root(tmp_path: Path) -> Generator[Path]:
    (tmp_path / "config").mkdir()
    saved_path = list(sys.path)
    yield tmp_path
    sys.path[:] = saved_path
    _ = sys.modules.pop(APPLICATION_MODULE_NAME, None)
    _ = sys.modules.pop("forkpool_test_app_lib", None)


class TestResolveAppPath:
    def test_relative_path_joins_root(self, tmp_path: Path) -> None:
        resolved = resolve_app_path(Path("config/environment.py"), root=tmp_path)

        assert resolved == tmp_path / "config" / "environment.py"

    def test_absolute_path_is_kept(self, tmp_path: Path) -> None:
        boot_file = tmp_path / "boot.py"

        assert resolve_app_path(boot_file, root=Path("/elsewhere")) == boot_file


class TestLoadApplication:
    def test_executes_boot_file(self, app_root: Path) -> None:
        _ = (app_root / "config" / "environment.py").write_text("BOOTED = True\n")

        module = load_application(Path("config/environment.py"), root=app_root)

        assert module.BOOTED is True
        assert sys.modules[APPLICATION_MODULE_NAME] is module

    def test_puts_app_root_on_sys_path(self, app_root: Path) -> None:
        _ = (app_root / "forkpool_test_app_lib.py").write_text("VALUE = 7\n")
        _ = (app_root / "config" / "environment.py").write_text(
            "import forkpool_test_app_lib\nVALUE = forkpool_test_app_lib.VALUE\n"
        )

        module = load_application(Path("config/environment.py"), root=app_root)

        assert module.VALUE == 7
        assert str(app_root) in sys.path

    def test_missing_boot_file_explains_root(self, app_root: Path) -> None:
        with pytest.raises(ApplicationLoadError) as exc_info:
            _ = load_application(Path("config/environment.py"), root=app_root)

        error = exc_info.value
        assert error.path == app_root / "config" / "environment.py"
        assert "Could not find application initialization file" in str(error)
        assert "run from the application root directory" in str(error)

    def test_wraps_boot_errors(self, app_root: Path) -> None:
        _ = (app_root / "config" / "environment.py").write_text(
            "raise RuntimeError('database unavailable')\n"
        )

        with pytest.raises(ApplicationLoadError, match="database unavailable") as exc_info:
            _ = load_application(Path("config/environment.py"), root=app_root)

        assert isinstance(exc_info.value.cause, RuntimeError)
        assert APPLICATION_MODULE_NAME not in sys.modules
