# pyright: reportAny=false, reportUnknownArgumentType=false, reportUnknownMemberType=false
"""Unit tests for the Python configuration DSL."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from forkpool.config import (
    CALLBACK_SETTINGS,
    ConfigDSL,
    ConfigLoadError,
    ConfigValidationError,
    load_python_config,
)


class TestConfigDSL:
    def test_worker_group_defaults_to_default_name(self) -> None:
        dsl = ConfigDSL()

        dsl.worker_group(workers=2)

        assert dsl.to_dict()["groups"] == {"default": {"name": "default", "workers": 2}}

    def test_worker_group_drops_none_settings(self) -> None:
        dsl = ConfigDSL()

        dsl.worker_group("mail", queues=["mail"], min_priority=None)

        assert dsl.to_dict()["groups"]["mail"] == {"name": "mail", "queues": ["mail"]}

    def test_duplicate_group_raises(self) -> None:
        dsl = ConfigDSL(source="pool.py")
        dsl.worker_group("mail")

        with pytest.raises(ConfigValidationError) as exc_info:
            dsl.worker_group("mail", workers=2)

        assert exc_info.value.key == "groups.mail"
        assert exc_info.value.source == "pool.py"

    def test_groups_keep_declaration_order(self) -> None:
        dsl = ConfigDSL()
        for name in ("zeta", "alpha", "mid"):
            dsl.worker_group(name)

        assert list(dsl.to_dict()["groups"]) == ["zeta", "alpha", "mid"]

    def test_preload_app_defaults_to_enabled(self) -> None:
        dsl = ConfigDSL()

        dsl.preload_app()

        assert dsl.to_dict()["preload_app"] is True

    def test_payload_accepts_entrypoint(self) -> None:
        dsl = ConfigDSL()

        dsl.payload("jobs:run")

        assert dsl.to_dict()["payload"] == "jobs:run"

    def test_payload_works_as_decorator(self) -> None:
        dsl = ConfigDSL()

        @dsl.payload
        def run(options: dict[str, Any]) -> None:  # pyright: ignore[reportExplicitAny]
            pass

        assert dsl.to_dict()["payload"] is run
        assert callable(run)

    def test_logging_helpers_fill_logging_section(self) -> None:
        dsl = ConfigDSL()

        dsl.log_level("debug")
        dsl.log_format("text")
        dsl.log_file("log/pool.log", max_bytes=1024, backup_count=3)

        assert dsl.to_dict()["logging"] == {
            "level": "debug",
            "format": "text",
            "file": "log/pool.log",
            "max_bytes": 1024,
            "backup_count": 3,
        }

    def test_namespace_exposes_callback_decorators(self) -> None:
        dsl = ConfigDSL()
        namespace = dsl.namespace()

        for name in CALLBACK_SETTINGS:
            assert name in namespace

    def test_callback_decorator_returns_function(self) -> None:
        dsl = ConfigDSL()
        decorator: Callable[[Callable[..., object]], Callable[..., object]] = (
            dsl.namespace()["after_worker_boot"]  # pyright: ignore[reportAssignmentType]
        )

        def hook(worker: object) -> None:
            pass

        assert decorator(hook) is hook
        assert dsl.to_dict()["callbacks"] == {"after_worker_boot": hook}

    def test_to_dict_omits_callbacks_when_none_declared(self) -> None:
        assert "callbacks" not in ConfigDSL().to_dict()


class TestLoadPythonConfig:
    def test_collects_declarations(self, tmp_path: Path) -> None:
        path = tmp_path / "forkpool.conf.py"
        _ = path.write_text(
            """
worker_group("mail", workers=2, queues=["mail"])
worker_group("reports", sleep_delay=2.5)
preload_app()
app_path("boot.py")
payload("jobs:run")

@on_worker_boot
def boot(worker):
    pass
"""
        )

        data = load_python_config(path)

        assert data["groups"] == {
            "mail": {"name": "mail", "workers": 2, "queues": ["mail"]},
            "reports": {"name": "reports", "sleep_delay": 2.5},
        }
        assert data["preload_app"] is True
        assert data["app_path"] == "boot.py"
        assert data["payload"] == "jobs:run"
        assert data["callbacks"]["on_worker_boot"].__name__ == "boot"

    def test_allows_stdlib_logging_import(self, tmp_path: Path) -> None:
        path = tmp_path / "forkpool.conf.py"
        _ = path.write_text(
            """
import logging

worker_group()
payload("jobs:run")
log_level("warning")
"""
        )

        data = load_python_config(path)

        assert data["logging"] == {"level": "warning"}

    def test_syntax_error_raises_load_error_with_location(self, tmp_path: Path) -> None:
        path = tmp_path / "forkpool.conf.py"
        _ = path.write_text('worker_group("mail"\npayload("jobs:run")\n')

        with pytest.raises(ConfigLoadError) as exc_info:
            _ = load_python_config(path)

        assert exc_info.value.path == path
        assert exc_info.value.line is not None

    def test_runtime_error_raises_load_error(self, tmp_path: Path) -> None:
        path = tmp_path / "forkpool.conf.py"
        _ = path.write_text("raise RuntimeError('broken config')\n")

        with pytest.raises(ConfigLoadError, match="broken config"):
            _ = load_python_config(path)

    def test_duplicate_group_propagates_validation_error(self, tmp_path: Path) -> None:
        path = tmp_path / "forkpool.conf.py"
        _ = path.write_text('worker_group("mail")\nworker_group("mail")\n')

        with pytest.raises(ConfigValidationError):
            _ = load_python_config(path)
