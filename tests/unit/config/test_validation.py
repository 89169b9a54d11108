# pyright: reportAny=false, reportUnknownArgumentType=false
"""Unit tests for config validation."""

from typing import Any

import pytest

from forkpool.config import (
    ConfigValidationError,
    PoolConfig,
    ValidationIssue,
    build_config,
    raise_if_validation_errors,
    validate_config,
)


def _valid_config(**overrides: Any) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    data: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
        "payload": "jobs:run",
        "groups": {"default": {"workers": 2}},
    }
    data.update(overrides)
    return data


class TestValidationIssue:
    def test_stores_all_attributes(self) -> None:
        issue = ValidationIssue(
            key="groups.default.workers",
            message="Input should be greater than 0",
            expected="greater than 0",
            actual=0,
            source="forkpool.toml",
            severity="error",
        )

        assert issue.key == "groups.default.workers"
        assert issue.message == "Input should be greater than 0"
        assert issue.expected == "greater than 0"
        assert issue.actual == 0
        assert issue.source == "forkpool.toml"
        assert issue.severity == "error"


class TestValidateConfig:
    def test_valid_config_returns_empty_list(self) -> None:
        assert validate_config(_valid_config()) == []

    def test_reports_worker_count_key(self) -> None:
        issues = validate_config(_valid_config(groups={"default": {"workers": 0}}))

        assert len(issues) == 1
        assert issues[0].key == "groups.default.workers"
        assert issues[0].actual == 0
        assert issues[0].expected == "greater than 0"

    def test_reports_every_issue(self) -> None:
        data = _valid_config(
            groups={"default": {"workers": 0}},
            logging={"level": "loud"},
        )

        keys = {issue.key for issue in validate_config(data)}

        assert keys == {"groups.default.workers", "logging.level"}

    def test_reports_missing_payload(self) -> None:
        issues = validate_config({"groups": {"default": {}}})

        assert [issue.key for issue in issues] == ["payload"]

    def test_tags_issues_with_source(self) -> None:
        issues = validate_config({"groups": {"default": {}}}, source="pool.toml")

        assert issues[0].source == "pool.toml"

    def test_rejects_unknown_top_level_keys(self) -> None:
        issues = validate_config(_valid_config(daemonize=True))

        assert [issue.key for issue in issues] == ["daemonize"]


class TestRaiseIfValidationErrors:
    def test_does_nothing_without_errors(self) -> None:
        raise_if_validation_errors([])

    def test_ignores_warnings(self) -> None:
        issue = ValidationIssue(
            key="x", message="m", expected=None, actual=None, source=None, severity="warning"
        )

        raise_if_validation_errors([issue])

    def test_raises_for_first_error(self) -> None:
        issues = [
            ValidationIssue(
                key="groups.a.workers",
                message="Input should be greater than 0",
                expected="greater than 0",
                actual=0,
                source=None,
                severity="error",
            ),
            ValidationIssue(
                key="payload",
                message="Field required",
                expected=None,
                actual=None,
                source=None,
                severity="error",
            ),
        ]

        with pytest.raises(ConfigValidationError) as exc_info:
            raise_if_validation_errors(issues, source="pool.toml")

        error = exc_info.value
        assert error.key == "groups.a.workers"
        assert error.value == 0
        assert error.expected == "greater than 0"
        assert error.source == "pool.toml"
        assert "Invalid configuration value for 'groups.a.workers'" in str(error)

    def test_uses_root_placeholder_for_model_errors(self) -> None:
        issue = ValidationIssue(
            key="",
            message="Value error, At least one worker group must be defined",
            expected=None,
            actual={},
            source=None,
            severity="error",
        )

        with pytest.raises(ConfigValidationError, match="'<root>'"):
            raise_if_validation_errors([issue])


class TestBuildConfig:
    def test_returns_pool_config(self) -> None:
        config = build_config(_valid_config())

        assert isinstance(config, PoolConfig)
        assert config.groups["default"].workers == 2

    def test_raises_config_validation_error(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            _ = build_config(_valid_config(groups={}), source="pool.toml")

        assert "At least one worker group" in str(exc_info.value)
        assert exc_info.value.source == "pool.toml"
