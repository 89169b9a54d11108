from typing import Any

import pytest
from pytest_mock import MockerFixture

from forkpool.config import PoolConfig
from forkpool.pool import Supervisor
from forkpool.utils import create_pool_logger
from tests.unit.pool._fakes import FakeProcesses, LogCapture, SupervisorFactory


@pytest.fixture
def processes(mocker: MockerFixture) -> FakeProcesses:
    fake = FakeProcesses()
    _ = mocker.patch("forkpool.pool._supervisor.os.fork", side_effect=fake.fork)
    _ = mocker.patch("forkpool.pool._supervisor.os.kill", side_effect=fake.kill)
    _ = mocker.patch("forkpool.pool._supervisor.os.waitpid", side_effect=fake.waitpid)
    _ = mocker.patch("forkpool.pool._supervisor.MONITOR_INTERVAL", 0.01)
    return fake


@pytest.fixture
def logs() -> LogCapture:
    return LogCapture()


@pytest.fixture
def make_supervisor(logs: LogCapture) -> SupervisorFactory:
    def _make(
        groups: dict[str, dict[str, Any]] | None = None,  # pyright: ignore[reportExplicitAny]
        **settings: Any,  # pyright: ignore[reportExplicitAny]
    ) -> Supervisor:
        data: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
            "payload": "jobs:run",
            "groups": groups if groups is not None else {"default": {}},
            **settings,
        }
        logger = create_pool_logger(level="debug", stream=logs.stream)
        return Supervisor(PoolConfig.model_validate(data), logger=logger, hostname="box")

    return _make
