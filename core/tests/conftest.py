"""Shared fixtures for task composer tests."""

from __future__ import annotations

from typing import Any

import pytest
from fakes import FakeEnvironment

from composer.graph.context import DataStorage, ExecutionContext, TaskProblem
from composer.instructions import ManipulatorInfo
from composer.observability import clear_trace_context
from composer.profiles.dictionary import ProfileDictionary


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Never read the developer's ~/.composer configuration in tests."""
    monkeypatch.setenv("COMPOSER_CONFIG_FILE", str(tmp_path / "missing-configuration.json"))
    yield
    clear_trace_context()


@pytest.fixture
def environment() -> FakeEnvironment:
    return FakeEnvironment()


@pytest.fixture
def make_context():
    def _make(
        data: dict[str, Any] | None = None,
        environment: FakeEnvironment | None = None,
        profiles: ProfileDictionary | None = None,
        remapping: dict[str, dict[str, str]] | None = None,
    ) -> ExecutionContext:
        return ExecutionContext(
            problem=TaskProblem(
                environment=environment or FakeEnvironment(),
                manip_info=ManipulatorInfo(manipulator="manipulator"),
                composite_profile_remapping=remapping or {},
                name="test-problem",
            ),
            data_storage=DataStorage(data),
            profiles=profiles or ProfileDictionary(),
        )

    return _make
