from __future__ import annotations

import pytest

from run_gate.config import get_settings
from run_gate.github import WorkflowRun

_GATE_ENV_VARS = (
    "INPUT_TOKEN",
    "GITHUB_TOKEN",
    "INPUT_INTERVAL",
    "INPUT_BRANCH",
    "MQ_BRANCH_NAME",
    "GITHUB_EVENT_PATH",
    "GITHUB_EVENT_NAME",
    "GITHUB_REPOSITORY",
    "GITHUB_RUN_ID",
    "GITHUB_API_URL",
    "RUN_GATE_REQUEST_TIMEOUT",
    "RUN_GATE_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch):
    for name in _GATE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_run():
    def factory(
        run_id: int,
        run_number: int,
        status: str = "queued",
        *,
        workflow_id: int = 7,
        head_branch: str | None = "main",
    ) -> WorkflowRun:
        return WorkflowRun(
            id=run_id,
            run_number=run_number,
            workflow_id=workflow_id,
            status=status,
            head_branch=head_branch,
        )

    return factory


class RecordingSleep:
    """Stands in for ``asyncio.sleep`` and remembers every requested delay."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()
