"""Workflow run models returned by the GitHub Actions API."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RunStatus(str, Enum):
    """Run statuses the gate queries for. ``completed`` is terminal."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class WorkflowRun(BaseModel):
    """Snapshot of a single workflow run as reported by the API."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int = Field(..., description="Platform-assigned run id.")
    run_number: int = Field(..., description="Strictly increasing number per workflow.")
    workflow_id: int = Field(..., description="Id of the workflow this run instantiates.")
    status: str = Field(..., description="Run status, e.g. queued, in_progress, completed.")
    head_branch: str | None = Field(default=None, description="Branch the run was triggered on.")
    html_url: str | None = Field(default=None, description="Link to the run in the web UI.")

    @property
    def is_completed(self) -> bool:
        return self.status == RunStatus.COMPLETED.value

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "WorkflowRun":
        return cls.model_validate(payload)


class RunIdentity(BaseModel):
    """Who the current run is: repository coordinates plus its workflow position."""

    model_config = ConfigDict(frozen=True)

    owner: str
    repository: str
    run_id: int
    workflow_id: int | None = None
    run_number: int | None = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repository}"

    def with_run(self, run: WorkflowRun) -> "RunIdentity":
        """Return a copy completed with the workflow id and run number of ``run``."""

        return self.model_copy(update={"workflow_id": run.workflow_id, "run_number": run.run_number})


__all__ = ["RunIdentity", "RunStatus", "WorkflowRun"]
