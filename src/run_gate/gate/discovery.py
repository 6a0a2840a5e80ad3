"""Find the current run and its active siblings."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..github.client import RunSource
from ..github.models import RunIdentity, RunStatus, WorkflowRun

log = logging.getLogger(__name__)

ACTIVE_STATUSES = (RunStatus.QUEUED, RunStatus.IN_PROGRESS)


@dataclass(slots=True)
class Discovery:
    """The current run's record plus every queued or in-progress sibling."""

    current: WorkflowRun
    siblings: list[WorkflowRun]


async def discover(source: RunSource, identity: RunIdentity, branch: str | None) -> Discovery:
    """Fetch the current run, then list its workflow's queued and in-progress runs.

    Any failed call propagates; there is no partial result.
    """

    current = await source.get_workflow_run(identity.owner, identity.repository, identity.run_id)

    siblings: list[WorkflowRun] = []
    for status in ACTIVE_STATUSES:
        siblings.extend(
            await source.list_workflow_runs(
                identity.owner,
                identity.repository,
                current.workflow_id,
                status=status.value,
                branch=branch or None,
            )
        )

    log.debug(
        "Discovered sibling runs",
        extra={
            "run_id": current.id,
            "workflow_id": current.workflow_id,
            "run_number": current.run_number,
            "branch": branch,
            "siblings": len(siblings),
        },
    )
    return Discovery(current=current, siblings=siblings)


__all__ = ["ACTIVE_STATUSES", "Discovery", "discover"]
