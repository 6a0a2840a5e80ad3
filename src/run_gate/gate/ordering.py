"""Select the earlier runs the current run has to wait for."""

from __future__ import annotations

from typing import Iterable

from ..github.models import WorkflowRun


def select_wait_set(current: WorkflowRun, candidates: Iterable[WorkflowRun]) -> tuple[WorkflowRun, ...]:
    """Return the candidates numbered below ``current``, most recent first.

    Runs can be deleted between listing and now, so membership is decided by
    run number alone. The same run listed twice (queued, then in progress)
    appears once.
    """

    seen: set[int] = set()
    selected: list[WorkflowRun] = []
    for run in sorted(candidates, key=lambda item: (-item.run_number, item.id)):
        if run.run_number >= current.run_number or run.id in seen:
            continue
        seen.add(run.id)
        selected.append(run)
    return tuple(selected)


__all__ = ["select_wait_set"]
