"""Block until each selected run has completed."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Iterable, TypeVar

from ..github.client import RunSource
from ..github.models import RunIdentity, WorkflowRun
from ..reporting import Reporter

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


class WaitState(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


@dataclass(slots=True)
class WaitOutcome:
    """How waiting on a single run went."""

    run_id: int
    run_number: int
    polls: int
    final_status: str


async def poll_until(
    fetch: Callable[[], Awaitable[T]],
    done: Callable[[T], bool],
    *,
    initial: T,
    interval: float,
    sleep: Sleep = asyncio.sleep,
    on_pending: Callable[[T], None] | None = None,
) -> tuple[T, int]:
    """Re-fetch every ``interval`` seconds until ``done`` holds.

    ``initial`` counts as the first observation, so an already finished value
    returns without sleeping. Returns the final value and the number of
    fetches made. There is no deadline.
    """

    value = initial
    polls = 0
    while not done(value):
        if on_pending is not None:
            on_pending(value)
        await sleep(interval)
        value = await fetch()
        polls += 1
    return value, polls


def _format_seconds(seconds: float) -> str:
    return f"{seconds:g}"


class CompletionWaiter:
    """Wait for runs one after another, never moving on before the current one completes."""

    def __init__(
        self,
        source: RunSource,
        identity: RunIdentity,
        *,
        interval: float,
        reporter: Reporter,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.source = source
        self.identity = identity
        self.interval = interval
        self.reporter = reporter
        self._sleep = sleep
        self.states: dict[int, WaitState] = {}

    async def wait_for(self, run: WorkflowRun) -> WaitOutcome:
        self.states[run.id] = WaitState.PENDING

        async def fetch() -> WorkflowRun:
            return await self.source.get_workflow_run(
                self.identity.owner, self.identity.repository, run.id
            )

        def on_pending(snapshot: WorkflowRun) -> None:
            self.reporter.info(
                f"Run ({snapshot.id}) not completed yet. "
                f"Waiting for {_format_seconds(self.interval)} seconds."
            )

        final, polls = await poll_until(
            fetch,
            lambda snapshot: snapshot.is_completed,
            initial=run,
            interval=self.interval,
            sleep=self._sleep,
            on_pending=on_pending,
        )
        self.states[run.id] = WaitState.COMPLETED
        self.reporter.info(f"Run ({final.id}) has completed.")
        return WaitOutcome(
            run_id=final.id,
            run_number=final.run_number,
            polls=polls,
            final_status=final.status,
        )

    async def wait_all(self, wait_set: Iterable[WorkflowRun]) -> list[WaitOutcome]:
        """Wait for every run in order; the first fetch error aborts the rest."""

        outcomes: list[WaitOutcome] = []
        for run in wait_set:
            outcomes.append(await self.wait_for(run))
        return outcomes


__all__ = ["CompletionWaiter", "Sleep", "WaitOutcome", "WaitState", "poll_until"]
