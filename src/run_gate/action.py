"""Entry point that runs the gate inside a GitHub Actions job."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field

from pydantic import ValidationError

from . import __version__
from .config import GateSettings, get_settings
from .gate import (
    CompletionWaiter,
    ExecutionContext,
    GateError,
    WaitOutcome,
    discover,
    load_event_payload,
    resolve_context,
    resolve_identity,
    select_wait_set,
)
from .gate.context import MERGE_QUEUE_BRANCH_VAR
from .gate.waiter import Sleep
from .github import GitHubApiError, GitHubClient, RunIdentity, RunSource, WorkflowRun
from .reporting import ActionsReporter, Reporter


@dataclass(slots=True)
class GateResult:
    """Everything the gate learned and waited on during one invocation."""

    identity: RunIdentity
    context: ExecutionContext
    current: WorkflowRun
    wait_set: tuple[WorkflowRun, ...]
    outcomes: list[WaitOutcome] = field(default_factory=list)


def configure_logging(level: str) -> None:
    """Configure root logging for the gate."""

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def build_client(settings: GateSettings) -> GitHubClient:
    return GitHubClient(settings.token, api_url=settings.api_url, timeout=settings.request_timeout)


def prepare(settings: GateSettings, reporter: Reporter) -> tuple[RunIdentity, ExecutionContext]:
    """Read the trigger payload and resolve the branch and run identity."""

    payload = load_event_payload(settings.event_path)
    context = resolve_context(
        settings.branch,
        payload,
        {MERGE_QUEUE_BRANCH_VAR: settings.merge_queue_branch or ""},
        reporter,
        event_name=settings.event_name,
    )
    identity = resolve_identity(payload, repository=settings.repository, run_id=settings.run_id)
    summary = {**context.model_dump(), "repository": identity.full_name, "run_id": identity.run_id}
    reporter.info(f"Context: {json.dumps(summary, indent=1)}")
    return identity, context


async def run_gate(
    settings: GateSettings,
    *,
    reporter: Reporter,
    source: RunSource | None = None,
    sleep: Sleep = asyncio.sleep,
) -> GateResult:
    """Resolve, discover, select and wait. Errors propagate to the caller."""

    identity, context = prepare(settings, reporter)
    if source is not None:
        return await _serialize(settings, identity, context, source, reporter, sleep)
    async with build_client(settings) as client:
        return await _serialize(settings, identity, context, client, reporter, sleep)


async def _serialize(
    settings: GateSettings,
    identity: RunIdentity,
    context: ExecutionContext,
    source: RunSource,
    reporter: Reporter,
    sleep: Sleep,
) -> GateResult:
    branch = context.branch_filter
    discovery = await discover(source, identity, branch)
    identity = identity.with_run(discovery.current)
    wait_set = select_wait_set(discovery.current, discovery.siblings)
    result = GateResult(identity=identity, context=context, current=discovery.current, wait_set=wait_set)

    if not wait_set:
        reporter.info("No active workflow runs found.")
        return result

    reporter.info(f"Found active workflow runs ({json.dumps([run.id for run in wait_set])})")
    if branch:
        reporter.info(f'on branch "{branch}"')

    waiter = CompletionWaiter(
        source,
        identity,
        interval=settings.interval,
        reporter=reporter,
        sleep=sleep,
    )
    result.outcomes = await waiter.wait_all(wait_set)
    return result


def main() -> int:
    """Entry point for running the gate from a workflow step."""

    reporter = ActionsReporter()
    try:
        settings = get_settings()
    except ValidationError as exc:
        configure_logging("INFO")
        reporter.set_failed(f"Invalid configuration: {exc}")
        return 1

    configure_logging(settings.log_level)
    log = logging.getLogger(__name__)
    log.info(
        "Starting run gate",
        extra={"version": __version__, "interval": settings.interval, "api_url": settings.api_url},
    )

    try:
        result = asyncio.run(run_gate(settings, reporter=reporter))
    except (GateError, GitHubApiError) as exc:
        reporter.set_failed(str(exc))
        return 1
    except Exception as exc:
        log.exception("Unexpected gate failure")
        reporter.set_failed(str(exc) or exc.__class__.__name__)
        return 1

    log.info(
        "Run gate released",
        extra={"run_id": result.identity.run_id, "waited_runs": len(result.outcomes)},
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
