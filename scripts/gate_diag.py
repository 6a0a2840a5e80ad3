"""Run gate diagnostics CLI."""

from __future__ import annotations

import argparse
import asyncio
import json

from run_gate.action import build_client, prepare
from run_gate.config import GateSettings
from run_gate.gate import GateError, discover, select_wait_set
from run_gate.github import GitHubApiError, GitHubClient, RunIdentity, WorkflowRun
from run_gate.reporting import RecordingReporter


def load_source(settings: GateSettings) -> GitHubClient:
    return build_client(settings)


def _run_summary(run: WorkflowRun) -> dict[str, object]:
    return {
        "id": run.id,
        "run_number": run.run_number,
        "status": run.status,
        "head_branch": run.head_branch,
    }


def cmd_context(args: argparse.Namespace) -> None:
    settings = GateSettings()
    reporter = RecordingReporter()
    try:
        identity, context = prepare(settings, reporter)
    except GateError as exc:
        print(f"Invalid gate context: {exc}")
        raise SystemExit(1)
    payload = {
        "identity": identity.model_dump(),
        "context": context.model_dump(),
        "branch_filter": context.branch_filter,
        "messages": [{"level": level, "message": message} for level, message in reporter.messages],
    }
    print(json.dumps(payload, indent=2))


async def _collect_siblings(
    source: GitHubClient, identity: RunIdentity, branch: str | None
) -> dict[str, object]:
    async with source as client:
        discovery = await discover(client, identity, branch)
    wait_set = select_wait_set(discovery.current, discovery.siblings)
    return {
        "branch": branch,
        "current": _run_summary(discovery.current),
        "siblings": [_run_summary(run) for run in discovery.siblings],
        "wait_set": [_run_summary(run) for run in wait_set],
    }


def cmd_siblings(args: argparse.Namespace) -> None:
    settings = GateSettings()
    try:
        identity, context = prepare(settings, RecordingReporter())
    except GateError as exc:
        print(f"Invalid gate context: {exc}")
        raise SystemExit(1)

    source = load_source(settings)
    try:
        report = asyncio.run(_collect_siblings(source, identity, context.branch_filter))
    except GitHubApiError as exc:
        print(f"GitHub API unavailable: {exc}")
        raise SystemExit(1)

    if args.json:
        print(json.dumps(report, indent=2))
        return
    current = report["current"]
    print(f"current run {current['id']} (#{current['run_number']}) branch={report['branch'] or '*'}")
    for run in report["wait_set"]:
        print(f"waits on {run['id']} (#{run['run_number']}) [{run['status']}]")
    if not report["wait_set"]:
        print("nothing to wait for")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run gate diagnostics")
    sub = parser.add_subparsers(dest="cmd")

    p_context = sub.add_parser("context", help="Show the resolved branch and run identity")
    p_context.set_defaults(func=cmd_context)

    p_siblings = sub.add_parser(
        "siblings",
        help="List active sibling runs and the runs the gate would wait on",
    )
    p_siblings.add_argument("--json", action="store_true", help="Output JSON")
    p_siblings.set_defaults(func=cmd_siblings)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return
    args.func(args)


if __name__ == "__main__":
    main()
