from __future__ import annotations

import json
from pathlib import Path

import pytest

from run_gate.gate import GateConfigError, load_event_payload, resolve_context, resolve_identity
from run_gate.reporting import RecordingReporter

PR_PAYLOAD = {
    "pull_request": {"head": {"ref": "feature-x"}},
    "repository": {"name": "repo", "owner": {"login": "octo"}},
}
MERGE_QUEUE_PAYLOAD = {
    "merge_group": {"head_ref": "refs/heads/gh-readonly-queue/main/pr-12-abc"},
    "repository": {"name": "repo", "owner": {"login": "octo"}},
}


def test_pull_request_branch_wins_over_input() -> None:
    reporter = RecordingReporter()

    context = resolve_context("main", PR_PAYLOAD, {}, reporter)

    assert context.resolved_branch == "feature-x"
    assert context.explicit_branch == "main"
    assert reporter.lines("info") == ["Using PR branch feature-x"]
    assert reporter.lines("error") == []


def test_pull_request_wins_even_in_merge_queue() -> None:
    payload = {**MERGE_QUEUE_PAYLOAD, **PR_PAYLOAD}

    context = resolve_context("", payload, {"MQ_BRANCH_NAME": "mq"}, RecordingReporter())

    assert context.resolved_branch == "feature-x"


def test_merge_queue_uses_override_branch() -> None:
    reporter = RecordingReporter()

    context = resolve_context("main", MERGE_QUEUE_PAYLOAD, {"MQ_BRANCH_NAME": "feature-y"}, reporter)

    assert context.resolved_branch == "feature-y"
    assert context.merge_queue_head_ref == "refs/heads/gh-readonly-queue/main/pr-12-abc"
    assert reporter.lines("info") == ["Merge queue detected", "Using PR branch feature-y"]


def test_merge_queue_without_override_reports_and_falls_back() -> None:
    reporter = RecordingReporter()

    context = resolve_context("main", MERGE_QUEUE_PAYLOAD, {}, reporter)

    assert context.resolved_branch == "main"
    assert reporter.lines("error") == ["No MQ_BRANCH_NAME set, check the calling job"]
    assert not reporter.failed


def test_merge_queue_without_override_or_input_has_no_filter() -> None:
    reporter = RecordingReporter()

    context = resolve_context("", MERGE_QUEUE_PAYLOAD, {"MQ_BRANCH_NAME": ""}, reporter)

    assert context.resolved_branch is None
    assert context.branch_filter is None
    assert len(reporter.lines("error")) == 1


def test_explicit_branch_used_for_other_events() -> None:
    reporter = RecordingReporter()

    context = resolve_context("release", {"ref": "refs/heads/release"}, {}, reporter, event_name="push")

    assert context.resolved_branch == "release"
    assert context.branch_filter == "release"
    assert context.event_name == "push"
    assert reporter.messages == []


def test_empty_input_means_no_branch_filter() -> None:
    context = resolve_context("", {}, {}, RecordingReporter())

    assert context.branch_filter is None


def test_identity_from_payload() -> None:
    identity = resolve_identity(PR_PAYLOAD, repository="other/place", run_id=99)

    assert identity.owner == "octo"
    assert identity.repository == "repo"
    assert identity.run_id == 99
    assert identity.workflow_id is None


def test_identity_falls_back_to_repository_variable() -> None:
    identity = resolve_identity({}, repository="octo/repo", run_id=5)

    assert identity.full_name == "octo/repo"


def test_identity_requires_repository_and_run_id() -> None:
    with pytest.raises(GateConfigError):
        resolve_identity({}, repository=None, run_id=5)
    with pytest.raises(GateConfigError):
        resolve_identity(PR_PAYLOAD, repository=None, run_id=None)


def test_load_event_payload(tmp_path: Path) -> None:
    event = tmp_path / "event.json"
    event.write_text(json.dumps(PR_PAYLOAD), encoding="utf-8")

    assert load_event_payload(event) == PR_PAYLOAD
    assert load_event_payload(None) == {}
    assert load_event_payload(tmp_path / "missing.json") == {}


def test_load_event_payload_rejects_garbage(tmp_path: Path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    listing = tmp_path / "list.json"
    listing.write_text("[]", encoding="utf-8")

    with pytest.raises(GateConfigError):
        load_event_payload(broken)
    with pytest.raises(GateConfigError):
        load_event_payload(listing)
