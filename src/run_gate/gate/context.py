"""Resolve which branch and which run the gate is acting for."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict

from ..github.models import RunIdentity
from ..reporting import Reporter

MERGE_QUEUE_BRANCH_VAR = "MQ_BRANCH_NAME"


class GateError(RuntimeError):
    """Base class for gate errors."""


class GateConfigError(GateError):
    """Raised when the invocation lacks information the gate cannot run without."""


class ExecutionContext(BaseModel):
    """Branch candidates seen in the trigger and the branch that won."""

    model_config = ConfigDict(frozen=True)

    event_name: str | None = None
    pull_request_branch: str | None = None
    merge_queue_head_ref: str | None = None
    explicit_branch: str | None = None
    resolved_branch: str | None = None

    @property
    def branch_filter(self) -> str | None:
        """Branch to filter sibling runs by, ``None`` meaning all branches."""

        return self.resolved_branch or None


def _dig(payload: Mapping[str, Any], *path: str) -> Any:
    node: Any = payload
    for key in path:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def load_event_payload(path: Path | str | None) -> dict[str, Any]:
    """Read the JSON trigger payload the runner wrote to ``GITHUB_EVENT_PATH``."""

    if path is None:
        return {}
    event_file = Path(path)
    if not event_file.exists():
        return {}
    try:
        document = json.loads(event_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise GateConfigError(f"Unable to read event payload {event_file}: {exc}") from exc
    if not isinstance(document, dict):
        raise GateConfigError(f"Event payload {event_file} is not a JSON object")
    return document


def resolve_context(
    explicit_branch: str | None,
    payload: Mapping[str, Any],
    environ: Mapping[str, str],
    reporter: Reporter,
    *,
    event_name: str | None = None,
) -> ExecutionContext:
    """Pick the logical branch: pull request head, then merge queue override, then input.

    A merge queue trigger without ``MQ_BRANCH_NAME`` is reported as an error
    but does not stop the gate; the explicit input stays in effect.
    """

    explicit = _text(explicit_branch)
    pr_branch = _text(_dig(payload, "pull_request", "head", "ref"))
    merge_head_ref = _text(_dig(payload, "merge_group", "head_ref"))
    branch = explicit

    if pr_branch:
        reporter.info(f"Using PR branch {pr_branch}")
        branch = pr_branch
    elif merge_head_ref:
        reporter.info("Merge queue detected")
        override = _text(environ.get(MERGE_QUEUE_BRANCH_VAR))
        if override:
            branch = override
            reporter.info(f"Using PR branch {branch}")
        else:
            reporter.error(f"No {MERGE_QUEUE_BRANCH_VAR} set, check the calling job")

    return ExecutionContext(
        event_name=_text(event_name),
        pull_request_branch=pr_branch,
        merge_queue_head_ref=merge_head_ref,
        explicit_branch=explicit,
        resolved_branch=branch,
    )


def resolve_identity(
    payload: Mapping[str, Any],
    *,
    repository: str | None,
    run_id: int | None,
) -> RunIdentity:
    """Build the current run's identity from the payload, falling back to ``owner/name``."""

    owner = _text(_dig(payload, "repository", "owner", "login"))
    name = _text(_dig(payload, "repository", "name"))
    if (not owner or not name) and repository and "/" in repository:
        fallback_owner, _, fallback_name = repository.partition("/")
        owner = owner or _text(fallback_owner)
        name = name or _text(fallback_name)

    if not owner or not name:
        raise GateConfigError("Repository owner/name not found in event payload or GITHUB_REPOSITORY")
    if run_id is None:
        raise GateConfigError("GITHUB_RUN_ID is not set; the gate must run inside a workflow run")
    return RunIdentity(owner=owner, repository=name, run_id=run_id)


__all__ = [
    "ExecutionContext",
    "GateConfigError",
    "GateError",
    "MERGE_QUEUE_BRANCH_VAR",
    "load_event_payload",
    "resolve_context",
    "resolve_identity",
]
