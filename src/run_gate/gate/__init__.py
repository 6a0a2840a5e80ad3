"""The serialization pipeline: context, discovery, ordering, waiting."""

from .context import (
    ExecutionContext,
    GateConfigError,
    GateError,
    load_event_payload,
    resolve_context,
    resolve_identity,
)
from .discovery import Discovery, discover
from .ordering import select_wait_set
from .waiter import CompletionWaiter, WaitOutcome, WaitState, poll_until

__all__ = [
    "CompletionWaiter",
    "Discovery",
    "ExecutionContext",
    "GateConfigError",
    "GateError",
    "WaitOutcome",
    "WaitState",
    "discover",
    "load_event_payload",
    "poll_until",
    "resolve_context",
    "resolve_identity",
    "select_wait_set",
]
