"""Log and failure sinks used by the gate."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Protocol, TextIO


class Reporter(Protocol):
    """Protocol for the leveled message sink and the failure signal."""

    def info(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...

    def set_failed(self, message: str) -> None:
        ...


def _escape_command_data(message: str) -> str:
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class ActionsReporter:
    """Report through logging and GitHub Actions workflow commands.

    Errors and failures are also written as ``::error::`` commands so the
    Actions UI annotates the job.
    """

    def __init__(self, stream: TextIO | None = None, logger: logging.Logger | None = None) -> None:
        self._stream = stream
        self.log = logger or logging.getLogger(__name__)
        self.failed = False

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def info(self, message: str) -> None:
        self.log.info(message)

    def error(self, message: str) -> None:
        self.log.error(message)
        self._command("error", message)

    def set_failed(self, message: str) -> None:
        self.failed = True
        self.log.error("Gate failed: %s", message)
        self._command("error", message)

    def _command(self, name: str, message: str) -> None:
        self.stream.write(f"::{name}::{_escape_command_data(message)}\n")
        self.stream.flush()


@dataclass(slots=True)
class RecordingReporter:
    """In-memory reporter that keeps every message, for tests and diagnostics."""

    messages: list[tuple[str, str]] = field(default_factory=list)
    failure: str | None = None

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def set_failed(self, message: str) -> None:
        self.failure = message
        self.messages.append(("failed", message))

    @property
    def failed(self) -> bool:
        return self.failure is not None

    def lines(self, level: str) -> list[str]:
        return [message for entry_level, message in self.messages if entry_level == level]


__all__ = ["ActionsReporter", "RecordingReporter", "Reporter"]
