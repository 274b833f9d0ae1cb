"""Value types and event payloads for shell integration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from shelltrack.shell.execution import ShellExecutionView
    from shelltrack.shell.integration import ShellIntegrationView


class Confidence(IntEnum):
    """How reliably the shell resolved the full command line text.

    - LOW: guessed from the prompt line
    - MEDIUM: reconstructed, may differ from what ran (aliases, expansion)
    - HIGH: reported verbatim by the shell
    """

    LOW = 0
    MEDIUM = 1
    HIGH = 2

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class CommandLine:
    """A command line as reported by the shell or submitted locally."""

    value: str
    confidence: Confidence = Confidence.HIGH
    is_trusted: bool = False


@dataclass(frozen=True, slots=True)
class ShellEnvironment:
    """Snapshot of the shell environment.

    Values may be None when the shell reported a key without a value.
    """

    value: Mapping[str, str | None]
    is_trusted: bool


@dataclass(frozen=True, slots=True)
class ShellIntegrationChangeEvent:
    terminal: Any
    shell_integration: ShellIntegrationView


@dataclass(frozen=True, slots=True)
class ShellExecutionStartEvent:
    terminal: Any
    shell_integration: ShellIntegrationView
    execution: ShellExecutionView


@dataclass(frozen=True, slots=True)
class ShellExecutionEndEvent:
    terminal: Any
    shell_integration: ShellIntegrationView
    execution: ShellExecutionView
    exit_code: int | None = None
