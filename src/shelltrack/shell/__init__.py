"""Shell-integration execution tracking.

Provides the per-terminal session state machine, the execution records and
their multi-reader output streams, and the service that routes inbound
shell signals to sessions.
"""

from shelltrack.shell.events import DisposableStore, EventEmitter
from shelltrack.shell.execution import ShellExecution, ShellExecutionView
from shelltrack.shell.integration import (
    ShellIntegrationSession,
    ShellIntegrationView,
    build_command_line,
)
from shelltrack.shell.service import ShellIntegrationService
from shelltrack.shell.stream import ExecutionDataStream, StreamReader
from shelltrack.shell.types import (
    CommandLine,
    Confidence,
    ShellEnvironment,
    ShellExecutionEndEvent,
    ShellExecutionStartEvent,
    ShellIntegrationChangeEvent,
)

__all__ = [
    "CommandLine",
    "Confidence",
    "DisposableStore",
    "EventEmitter",
    "ExecutionDataStream",
    "ShellEnvironment",
    "ShellExecution",
    "ShellExecutionEndEvent",
    "ShellExecutionStartEvent",
    "ShellExecutionView",
    "ShellIntegrationChangeEvent",
    "ShellIntegrationService",
    "ShellIntegrationSession",
    "ShellIntegrationView",
    "StreamReader",
    "build_command_line",
]
