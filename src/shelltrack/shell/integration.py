"""Per-terminal shell-integration session.

Correlates shell-reported start/end signals with executions registered
locally through ``execute_command`` and derives the single current execution.

Matching policy on start:
- HIGH confidence: the first pending execution whose command line matches
  the reported text exactly is taken, wherever it sits in the queue
- LOW/MEDIUM confidence: the head of the pending queue is taken unconditionally
- Nothing taken: a new execution is created for a command the user ran
  directly in the shell

Start events fire immediately. An end event waits until the readers of its
own execution have drained and never holds back another execution. When a
start ends an execution whose readers are still behind, the start event of
the new execution is delivered first and the old end event follows with no
exit code.
"""

from __future__ import annotations

import asyncio
import re
from collections import deque
from collections.abc import Callable, Mapping, Sequence
from types import MappingProxyType
from typing import Any

from shelltrack.config.schema import ShellIntegrationConfig
from shelltrack.logging import TRACE, get_logger
from shelltrack.shell.events import DisposableStore, EventEmitter
from shelltrack.shell.execution import ShellExecution, ShellExecutionView
from shelltrack.shell.types import (
    CommandLine,
    Confidence,
    ShellEnvironment,
    ShellExecutionEndEvent,
    ShellExecutionStartEvent,
    ShellIntegrationChangeEvent,
)
from shelltrack.uri import Uri

log = get_logger("shell")

_QUOTE_CHARS = re.compile(r"[\"'`]")
_WHITESPACE = re.compile(r"\s")


def build_command_line(executable: str, args: Sequence[str] | None = None) -> str:
    """Join an executable and its arguments into one command line.

    Arguments containing whitespace are wrapped in double quotes unless they
    already contain a quote or backtick.
    """
    parts = [executable]
    for arg in args or ():
        if _WHITESPACE.search(arg) and not _QUOTE_CHARS.search(arg):
            parts.append(f'"{arg}"')
        else:
            parts.append(arg)
    return " ".join(parts)


class ShellIntegrationView:
    """Consumer-facing view of a terminal's shell integration."""

    __slots__ = ("_session",)

    def __init__(self, session: ShellIntegrationSession) -> None:
        self._session = session

    @property
    def cwd(self) -> Uri | None:
        return self._session.cwd

    @property
    def env(self) -> ShellEnvironment | None:
        return self._session.env

    @property
    def has_rich_command_detection(self) -> bool:
        return self._session.has_rich_command_detection

    def execute_command(
        self, command_line: str, args: Sequence[str] | None = None
    ) -> ShellExecutionView:
        """Run a command in the terminal and return its execution.

        The execution is usable right away: call ``read()`` before the shell
        confirms the start to avoid missing early output.

        Args:
            command_line: Full command line, or the executable when ``args`` is given.
            args: Optional arguments appended with quoting where needed.
        """
        value = build_command_line(command_line, args) if args is not None else command_line
        resolved = CommandLine(value, Confidence.HIGH, is_trusted=True)
        return self._session.request_new_shell_execution(resolved, self._session.cwd).value

    def __repr__(self) -> str:
        return f"<ShellIntegration cwd={self.cwd} rich={self.has_rich_command_detection}>"


class ShellIntegrationSession:
    """State machine for one terminal.

    Attributes:
        store: Cleanup callbacks run when the session is disposed.
        value: The consumer-facing ShellIntegrationView.
    """

    def __init__(
        self,
        terminal: Any,
        *,
        config: ShellIntegrationConfig | None = None,
    ) -> None:
        self._terminal = terminal
        self._config = config or ShellIntegrationConfig()

        self._pending: deque[ShellExecution] = deque()
        self._current: ShellExecution | None = None

        self._env: ShellEnvironment | None = None
        self._cwd: Uri | None = None
        self._has_rich_command_detection = False

        # End events waiting for their execution to drain
        self._drain_tasks: set[asyncio.Task[None]] = set()
        self._disposed = False

        self.store = DisposableStore()
        self.on_did_request_change_shell_integration: EventEmitter[ShellIntegrationChangeEvent] = (
            EventEmitter("change_shell_integration")
        )
        self.on_did_request_shell_execution: EventEmitter[str] = EventEmitter(
            "request_shell_execution"
        )
        self.on_did_start_shell_execution: EventEmitter[ShellExecutionStartEvent] = EventEmitter(
            "start_shell_execution"
        )
        self.on_did_request_end_execution: EventEmitter[ShellExecutionEndEvent] = EventEmitter(
            "end_shell_execution"
        )

        self.value = ShellIntegrationView(self)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def terminal(self) -> Any:
        return self._terminal

    @property
    def current_execution(self) -> ShellExecution | None:
        return self._current

    @property
    def pending_executions(self) -> tuple[ShellExecution, ...]:
        return tuple(self._pending)

    @property
    def env(self) -> ShellEnvironment | None:
        return self._env

    @property
    def cwd(self) -> Uri | None:
        return self._cwd

    @property
    def has_rich_command_detection(self) -> bool:
        return self._has_rich_command_detection

    @property
    def disposed(self) -> bool:
        return self._disposed

    # -------------------------------------------------------------------------
    # Executions
    # -------------------------------------------------------------------------

    def request_new_shell_execution(
        self, command_line: CommandLine, cwd: Uri | None
    ) -> ShellExecution:
        """Register a locally submitted execution and ask the shell to run it."""
        execution = ShellExecution(command_line, cwd or self._cwd)
        self._pending.append(execution)
        log.debug("Queued %r (%d pending)", command_line.value, len(self._pending))
        self.on_did_request_shell_execution.fire(command_line.value)
        return execution

    def start_shell_execution(
        self, command_line: CommandLine, cwd: Uri | None
    ) -> ShellExecution:
        """Handle a shell-reported start and make the matching execution current.

        The start event fires right away. A previous execution still running
        is ended without an exit code; its end event follows once its own
        readers have drained, so it can arrive after this start event.
        """
        previous = self._current
        if previous is not None:
            if self._has_rich_command_detection and self._config.warn_on_unexpected_start:
                log.warning(
                    "Rich command detection is enabled but an execution started "
                    "before the last ended"
                )
            previous.end_execution(None)
            self._current = None
            self._after_drain(previous, lambda: self._fire_end(previous, None))

        execution = self._take_pending(command_line)
        if execution is None:
            # Fall back to the session cwd, the shell may not have restored it yet
            execution = ShellExecution(command_line, cwd or self._cwd)
            log.debug("Started unregistered execution %r", command_line.value)
        else:
            log.debug("Matched pending execution %r", execution.command_line.value)

        self._current = execution
        self.on_did_start_shell_execution.fire(
            ShellExecutionStartEvent(self._terminal, self.value, execution.value)
        )
        return execution

    def _take_pending(self, command_line: CommandLine) -> ShellExecution | None:
        if command_line.confidence == Confidence.HIGH:
            for execution in self._pending:
                if execution.command_line.value == command_line.value:
                    self._pending.remove(execution)
                    return execution
            return None
        if self._pending:
            return self._pending.popleft()
        return None

    def emit_data(self, data: str) -> None:
        if self._current is None:
            return
        if self._config.trace_data:
            log.log(TRACE, "data %r", data)
        self._current.emit_data(data)

    def end_shell_execution(
        self, command_line: CommandLine | None, exit_code: int | None
    ) -> None:
        """Handle a shell-reported end.

        The end event is raised once every reader of the execution has seen
        end-of-stream, and only if the execution is still the current one.
        A start arriving in between ends it first, without the exit code.
        """
        execution = self._current
        if execution is None:
            return
        execution.end_execution(command_line)

        def fire() -> None:
            if self._current is execution:
                self._current = None
                self._fire_end(execution, exit_code)

        self._after_drain(execution, fire)

    def _fire_end(self, execution: ShellExecution, exit_code: int | None) -> None:
        log.debug("Ended %r exit=%s", execution.command_line.value, exit_code)
        self.on_did_request_end_execution.fire(
            ShellExecutionEndEvent(self._terminal, self.value, execution.value, exit_code)
        )

    # -------------------------------------------------------------------------
    # Drain waits
    # -------------------------------------------------------------------------

    def _after_drain(self, execution: ShellExecution, fire: Callable[[], None]) -> None:
        """Run ``fire`` once ``execution`` has no unfinished readers."""
        if execution.is_drained:
            fire()
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop means no reader can make progress either
            fire()
            return

        task = loop.create_task(self._fire_when_drained(execution, fire))
        self._drain_tasks.add(task)
        task.add_done_callback(self._drain_done)

    async def _fire_when_drained(
        self, execution: ShellExecution, fire: Callable[[], None]
    ) -> None:
        await execution.flush()
        if not self._disposed:
            fire()

    def _drain_done(self, task: asyncio.Task[None]) -> None:
        self._drain_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            log.error("Shell execution end event failed", exc_info=task.exception())

    async def wait_idle(self) -> None:
        """Wait until every end event waiting on a drain has been emitted."""
        while self._drain_tasks:
            await asyncio.wait(set(self._drain_tasks))

    # -------------------------------------------------------------------------
    # Environment and capabilities
    # -------------------------------------------------------------------------

    def set_has_rich_command_detection(self, value: bool) -> None:
        if self._has_rich_command_detection != value:
            self._has_rich_command_detection = value
            self._fire_change_event()

    def set_env(self, keys: Sequence[str], values: Sequence[str | None], is_trusted: bool) -> None:
        """Replace the environment snapshot.

        ``keys`` and ``values`` are parallel; a key without a value maps to None.
        """
        env: dict[str, str | None] = {
            key: values[i] if i < len(values) else None for i, key in enumerate(keys)
        }
        self._env = ShellEnvironment(MappingProxyType(env), is_trusted)
        self._fire_change_event()

    def set_cwd(self, cwd: Uri | Mapping[str, Any] | str | None) -> None:
        revived = Uri.revive(cwd)
        if revived != self._cwd:
            self._cwd = revived
            self._fire_change_event()

    def _fire_change_event(self) -> None:
        self.on_did_request_change_shell_integration.fire(
            ShellIntegrationChangeEvent(self._terminal, self.value)
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def dispose(self) -> None:
        """Tear the session down. A running execution is abandoned without an end event."""
        if self._disposed:
            return
        self._disposed = True
        for task in list(self._drain_tasks):
            task.cancel()
        self.store.dispose()
        self.on_did_request_change_shell_integration.dispose()
        self.on_did_request_shell_execution.dispose()
        self.on_did_start_shell_execution.dispose()
        self.on_did_request_end_execution.dispose()
