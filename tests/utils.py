"""Shared fakes for shelltrack tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from shelltrack.shell import ShellIntegrationService, ShellIntegrationSession


class FakeTerminal:
    """Minimal live terminal with a disposal hook."""

    def __init__(self, handle: int) -> None:
        self.handle = handle
        self.shell_integration: Any = None
        self._dispose_callbacks: list[Callable[[], None]] = []

    @property
    def dispose_listener_count(self) -> int:
        return len(self._dispose_callbacks)

    def on_will_dispose(self, callback: Callable[[], None]) -> Callable[[], None]:
        self._dispose_callbacks.append(callback)
        return lambda: self._dispose_callbacks.remove(callback)

    def dispose(self) -> None:
        for callback in list(self._dispose_callbacks):
            callback()

    def __repr__(self) -> str:
        return f"FakeTerminal({self.handle})"


class FakeTerminalRegistry:
    """Resolves only the handles that were explicitly added."""

    def __init__(self) -> None:
        self.terminals: dict[int, FakeTerminal] = {}

    def add(self, handle: int) -> FakeTerminal:
        terminal = FakeTerminal(handle)
        self.terminals[handle] = terminal
        return terminal

    def get_terminal(self, handle: int) -> FakeTerminal | None:
        return self.terminals.get(handle)


class FakeTransport:
    """Captures execute_command requests."""

    def __init__(self) -> None:
        self.executed: list[tuple[int, str]] = []

    def execute_command(self, handle: int, command_line: str) -> None:
        self.executed.append((handle, command_line))


class EventLog:
    """Subscribes to a session or service and records events by kind.

    The command line of start/end events is captured when the event fires,
    since an end can still refine it afterwards.
    """

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []
        self._command_lines: list[tuple[str, str]] = []

    def _record(self, kind: str) -> Callable[[Any], None]:
        def record(event: Any) -> None:
            self.events.append((kind, event))
            if kind in ("start", "end"):
                self._command_lines.append((kind, event.execution.command_line.value))

        return record

    def attach_service(self, service: ShellIntegrationService) -> EventLog:
        service.on_did_change_shell_integration.subscribe(self._record("change"))
        service.on_did_start_shell_execution.subscribe(self._record("start"))
        service.on_did_end_shell_execution.subscribe(self._record("end"))
        return self

    def attach_session(self, session: ShellIntegrationSession) -> EventLog:
        session.on_did_request_change_shell_integration.subscribe(self._record("change"))
        session.on_did_start_shell_execution.subscribe(self._record("start"))
        session.on_did_request_end_execution.subscribe(self._record("end"))
        return self

    def kinds(self) -> list[str]:
        return [kind for kind, _ in self.events]

    def of(self, kind: str) -> list[Any]:
        return [event for k, event in self.events if k == kind]

    def trace(self) -> list[tuple[str, str]]:
        """(kind, command line at the time of the event) for start/end events."""
        return list(self._command_lines)
