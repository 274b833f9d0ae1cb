"""Shell-integration service: the inbound signal surface and session directory.

Signals from the shell arrive keyed by an integer terminal handle. The
service resolves the handle through the TerminalRegistry, creates a
ShellIntegrationSession the first time a live terminal is seen, and
re-publishes each session's events on three service-wide channels.

Signals for handles the registry does not know are ignored.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any

from shelltrack.config.schema import ShellIntegrationConfig
from shelltrack.logging import get_logger
from shelltrack.shell.events import EventEmitter
from shelltrack.shell.integration import ShellIntegrationSession
from shelltrack.shell.types import (
    CommandLine,
    Confidence,
    ShellExecutionEndEvent,
    ShellExecutionStartEvent,
    ShellIntegrationChangeEvent,
)
from shelltrack.terminal.protocol import ShellTransport, TerminalRegistry
from shelltrack.uri import Uri

log = get_logger("service")

CwdValue = Uri | Mapping[str, Any] | str | None


def _confidence(value: int) -> Confidence:
    try:
        return Confidence(value)
    except ValueError:
        log.warning("Unknown command line confidence %r, treating as low", value)
        return Confidence.LOW


def _detach(session: ShellIntegrationSession) -> None:
    if session.terminal.shell_integration is session.value:
        session.terminal.shell_integration = None


class ShellIntegrationService:
    """Tracks shell integration for every terminal of a host connection.

    Usage:
        service = ShellIntegrationService(registry, transport)
        service.on_did_end_shell_execution.subscribe(lambda e: print(e.exit_code))

        service.shell_execution_start(1, "ls", Confidence.HIGH, True)
        service.shell_execution_data(1, "README.md\\n")
        service.shell_execution_end(1, "ls", Confidence.HIGH, True, 0)
    """

    def __init__(
        self,
        terminals: TerminalRegistry,
        transport: ShellTransport,
        *,
        config: ShellIntegrationConfig | None = None,
    ) -> None:
        self._terminals = terminals
        self._transport = transport
        self._config = config or ShellIntegrationConfig()
        self._sessions: dict[int, ShellIntegrationSession] = {}
        self._disposed = False

        self.on_did_change_shell_integration: EventEmitter[ShellIntegrationChangeEvent] = (
            EventEmitter("change_shell_integration")
        )
        self.on_did_start_shell_execution: EventEmitter[ShellExecutionStartEvent] = (
            EventEmitter("start_shell_execution")
        )
        self.on_did_end_shell_execution: EventEmitter[ShellExecutionEndEvent] = EventEmitter(
            "end_shell_execution"
        )

    @property
    def handles(self) -> list[int]:
        return list(self._sessions)

    def get(self, handle: int) -> ShellIntegrationSession | None:
        return self._sessions.get(handle)

    def _ensure_session(self, handle: int) -> ShellIntegrationSession | None:
        session = self._sessions.get(handle)
        if session is not None or self._disposed:
            return session

        terminal = self._terminals.get_terminal(handle)
        if terminal is None:
            log.debug("Ignoring signal for unknown terminal %d", handle)
            return None

        session = ShellIntegrationSession(terminal, config=self._config)
        self._sessions[handle] = session
        log.debug("Created shell integration for terminal %d", handle)

        store = session.store
        store.add(terminal.on_will_dispose(lambda: self._drop_session(handle, session)))
        store.add(
            session.on_did_request_shell_execution.subscribe(
                lambda command_line: self._transport.execute_command(handle, command_line)
            )
        )
        store.add(
            session.on_did_request_change_shell_integration.subscribe(
                self.on_did_change_shell_integration.fire
            )
        )
        store.add(
            session.on_did_start_shell_execution.subscribe(self.on_did_start_shell_execution.fire)
        )
        store.add(
            session.on_did_request_end_execution.subscribe(self.on_did_end_shell_execution.fire)
        )
        terminal.shell_integration = session.value
        return session

    def _drop_session(self, handle: int, session: ShellIntegrationSession) -> None:
        if self._sessions.get(handle) is session:
            del self._sessions[handle]
        session.dispose()
        _detach(session)
        log.debug("Disposed shell integration for terminal %d", handle)

    # -------------------------------------------------------------------------
    # Inbound signals
    # -------------------------------------------------------------------------

    def shell_integration_change(self, handle: int) -> None:
        """Shell integration became (or is still) active for a terminal."""
        session = self._ensure_session(handle)
        if session is None:
            return
        self.on_did_change_shell_integration.fire(
            ShellIntegrationChangeEvent(session.terminal, session.value)
        )

    def shell_execution_start(
        self,
        handle: int,
        command_line: str,
        confidence: int,
        is_trusted: bool,
        cwd: CwdValue = None,
    ) -> None:
        if handle not in self._sessions:
            # First signal for this terminal announces the integration first
            self.shell_integration_change(handle)
        session = self._ensure_session(handle)
        if session is None:
            return
        session.start_shell_execution(
            CommandLine(command_line, _confidence(confidence), is_trusted), Uri.revive(cwd)
        )

    def shell_execution_end(
        self,
        handle: int,
        command_line: str,
        confidence: int,
        is_trusted: bool,
        exit_code: int | None = None,
    ) -> None:
        session = self._ensure_session(handle)
        if session is None:
            return
        session.end_shell_execution(
            CommandLine(command_line, _confidence(confidence), is_trusted), exit_code
        )

    def shell_execution_data(self, handle: int, data: str) -> None:
        session = self._ensure_session(handle)
        if session is not None:
            session.emit_data(data)

    def shell_env_change(
        self,
        handle: int,
        keys: Sequence[str],
        values: Sequence[str | None],
        is_trusted: bool,
    ) -> None:
        session = self._ensure_session(handle)
        if session is not None:
            session.set_env(keys, values, is_trusted)

    def cwd_change(self, handle: int, cwd: CwdValue = None) -> None:
        session = self._ensure_session(handle)
        if session is not None:
            session.set_cwd(cwd)

    def set_has_rich_command_detection(self, handle: int, value: bool) -> None:
        session = self._ensure_session(handle)
        if session is not None:
            session.set_has_rich_command_detection(value)

    def close_terminal(self, handle: int) -> None:
        """Drop a terminal's session right away, even if ends are still draining."""
        session = self._sessions.pop(handle, None)
        if session is not None:
            session.dispose()
            _detach(session)
            log.debug("Closed shell integration for terminal %d", handle)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def wait_idle(self) -> None:
        """Wait until all sessions have emitted their scheduled events."""
        await asyncio.gather(*(session.wait_idle() for session in list(self._sessions.values())))

    def dispose(self) -> None:
        """Host shutdown: dispose every session and the outbound channels."""
        if self._disposed:
            return
        self._disposed = True
        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            session.dispose()
        self.on_did_change_shell_integration.dispose()
        self.on_did_start_shell_execution.dispose()
        self.on_did_end_shell_execution.dispose()
