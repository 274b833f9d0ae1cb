"""Replay recorded signals through a ShellIntegrationService.

Provides in-memory stand-ins for the terminal registry and the shell
transport so a recording can be replayed without a real terminal host.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from shelltrack.logging import get_logger
from shelltrack.recording.signals import CloseTerminalSignal, RecordedSignal

if TYPE_CHECKING:
    from shelltrack.shell.integration import ShellIntegrationView
    from shelltrack.shell.service import ShellIntegrationService

log = get_logger("replay")


class ReplayTerminal:
    """A terminal that exists only for the duration of a replay."""

    def __init__(self, handle: int, name: str) -> None:
        self.handle = handle
        self.name = name
        self.shell_integration: ShellIntegrationView | None = None
        self.disposed = False
        self._dispose_callbacks: list[Callable[[], None]] = []

    def on_will_dispose(self, callback: Callable[[], None]) -> Callable[[], None]:
        self._dispose_callbacks.append(callback)

        def remove() -> None:
            if callback in self._dispose_callbacks:
                self._dispose_callbacks.remove(callback)

        return remove

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        for callback in list(self._dispose_callbacks):
            callback()
        self._dispose_callbacks.clear()

    def __repr__(self) -> str:
        return f"<ReplayTerminal {self.name}>"


class ReplayTerminalRegistry:
    """Resolves every handle to a live terminal until it is closed."""

    def __init__(self, name_prefix: str = "replay") -> None:
        self._name_prefix = name_prefix
        self._terminals: dict[int, ReplayTerminal] = {}
        self._closed: set[int] = set()

    @property
    def terminals(self) -> dict[int, ReplayTerminal]:
        return dict(self._terminals)

    def get_terminal(self, handle: int) -> ReplayTerminal | None:
        if handle in self._closed:
            return None
        terminal = self._terminals.get(handle)
        if terminal is None:
            terminal = ReplayTerminal(handle, f"{self._name_prefix}-{handle}")
            self._terminals[handle] = terminal
        return terminal

    def close(self, handle: int) -> None:
        """Retire a handle; later signals for it are ignored."""
        self._closed.add(handle)
        terminal = self._terminals.pop(handle, None)
        if terminal is not None:
            terminal.dispose()


class ReplayTransport:
    """Records the command lines the service asked the shell to run."""

    def __init__(self) -> None:
        self.executed: list[tuple[int, str]] = []

    def execute_command(self, handle: int, command_line: str) -> None:
        log.info("terminal %d: execute %r", handle, command_line)
        self.executed.append((handle, command_line))


async def replay(
    records: Iterable[RecordedSignal],
    service: ShellIntegrationService,
    registry: ReplayTerminalRegistry | None = None,
) -> int:
    """Apply recorded signals in order and wait for pending events.

    Yields to the event loop after each signal so readers and end-event
    drains make progress the way they would with a live transport.

    Returns:
        Number of signals applied.
    """
    count = 0
    for record in records:
        signal = record.signal
        signal.apply(service)
        if registry is not None and isinstance(signal, CloseTerminalSignal):
            registry.close(signal.instance_id)
        count += 1
        await asyncio.sleep(0)
    await service.wait_idle()
    log.debug("Replayed %d signals", count)
    return count
