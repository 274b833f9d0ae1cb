"""Protocols for the collaborators around shell-integration tracking.

Implementations live outside this package:
- TerminalRegistry: resolves terminal handles to live terminals
- ShellTransport: runs a command line in the real shell
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from shelltrack.shell.integration import ShellIntegrationView


class Terminal(Protocol):
    """A live terminal known to the host."""

    shell_integration: ShellIntegrationView | None

    def on_will_dispose(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a callback run when the terminal is disposed.

        Returns:
            Function that removes the callback again.
        """
        ...


class TerminalRegistry(Protocol):
    """Maps opaque integer handles to terminals."""

    def get_terminal(self, handle: int) -> Terminal | None:
        """Return the live terminal for ``handle``, or None if unknown/disposed."""
        ...


class ShellTransport(Protocol):
    """Outbound requests to the process hosting the shell."""

    def execute_command(self, handle: int, command_line: str) -> None:
        """Ask the shell behind ``handle`` to run ``command_line``.

        Fire and forget: success is observed through later start/data/end
        signals for the same handle.
        """
        ...
