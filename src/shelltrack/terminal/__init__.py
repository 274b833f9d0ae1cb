"""Terminal collaborators consumed by shell-integration tracking."""

from shelltrack.terminal.protocol import ShellTransport, Terminal, TerminalRegistry

__all__ = [
    "ShellTransport",
    "Terminal",
    "TerminalRegistry",
]
