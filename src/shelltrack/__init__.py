"""shelltrack: shell-integration execution tracking with multi-reader output streams."""

__version__ = "0.1.0"

# Public API
from shelltrack.config import Config, get_config, load_config
from shelltrack.shell import (
    CommandLine,
    Confidence,
    ExecutionDataStream,
    ShellEnvironment,
    ShellExecutionEndEvent,
    ShellExecutionStartEvent,
    ShellExecutionView,
    ShellIntegrationChangeEvent,
    ShellIntegrationService,
    ShellIntegrationView,
)
from shelltrack.terminal import ShellTransport, Terminal, TerminalRegistry
from shelltrack.uri import Uri

__all__ = [
    # Main entry point
    "ShellIntegrationService",
    # Views handed to consumers
    "ShellExecutionView",
    "ShellIntegrationView",
    # Values and events
    "CommandLine",
    "Confidence",
    "ShellEnvironment",
    "ShellExecutionEndEvent",
    "ShellExecutionStartEvent",
    "ShellIntegrationChangeEvent",
    "Uri",
    # Streams
    "ExecutionDataStream",
    # Collaborators
    "ShellTransport",
    "Terminal",
    "TerminalRegistry",
    # Config
    "Config",
    "get_config",
    "load_config",
]
