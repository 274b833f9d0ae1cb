"""Recording and replay of shell-integration signals (JSONL)."""

from shelltrack.recording.player import SignalPlayer, SignalRecorder
from shelltrack.recording.replay import (
    ReplayTerminal,
    ReplayTerminalRegistry,
    ReplayTransport,
    replay,
)
from shelltrack.recording.signals import (
    CloseTerminalSignal,
    CwdChangeSignal,
    RecordedSignal,
    SetHasRichCommandDetectionSignal,
    ShellEnvChangeSignal,
    ShellExecutionDataSignal,
    ShellExecutionEndSignal,
    ShellExecutionStartSignal,
    ShellIntegrationChangeSignal,
    Signal,
)

__all__ = [
    "CloseTerminalSignal",
    "CwdChangeSignal",
    "RecordedSignal",
    "ReplayTerminal",
    "ReplayTerminalRegistry",
    "ReplayTransport",
    "SetHasRichCommandDetectionSignal",
    "ShellEnvChangeSignal",
    "ShellExecutionDataSignal",
    "ShellExecutionEndSignal",
    "ShellExecutionStartSignal",
    "ShellIntegrationChangeSignal",
    "Signal",
    "SignalPlayer",
    "SignalRecorder",
    "replay",
]
