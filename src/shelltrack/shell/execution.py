"""A single command execution tracked by a shell-integration session."""

from __future__ import annotations

from collections.abc import AsyncIterator

from shelltrack.shell.stream import ExecutionDataStream, StreamReader
from shelltrack.shell.types import CommandLine
from shelltrack.uri import Uri


class ShellExecutionView:
    """Read-only view of an execution handed to API consumers.

    The view stays usable after the session stopped tracking the execution;
    ``read()`` then returns an empty stream.
    """

    __slots__ = ("_execution",)

    def __init__(self, execution: ShellExecution) -> None:
        self._execution = execution

    @property
    def command_line(self) -> CommandLine:
        """Latest known command line (may be refined when the execution ends)."""
        return self._execution.command_line

    @property
    def cwd(self) -> Uri | None:
        return self._execution.cwd

    def read(self) -> AsyncIterator[str]:
        """Attach a fresh reader to the execution's output.

        Each call is independent. Only output emitted after the call is seen;
        the iterator ends when the execution ends.
        """
        return self._execution.read()

    def __repr__(self) -> str:
        return f"<ShellExecution {self.command_line.value!r}>"


class ShellExecution:
    """Session-owned execution record.

    Attributes:
        cwd: Working directory at creation time. Never changes.
        value: The consumer-facing ShellExecutionView.
    """

    def __init__(self, command_line: CommandLine, cwd: Uri | None) -> None:
        self._command_line = command_line
        self.cwd = cwd
        self._stream: ExecutionDataStream | None = ExecutionDataStream()
        # Kept after teardown so flush() can still wait for readers
        self._closed_stream: ExecutionDataStream | None = None
        self._ended = False
        self.value = ShellExecutionView(self)

    @property
    def command_line(self) -> CommandLine:
        return self._command_line

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def is_drained(self) -> bool:
        """True when no reader is still consuming the output."""
        streams = (self._stream, self._closed_stream)
        return all(stream.is_drained for stream in streams if stream is not None)

    def read(self) -> AsyncIterator[str]:
        if self._stream is None:
            return _empty_reader()
        return self._stream.attach()

    def emit_data(self, data: str) -> None:
        if self._stream is not None:
            self._stream.push(data)

    def end_execution(self, command_line: CommandLine | None = None) -> None:
        """Mark the execution ended and release every reader.

        Args:
            command_line: Refined command line reported at the end, if any.
        """
        if command_line is not None:
            self._command_line = command_line
        if self._stream is not None:
            self._stream.close()
            self._closed_stream = self._stream
            self._stream = None
        self._ended = True

    async def flush(self) -> None:
        """Wait until every reader has consumed the output to the end."""
        for stream in (self._stream, self._closed_stream):
            if stream is not None:
                await stream.drained()


def _empty_reader() -> StreamReader:
    stream = ExecutionDataStream()
    stream.close()
    return stream.attach()
