"""Signal recordings in JSONL: reading and writing."""

from __future__ import annotations

import time
from collections.abc import Iterator
from pathlib import Path
from typing import IO, Any

from pydantic import ValidationError

from shelltrack.logging import get_logger
from shelltrack.recording.signals import RecordedSignal, Signal

log = get_logger("recording")


class SignalPlayer:
    """Reads recorded signals from JSONL.

    Blank lines are skipped; lines that are not valid JSON or not a known
    signal are logged and skipped.

    Usage:
        with SignalPlayer(Path("session.jsonl")) as player:
            for record in player:
                print(record.signal.method)
    """

    def __init__(self, source: Path | IO[str]) -> None:
        """Initialize player.

        Args:
            source: Path to JSONL file or file-like object
        """
        self._source: IO[str]
        self._owns_file = False

        if isinstance(source, Path):
            self._source = open(source, encoding="utf-8")
            self._owns_file = True
        else:
            self._source = source

    def __iter__(self) -> Iterator[RecordedSignal]:
        for lineno, line in enumerate(self._source, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield RecordedSignal.model_validate_json(line)
            except ValidationError as e:
                log.warning("Skipping invalid signal on line %d: %s", lineno, e.errors()[0]["msg"])

    def signals(self) -> list[RecordedSignal]:
        """Load all signals into memory."""
        return list(self)

    def close(self) -> None:
        if self._owns_file:
            self._source.close()

    def __enter__(self) -> SignalPlayer:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class SignalRecorder:
    """Writes signals to a JSONL stream."""

    def __init__(self, output: IO[str]) -> None:
        self.output = output

    def record(self, signal: Signal, ts: float | None = None) -> None:
        """Append one signal, stamped with ``ts`` or the current time."""
        record = RecordedSignal(ts=time.time() if ts is None else ts, signal=signal)
        self.output.write(record.model_dump_json(by_alias=True) + "\n")
        self.output.flush()
