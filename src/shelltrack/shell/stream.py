"""Multi-reader output stream for a single shell execution.

Every ``attach()`` creates an independent reader with its own queue. Pushed
chunks fan out to the readers attached at push time; nothing is buffered for
readers that attach later. ``close()`` releases every reader once it has
consumed its queued chunks, and ``drained()`` waits until all readers have
finished.

A reader counts as finished when it reached end-of-stream, when ``aclose()``
was called, when the task driving it was cancelled, or when it was garbage
collected. The stream only holds readers weakly, so dropping one never
blocks the drain for the others.
"""

from __future__ import annotations

import asyncio
import weakref
from collections.abc import AsyncIterator

_EOF = object()


class StreamReader(AsyncIterator[str]):
    """One attachment to an ExecutionDataStream."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._done = False
        self.finished = asyncio.Event()
        # Fires when the reader is collected without reaching the end
        self._finalizer = weakref.finalize(self, self.finished.set)
        self._finalizer.atexit = False

    @property
    def done(self) -> bool:
        return self._done

    async def __anext__(self) -> str:
        if self._done:
            raise StopAsyncIteration
        try:
            item = await self._queue.get()
        except asyncio.CancelledError:
            self._finish()
            raise
        if item is _EOF:
            self._finish()
            raise StopAsyncIteration
        assert isinstance(item, str)
        return item

    async def aclose(self) -> None:
        """Stop reading; the stream will no longer wait for this reader."""
        self._finish()

    def _feed(self, chunk: str) -> None:
        if not self._done:
            self._queue.put_nowait(chunk)

    def _feed_eof(self) -> None:
        if not self._done:
            self._queue.put_nowait(_EOF)

    def _finish(self) -> None:
        self._done = True
        self.finished.set()
        self._finalizer.detach()
        while not self._queue.empty():
            self._queue.get_nowait()


class ExecutionDataStream:
    """Fan-out of an execution's output to any number of readers."""

    def __init__(self) -> None:
        self._readers: weakref.WeakSet[StreamReader] = weakref.WeakSet()
        self._finished: list[asyncio.Event] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def reader_count(self) -> int:
        """Number of attached readers that have not finished yet."""
        return sum(1 for reader in self._readers if not reader.done)

    @property
    def is_drained(self) -> bool:
        """True when every reader ever attached has finished."""
        return all(event.is_set() for event in self._finished)

    def attach(self) -> StreamReader:
        """Attach a new reader.

        After ``close()`` the returned reader is already terminated.
        """
        reader = StreamReader()
        if self._closed:
            reader._finish()
            return reader
        self._readers.add(reader)
        self._finished.append(reader.finished)
        return reader

    def push(self, chunk: str) -> None:
        if self._closed:
            return
        for reader in list(self._readers):
            reader._feed(chunk)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for reader in list(self._readers):
            reader._feed_eof()

    async def drained(self) -> None:
        """Wait until every attached reader has finished."""
        for event in list(self._finished):
            await event.wait()
