"""Tests for EventEmitter and DisposableStore."""

from __future__ import annotations

import pytest

from shelltrack.shell.events import DisposableStore, EventEmitter


class TestEventEmitter:
    def test_listeners_called_in_order(self) -> None:
        emitter: EventEmitter[int] = EventEmitter("numbers")
        calls: list[tuple[str, int]] = []
        emitter.subscribe(lambda n: calls.append(("first", n)))
        emitter.subscribe(lambda n: calls.append(("second", n)))

        emitter.fire(1)

        assert calls == [("first", 1), ("second", 1)]

    def test_unsubscribe(self) -> None:
        emitter: EventEmitter[int] = EventEmitter()
        seen: list[int] = []
        unsubscribe = emitter.subscribe(seen.append)

        emitter.fire(1)
        unsubscribe()
        unsubscribe()
        emitter.fire(2)

        assert seen == [1]
        assert emitter.listener_count == 0

    def test_listener_may_unsubscribe_while_firing(self) -> None:
        emitter: EventEmitter[int] = EventEmitter()
        seen: list[int] = []
        unsubscribe = None

        def once(value: int) -> None:
            seen.append(value)
            unsubscribe()

        unsubscribe = emitter.subscribe(once)
        emitter.subscribe(seen.append)

        emitter.fire(1)
        emitter.fire(2)

        assert seen == [1, 1, 2]

    def test_failing_listener_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        emitter: EventEmitter[str] = EventEmitter("status")
        seen: list[str] = []

        def broken(value: str) -> None:
            raise ValueError(value)

        emitter.subscribe(broken)
        emitter.subscribe(seen.append)

        emitter.fire("ok")

        assert seen == ["ok"]
        assert "Listener for status failed" in caplog.text

    def test_dispose_drops_listeners(self) -> None:
        emitter: EventEmitter[int] = EventEmitter()
        seen: list[int] = []
        emitter.subscribe(seen.append)

        emitter.dispose()
        emitter.fire(1)
        late = emitter.subscribe(seen.append)
        late()

        assert seen == []
        assert emitter.listener_count == 0


class TestDisposableStore:
    def test_dispose_runs_in_reverse_order(self) -> None:
        store = DisposableStore()
        calls: list[int] = []
        store.add(lambda: calls.append(1))
        store.add(lambda: calls.append(2))

        store.dispose()
        store.dispose()

        assert calls == [2, 1]
        assert store.is_disposed

    def test_add_after_dispose_runs_immediately(self) -> None:
        store = DisposableStore()
        store.dispose()
        calls: list[str] = []

        store.add(lambda: calls.append("late"))

        assert calls == ["late"]

    def test_failing_callback_does_not_stop_others(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        store = DisposableStore()
        calls: list[str] = []
        store.add(lambda: calls.append("first"))
        store.add(lambda: 1 / 0)

        store.dispose()

        assert calls == ["first"]
        assert "Cleanup callback failed" in caplog.text
