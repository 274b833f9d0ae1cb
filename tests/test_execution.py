"""Tests for ShellExecution and its consumer view."""

from __future__ import annotations

import asyncio

import pytest

from shelltrack.shell import CommandLine, Confidence
from shelltrack.shell.execution import ShellExecution
from shelltrack.uri import Uri


def _execution(value: str = "ls -la", cwd: Uri | None = None) -> ShellExecution:
    return ShellExecution(CommandLine(value, Confidence.HIGH, True), cwd)


async def _collect(reader) -> list[str]:
    return [chunk async for chunk in reader]


class TestShellExecution:
    @pytest.mark.asyncio
    async def test_read_sees_output_until_end(self) -> None:
        execution = _execution()
        reader = execution.read()
        execution.emit_data("total 0\n")
        execution.emit_data("README.md\n")
        execution.end_execution()

        assert await _collect(reader) == ["total 0\n", "README.md\n"]
        assert execution.ended

    @pytest.mark.asyncio
    async def test_read_after_end_is_empty(self) -> None:
        execution = _execution()
        execution.emit_data("early")
        execution.end_execution()

        assert await _collect(execution.read()) == []

    @pytest.mark.asyncio
    async def test_emit_after_end_is_ignored(self) -> None:
        execution = _execution()
        reader = execution.read()
        execution.end_execution()
        execution.emit_data("late")

        assert await _collect(reader) == []

    def test_end_refines_command_line(self) -> None:
        execution = _execution("gi")
        refined = CommandLine("git status", Confidence.HIGH, True)
        execution.end_execution(refined)

        assert execution.command_line == refined
        assert execution.value.command_line == refined

    def test_end_without_command_line_keeps_original(self) -> None:
        execution = _execution("make")
        execution.end_execution(None)

        assert execution.command_line.value == "make"

    def test_end_is_idempotent(self) -> None:
        execution = _execution()
        execution.end_execution()
        execution.end_execution()

        assert execution.ended
        assert execution.is_drained

    def test_cwd_is_fixed_at_creation(self) -> None:
        cwd = Uri.file("/home/me")
        execution = _execution(cwd=cwd)

        assert execution.cwd == cwd
        assert execution.value.cwd == cwd

    @pytest.mark.asyncio
    async def test_flush_waits_for_readers(self) -> None:
        execution = _execution()
        reader = execution.read()
        execution.emit_data("out")
        execution.end_execution()

        flush = asyncio.create_task(execution.flush())
        await asyncio.sleep(0)
        assert not flush.done()
        assert not execution.is_drained

        assert await _collect(reader) == ["out"]
        await asyncio.wait_for(flush, timeout=1)
        assert execution.is_drained

    @pytest.mark.asyncio
    async def test_flush_without_readers_returns(self) -> None:
        execution = _execution()
        execution.end_execution()

        await asyncio.wait_for(execution.flush(), timeout=1)


class TestShellExecutionView:
    @pytest.mark.asyncio
    async def test_each_read_is_independent(self) -> None:
        execution = _execution()
        view = execution.value
        first = view.read()
        execution.emit_data("a")
        second = view.read()
        execution.emit_data("b")
        execution.end_execution()

        assert await _collect(first) == ["a", "b"]
        assert await _collect(second) == ["b"]

    def test_repr_shows_command_line(self) -> None:
        assert repr(_execution("echo hi").value) == "<ShellExecution 'echo hi'>"
