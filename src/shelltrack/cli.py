"""Command-line interface for shelltrack."""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from shelltrack import __version__
from shelltrack.config import Config, load_config
from shelltrack.logging import setup_logging
from shelltrack.recording import (
    ReplayTerminalRegistry,
    ReplayTransport,
    SignalPlayer,
    replay,
)
from shelltrack.shell import (
    ShellExecutionEndEvent,
    ShellExecutionStartEvent,
    ShellExecutionView,
    ShellIntegrationChangeEvent,
    ShellIntegrationService,
)

console = Console()


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="shelltrack",
        description="Track shell-integration executions and their output",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (can be repeated)",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only print execution events",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Extra config file layered over system/user/project config",
    )

    subparsers = parser.add_subparsers(dest="mode", help="Operating mode")

    replay_parser = subparsers.add_parser(
        "replay",
        help="Replay a JSONL signal recording and print execution events",
    )
    replay_parser.add_argument("recording", type=Path, help="Recording file (JSONL)")
    replay_parser.add_argument(
        "--show-output",
        action="store_true",
        default=None,
        help="Print execution output as it streams",
    )

    return parser


async def run_replay(config: Config, recording: Path, show_output: bool, quiet: bool) -> int:
    """Replay a recording and print what the service observed.

    Returns:
        Exit code
    """
    registry = ReplayTerminalRegistry(config.replay.terminal_name)
    transport = ReplayTransport()
    service = ShellIntegrationService(registry, transport, config=config.shell_integration)
    output_tasks: set[asyncio.Task[None]] = set()

    def on_change(event: ShellIntegrationChangeEvent) -> None:
        if quiet:
            return
        integration = event.shell_integration
        console.print(
            f"[dim]{escape(str(event.terminal))} cwd={escape(str(integration.cwd))} "
            f"rich={integration.has_rich_command_detection}[/dim]"
        )

    def on_start(event: ShellExecutionStartEvent) -> None:
        command_line = event.execution.command_line
        console.print(
            f"[green]start[/green] {escape(str(event.terminal))} "
            f"[bold]{escape(command_line.value)}[/bold] [dim]({command_line.confidence})[/dim]"
        )
        if show_output:
            task = asyncio.create_task(_print_output(event.execution))
            output_tasks.add(task)
            task.add_done_callback(output_tasks.discard)

    def on_end(event: ShellExecutionEndEvent) -> None:
        style = "red" if event.exit_code else "blue"
        console.print(
            f"[{style}]end[/{style}] {escape(str(event.terminal))} "
            f"[bold]{escape(event.execution.command_line.value)}[/bold] exit={event.exit_code}"
        )

    service.on_did_change_shell_integration.subscribe(on_change)
    service.on_did_start_shell_execution.subscribe(on_start)
    service.on_did_end_shell_execution.subscribe(on_end)

    try:
        with SignalPlayer(recording) as player:
            count = await replay(player, service, registry)
        if output_tasks:
            await asyncio.gather(*output_tasks)
    finally:
        service.dispose()

    if not quiet:
        console.print(f"[dim]Replayed {count} signal(s)[/dim]")
    return 0


async def _print_output(execution: ShellExecutionView) -> None:
    async for chunk in execution.read():
        console.out(chunk, end="", highlight=False)


def run_cli(args: Sequence[str]) -> int:
    """Run the CLI with the given arguments."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    if parsed.mode is None:
        parser.print_help()
        return 1

    config = load_config(session_root=str(Path.cwd()), config_file=parsed.config)
    if parsed.verbose:
        config.logging.verbose = min(parsed.verbose, 4)
    setup_logging(config.logging)

    if parsed.mode == "replay":
        if not parsed.recording.is_file():
            console.print(f"[red]Error: recording not found: {escape(str(parsed.recording))}[/red]")
            return 1
        show_output = config.replay.show_output if parsed.show_output is None else True
        return asyncio.run(run_replay(config, parsed.recording, show_output, parsed.quiet))

    parser.print_help()
    return 1
