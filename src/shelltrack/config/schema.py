"""Configuration schema dataclasses for shelltrack.

Defines the structure of configuration at all levels (system, user, project).
All fields are optional to support partial configs that merge together.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str | None = None  # DEBUG, INFO, WARNING, ERROR
    verbose: int | None = None  # 0-4, overrides level when set
    file: str | None = None  # Log file path


@dataclass
class ShellIntegrationConfig:
    """Shell-integration session behavior.

    Example config.yaml:
        shell_integration:
          warn_on_unexpected_start: true
          trace_data: false
    """

    # Warn when a start arrives before the previous end while the shell
    # advertises rich command detection
    warn_on_unexpected_start: bool = True
    trace_data: bool = False  # Log every output chunk at TRACE level


@dataclass
class ReplayConfig:
    """Defaults for the ``shelltrack replay`` command."""

    show_output: bool = False  # Print output chunks as they stream
    terminal_name: str = "replay"  # Name prefix for replay terminals


@dataclass
class Config:
    """Root configuration object.

    Aggregates all configuration sections. All fields use default factories
    to ensure partial configs work correctly with deep merging.
    """

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    shell_integration: ShellIntegrationConfig = field(default_factory=ShellIntegrationConfig)
    replay: ReplayConfig = field(default_factory=ReplayConfig)

    # Extension point for future config sections
    extra: dict[str, Any] = field(default_factory=dict)
