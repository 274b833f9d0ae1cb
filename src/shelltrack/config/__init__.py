"""Layered YAML configuration.

Layers from lowest to highest priority: system, user, project
(``<root>/.shelltrack/config.yaml``), an explicit file, environment.

    from shelltrack.config import load_config

    config = load_config(session_root="/path/to/project")
    if config.shell_integration.trace_data:
        ...
"""

from shelltrack.config.loader import (
    get_config,
    load_config,
    reset_config,
)
from shelltrack.config.paths import (
    get_config_paths,
    get_project_config_path,
    get_system_config_path,
    get_user_config_path,
)
from shelltrack.config.schema import (
    Config,
    LoggingConfig,
    ReplayConfig,
    ShellIntegrationConfig,
)

__all__ = [
    "Config",
    "LoggingConfig",
    "ReplayConfig",
    "ShellIntegrationConfig",
    "get_config",
    "get_config_paths",
    "get_project_config_path",
    "get_system_config_path",
    "get_user_config_path",
    "load_config",
    "reset_config",
]
