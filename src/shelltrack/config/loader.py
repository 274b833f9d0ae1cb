"""Reading, layering and caching of shelltrack configuration.

Each YAML layer is read into a plain dict, the layers are deep-merged and the
result is mapped onto the dataclasses in ``schema``. Values of the wrong type
are dropped in favour of the field default, so a bad user file never stops
the tool from starting.
"""

from __future__ import annotations

import logging
import os
from dataclasses import fields
from pathlib import Path
from typing import Any, TypeVar

import yaml

from shelltrack.config.merge import merge_configs
from shelltrack.config.paths import get_config_paths
from shelltrack.config.schema import (
    Config,
    LoggingConfig,
    ReplayConfig,
    ShellIntegrationConfig,
)

# shelltrack.logging may not be set up yet; records propagate once it is
_log = logging.getLogger("shelltrack.config")

S = TypeVar("S")

_SECTIONS: dict[str, type] = {
    "logging": LoggingConfig,
    "shell_integration": ShellIntegrationConfig,
    "replay": ReplayConfig,
}

# Accepted YAML types per schema annotation
_ACCEPTS: dict[str, tuple[type, ...]] = {
    "bool": (bool,),
    "str": (str,),
    "int": (int,),
    "str | None": (str,),
    "int | None": (int,),
}

_cached: Config | None = None


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Read one YAML layer. Missing, unreadable or non-mapping files give ``{}``."""
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        _log.warning("Invalid YAML in %s: %s", path, e)
        return {}
    except PermissionError:
        _log.debug("No permission to read %s", path)
        return {}
    except OSError as e:
        _log.warning("Cannot read %s: %s", path, e)
        return {}
    if data is not None and not isinstance(data, dict):
        _log.warning("Ignoring %s: top level is not a mapping", path)
        return {}
    return data or {}


def env_overrides() -> dict[str, Any]:
    """Layer built from environment variables (highest priority)."""
    log_file = os.environ.get("SHELLTRACK_LOG")
    return {"logging": {"file": log_file}} if log_file else {}


def _build_section(cls: type[S], data: Any) -> S:
    values = data if isinstance(data, dict) else {}
    kwargs: dict[str, Any] = {}
    for f in fields(cls):  # type: ignore[arg-type]
        if f.name not in values:
            continue
        value = values[f.name]
        accepted = _ACCEPTS.get(str(f.type), (object,))
        # bool is an int subclass; reject it where an int is expected
        if isinstance(value, accepted) and not (bool not in accepted and isinstance(value, bool)):
            kwargs[f.name] = value
        else:
            _log.warning("Ignoring config value %s.%s=%r", cls.__name__, f.name, value)
    return cls(**kwargs)


def dict_to_config(data: dict[str, Any]) -> Config:
    """Map a merged config dict onto the typed Config tree.

    Top-level keys that are not known sections are kept in ``Config.extra``.
    """
    sections = {name: _build_section(cls, data.get(name)) for name, cls in _SECTIONS.items()}
    extra = {key: value for key, value in data.items() if key not in _SECTIONS}
    return Config(**sections, extra=extra)


def load_config(
    session_root: str | None = None,
    reload: bool = False,
    config_file: Path | None = None,
) -> Config:
    """Load the effective config.

    Layers, lowest priority first: system, user, project
    (``<session_root>/.shelltrack/config.yaml``), ``config_file``, environment.

    Only the global config (no ``session_root``, no ``config_file``) is
    cached; ``reload=True`` bypasses and refreshes that cache.
    """
    global _cached

    is_global = session_root is None and config_file is None
    if is_global and _cached is not None and not reload:
        return _cached

    paths = get_config_paths(session_root)
    if config_file is not None:
        paths.append(config_file)

    layers = []
    for path in paths:
        layer = load_yaml_file(path)
        if layer:
            _log.debug("Config layer %s", path)
            layers.append(layer)
    layers.append(env_overrides())

    config = dict_to_config(merge_configs(*layers))
    if is_global:
        _cached = config
    return config


def get_config() -> Config:
    """The cached global config, loaded on first use."""
    return _cached if _cached is not None else load_config()


def reset_config() -> None:
    """Forget the cached global config."""
    global _cached
    _cached = None
