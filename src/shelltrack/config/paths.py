"""Where config files live.

=========  ===============================  ==============================
Layer      Windows                          Unix
=========  ===============================  ==============================
system     %PROGRAMDATA%/shelltrack/        /etc/shelltrack/
user       %APPDATA%/shelltrack/            $XDG_CONFIG_HOME/shelltrack/,
                                            ~/.config/shelltrack/ or
                                            ~/.shelltrack/
project    <root>/.shelltrack/              <root>/.shelltrack/
=========  ===============================  ==============================

Every location holds a ``config.yaml``. None of the files has to exist.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

CONFIG_FILENAME = "config.yaml"
APP_NAME = "shelltrack"
SHORT_NAME = ".shelltrack"


def _windows_path(env_var: str) -> Path | None:
    base = os.environ.get(env_var)
    return Path(base, APP_NAME, CONFIG_FILENAME) if base else None


def get_system_config_path() -> Path | None:
    """System layer, or None on Windows without ``%PROGRAMDATA%``."""
    if sys.platform == "win32":
        return _windows_path("PROGRAMDATA")
    return Path("/etc", APP_NAME, CONFIG_FILENAME)


def get_user_config_path() -> Path | None:
    """User layer.

    On Unix ``$XDG_CONFIG_HOME`` wins, then ``~/.config`` if that directory
    exists, then ``~/.shelltrack``.
    """
    if sys.platform == "win32":
        return _windows_path("APPDATA")

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg, APP_NAME, CONFIG_FILENAME)
    dot_config = Path.home() / ".config"
    if dot_config.is_dir():
        return dot_config / APP_NAME / CONFIG_FILENAME
    return Path.home() / SHORT_NAME / CONFIG_FILENAME


def get_project_config_path(session_root: str) -> Path:
    return Path(session_root, SHORT_NAME, CONFIG_FILENAME)


def get_config_paths(session_root: str | None = None) -> list[Path]:
    """Candidate files, lowest priority first: system, user, project."""
    candidates = [get_system_config_path(), get_user_config_path()]
    if session_root:
        candidates.append(get_project_config_path(session_root))
    return [path for path in candidates if path is not None]
