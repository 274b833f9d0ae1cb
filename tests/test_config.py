"""Tests for the configuration module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from shelltrack.config import (
    Config,
    get_config,
    load_config,
    reset_config,
)
from shelltrack.config.loader import env_overrides
from shelltrack.config.merge import deep_merge, merge_configs
from shelltrack.config.paths import (
    get_config_paths,
    get_project_config_path,
    get_system_config_path,
    get_user_config_path,
)


class TestDeepMerge:
    """Test the deep merge algorithm."""

    def test_simple_override(self) -> None:
        base = {"a": 1, "b": 2}
        override = {"b": 3, "c": 4}
        assert deep_merge(base, override) == {"a": 1, "b": 3, "c": 4}

    def test_nested_merge(self) -> None:
        """Nested dicts merge key by key."""
        base = {"shell_integration": {"trace_data": True, "warn_on_unexpected_start": True}}
        override = {"shell_integration": {"warn_on_unexpected_start": False}}
        result = deep_merge(base, override)
        assert result["shell_integration"]["trace_data"] is True
        assert result["shell_integration"]["warn_on_unexpected_start"] is False

    def test_none_does_not_override(self) -> None:
        assert deep_merge({"a": 1}, {"a": None}) == {"a": 1}

    def test_list_replaced_not_merged(self) -> None:
        assert deep_merge({"items": [1, 2, 3]}, {"items": [4, 5]}) == {"items": [4, 5]}

    def test_inputs_not_modified(self) -> None:
        base = {"a": {"b": 1}}
        override = {"a": {"c": 2}}
        deep_merge(base, override)
        assert base == {"a": {"b": 1}}
        assert override == {"a": {"c": 2}}

    def test_merge_configs_multiple(self) -> None:
        """Later layers win."""
        result = merge_configs({"a": 1, "b": 2}, {"b": 3}, {}, {"c": 4})
        assert result == {"a": 1, "b": 3, "c": 4}


class TestConfigPaths:
    """Test platform-aware path resolution."""

    def test_windows_system_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "platform", "win32")
        monkeypatch.setenv("PROGRAMDATA", "C:\\ProgramData")

        path = get_system_config_path()
        assert path is not None
        assert "ProgramData" in str(path)
        assert "shelltrack" in str(path)
        assert "config.yaml" in str(path)

    def test_windows_user_path_missing_appdata(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "platform", "win32")
        monkeypatch.delenv("APPDATA", raising=False)

        assert get_user_config_path() is None

    def test_unix_system_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "platform", "linux")
        assert get_system_config_path() == Path("/etc/shelltrack/config.yaml")

    def test_unix_user_path_xdg(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """$XDG_CONFIG_HOME wins over the home directory."""
        monkeypatch.setattr(sys, "platform", "linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", "/home/test/.config-custom")

        path = get_user_config_path()
        assert path == Path("/home/test/.config-custom/shelltrack/config.yaml")

    def test_project_config_path(self) -> None:
        path = get_project_config_path("/home/user/myproject")
        assert path == Path("/home/user/myproject/.shelltrack/config.yaml")

    def test_get_config_paths_order(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "platform", "linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", "/xdg")

        paths = get_config_paths(session_root="/project")
        assert paths == [
            Path("/etc/shelltrack/config.yaml"),
            Path("/xdg/shelltrack/config.yaml"),
            Path("/project/.shelltrack/config.yaml"),
        ]

    def test_get_config_paths_without_project(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "platform", "linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", "/xdg")

        assert len(get_config_paths()) == 2


class TestConfigLoading:
    """Test configuration loading."""

    @pytest.fixture(autouse=True)
    def isolated_user_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Point the user config at an empty directory."""
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
        monkeypatch.delenv("SHELLTRACK_LOG", raising=False)

    @pytest.fixture
    def project_dir(self, tmp_path: Path) -> Path:
        project = tmp_path / "project"
        (project / ".shelltrack").mkdir(parents=True)
        return project

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        config = load_config(session_root=str(tmp_path))
        assert isinstance(config, Config)
        assert config.shell_integration.warn_on_unexpected_start is True
        assert config.shell_integration.trace_data is False
        assert config.replay.show_output is False
        assert config.replay.terminal_name == "replay"
        assert config.logging.level is None

    def test_load_yaml_config(self, project_dir: Path) -> None:
        (project_dir / ".shelltrack" / "config.yaml").write_text(
            """
logging:
  level: DEBUG
shell_integration:
  trace_data: true
replay:
  terminal_name: rec
"""
        )
        config = load_config(session_root=str(project_dir))
        assert config.logging.level == "DEBUG"
        assert config.shell_integration.trace_data is True
        assert config.shell_integration.warn_on_unexpected_start is True
        assert config.replay.terminal_name == "rec"

    def test_unknown_sections_kept_in_extra(self, project_dir: Path) -> None:
        (project_dir / ".shelltrack" / "config.yaml").write_text("plugins:\n  enabled: true\n")

        config = load_config(session_root=str(project_dir))
        assert config.extra == {"plugins": {"enabled": True}}

    def test_user_config_below_project(self, tmp_path: Path, project_dir: Path) -> None:
        user_dir = tmp_path / "xdg" / "shelltrack"
        user_dir.mkdir(parents=True)
        (user_dir / "config.yaml").write_text(
            "replay:\n  show_output: true\n  terminal_name: user\n"
        )
        (project_dir / ".shelltrack" / "config.yaml").write_text(
            "replay:\n  terminal_name: project\n"
        )

        config = load_config(session_root=str(project_dir))
        assert config.replay.show_output is True
        assert config.replay.terminal_name == "project"

    def test_explicit_config_file_wins_over_project(
        self, tmp_path: Path, project_dir: Path
    ) -> None:
        (project_dir / ".shelltrack" / "config.yaml").write_text("logging:\n  level: INFO\n")
        explicit = tmp_path / "explicit.yaml"
        explicit.write_text("logging:\n  level: ERROR\n")

        config = load_config(session_root=str(project_dir), config_file=explicit)
        assert config.logging.level == "ERROR"

    def test_env_overrides_log_file(
        self, project_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (project_dir / ".shelltrack" / "config.yaml").write_text(
            "logging:\n  file: from-config.log\n"
        )
        monkeypatch.setenv("SHELLTRACK_LOG", "/tmp/from-env.log")

        config = load_config(session_root=str(project_dir))
        assert config.logging.file == "/tmp/from-env.log"

    def test_env_overrides_empty_without_variable(self) -> None:
        assert env_overrides() == {}

    def test_invalid_yaml_uses_defaults(
        self, project_dir: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        (project_dir / ".shelltrack" / "config.yaml").write_text("invalid: yaml: :")

        config = load_config(session_root=str(project_dir))
        assert config.logging.level is None
        assert "Invalid YAML" in caplog.text

    def test_wrong_value_type_uses_default(
        self, project_dir: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        (project_dir / ".shelltrack" / "config.yaml").write_text(
            "shell_integration:\n  trace_data: 'yes'\nlogging:\n  verbose: true\n"
        )

        config = load_config(session_root=str(project_dir))
        assert config.shell_integration.trace_data is False
        assert config.logging.verbose is None
        assert "Ignoring config value" in caplog.text

    def test_non_mapping_yaml_ignored(self, project_dir: Path) -> None:
        (project_dir / ".shelltrack" / "config.yaml").write_text("- just\n- a list\n")

        config = load_config(session_root=str(project_dir))
        assert config.extra == {}

    def test_global_config_cached(self) -> None:
        first = get_config()
        assert get_config() is first

        reset_config()
        assert get_config() is not first


def test_public_api_exports_resolve() -> None:
    import shelltrack.config as config_package

    for name in config_package.__all__:
        assert hasattr(config_package, name), name
