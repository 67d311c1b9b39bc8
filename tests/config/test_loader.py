"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- _deep_merge() function
- load_config() precedence: defaults < global yaml < local yaml < env < kwargs
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from svnscope.config.loader import _deep_merge, _load_yaml, load_config
from svnscope.core.errors import ConfigError, ErrorCode


@pytest.fixture
def no_global_config(tmp_path: Path):
    with patch("svnscope.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "missing.yaml"):
        yield


def _write_local_config(working_dir: Path, content: str) -> None:
    config_dir = working_dir / ".svnscope"
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "config.yaml").write_text(content)


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("connector:\n  username: alice\n")

        assert _load_yaml(yaml_file) == {"connector": {"username": "alice"}}

    def test_returns_empty_for_empty_file(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert _load_yaml(yaml_file) == {}

    def test_invalid_yaml_raises_parse_error(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "broken.yaml"
        yaml_file.write_text("connector: [unclosed\n")

        with pytest.raises(ConfigError) as exc_info:
            _load_yaml(yaml_file)

        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR

    def test_non_mapping_raises_parse_error(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            _load_yaml(yaml_file)


class TestDeepMerge:
    """Tests for _deep_merge function."""

    def test_nested_keys_are_merged(self) -> None:
        base = {"connector": {"username": "alice", "password": "x"}}
        override = {"connector": {"password": "y"}}

        assert _deep_merge(base, override) == {"connector": {"username": "alice", "password": "y"}}

    def test_base_is_not_mutated(self) -> None:
        base = {"cache": {"enabled": True}}

        _deep_merge(base, {"cache": {"enabled": False}})

        assert base == {"cache": {"enabled": True}}


@pytest.mark.usefixtures("no_global_config")
class TestLoadConfig:
    """Tests for load_config precedence and validation."""

    def test_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)

        assert config.connector.binary == "svn"
        assert config.connector.command_timeout_sec == 1200
        assert config.connector.last_revision_cache_duration == "10 minutes"
        assert config.cache.enabled is True
        assert config.index.log_batch_size == 1000

    def test_local_yaml_applies(self, tmp_path: Path) -> None:
        _write_local_config(tmp_path, "index:\n  log_batch_size: 50\n")

        config = load_config(tmp_path)

        assert config.index.log_batch_size == 50

    def test_local_yaml_overrides_global(self, tmp_path: Path) -> None:
        global_file = tmp_path / "global.yaml"
        global_file.write_text("connector:\n  username: global-user\n  password: secret\n")
        _write_local_config(tmp_path, "connector:\n  username: local-user\n")

        with patch("svnscope.config.loader.GLOBAL_CONFIG_PATH", global_file):
            config = load_config(tmp_path)

        assert config.connector.username == "local-user"
        assert config.connector.password == "secret"

    def test_env_overrides_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_local_config(tmp_path, "index:\n  log_batch_size: 50\n")
        monkeypatch.setenv("SVNSCOPE__INDEX__LOG_BATCH_SIZE", "75")

        config = load_config(tmp_path)

        assert config.index.log_batch_size == 75

    def test_kwargs_override_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SVNSCOPE__CACHE__ENABLED", "false")

        config = load_config(tmp_path, cache={"enabled": True})

        assert config.cache.enabled is True

    def test_invalid_value_raises_config_error(self, tmp_path: Path) -> None:
        _write_local_config(tmp_path, "index:\n  log_batch_size: 0\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path)

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_VALUE
        assert "log_batch_size" in exc_info.value.details["field"]
