"""Tests for dynapi.config -- project file loading and precedence resolution."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from dynapi.config import load_project_config, resolve_config
from dynapi.exceptions import ConfigError
from dynapi.models import HTTPMethod


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestLoadProjectConfig:
    def test_missing_file(self, isolated_config: Path) -> None:
        assert load_project_config() is None

    def test_reads_working_directory(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "dynapi.json", {"base_url": "https://file.test"})
        assert load_project_config() == {"base_url": "https://file.test"}

    def test_explicit_directory(self, tmp_path: Path) -> None:
        _write_json(tmp_path / "dynapi.json", {"retries": 1})
        assert load_project_config(tmp_path) == {"retries": 1}

    def test_invalid_json(self, isolated_config: Path) -> None:
        (isolated_config / "dynapi.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid project config"):
            load_project_config()

    def test_non_object(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "dynapi.json", ["a"])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_project_config()


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults_with_cli_base_url(self, isolated_config: Path) -> None:
        config = resolve_config(cli_base_url="https://cli.test")
        assert config.base_url == "https://cli.test"
        assert config.timeout == 5.0
        assert config.retries == 3

    def test_file_values(self, isolated_config: Path) -> None:
        _write_json(
            isolated_config / "dynapi.json",
            {
                "base_url": "https://file.test",
                "timeout": 9,
                "use_kebab_case": True,
                "method_rules": {"search*": "get"},
            },
        )
        config = resolve_config()
        assert config.base_url == "https://file.test"
        assert config.timeout == 9.0
        assert config.use_kebab_case is True
        assert config.method_rules == {"search*": HTTPMethod.GET}

    def test_env_overrides_file(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(isolated_config / "dynapi.json", {"base_url": "https://file.test", "retries": 5})
        monkeypatch.setenv("DYNAPI_BASE_URL", "https://env.test")
        monkeypatch.setenv("DYNAPI_RETRIES", "1")
        config = resolve_config()
        assert config.base_url == "https://env.test"
        assert config.retries == 1

    def test_cli_overrides_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DYNAPI_BASE_URL", "https://env.test")
        monkeypatch.setenv("DYNAPI_TIMEOUT", "2.5")
        config = resolve_config(cli_base_url="https://cli.test", cli_timeout=1.0, cli_retries=0)
        assert config.base_url == "https://cli.test"
        assert config.timeout == 1.0
        assert config.retries == 0

    def test_env_timeout(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DYNAPI_TIMEOUT", "2.5")
        assert resolve_config(cli_base_url="https://cli.test").timeout == 2.5

    def test_malformed_env_number(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DYNAPI_RETRIES", "many")
        with pytest.raises(ConfigError, match="DYNAPI_RETRIES"):
            resolve_config(cli_base_url="https://cli.test")

    def test_missing_base_url(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="No base URL configured"):
            resolve_config()

    def test_invalid_values(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "dynapi.json", {"base_url": "https://file.test", "timeout": -1})
        with pytest.raises(ConfigError, match="Invalid client configuration"):
            resolve_config()

    def test_project_dir_argument(self, isolated_config: Path, tmp_path_factory: pytest.TempPathFactory) -> None:
        other = tmp_path_factory.mktemp("project")
        _write_json(other / "dynapi.json", {"base_url": "https://other.test"})
        assert resolve_config(project_dir=other).base_url == "https://other.test"
