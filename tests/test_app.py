"""CLI tests for the ``call`` and ``resolve`` commands and the entry point."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import httpx
import pytest

from dynapi import __version__
from dynapi.app import _configure_logging, _normalize_path, app, main
from dynapi.client.transport import HttpxTransport
from dynapi.exceptions import ConfigError, InvalidUsageError
from dynapi.exit_codes import EXIT_CONFIG_ERROR, EXIT_INVALID_USAGE, EXIT_REQUEST_FAILED


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_network(monkeypatch: pytest.MonkeyPatch, recording_handler):
    """Route every client the CLI builds through a recording mock transport."""
    handler = recording_handler()

    def _transport(**kwargs) -> HttpxTransport:
        return HttpxTransport(httpx.AsyncClient(transport=httpx.MockTransport(handler)))

    monkeypatch.setattr("dynapi.client.api_client.HttpxTransport", _transport)
    return handler


def _table(output: str) -> dict[str, str]:
    return {row["field"]: row["value"] for row in json.loads(output)}


# ---------------------------------------------------------------------------
# Global options
# ---------------------------------------------------------------------------


class TestGlobalOptions:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"dynapi {__version__}" in result.stdout

    def test_verbose_logging_handler(self) -> None:
        logger = logging.getLogger("dynapi")
        before = list(logger.handlers)
        try:
            _configure_logging(True)
            _configure_logging(True)
            assert logger.level == logging.DEBUG
            assert len(logger.handlers) == len(before) + 1
        finally:
            logger.handlers = before
            logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# resolve
# ---------------------------------------------------------------------------


class TestResolveCommand:
    def test_action(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "resolve", "admin.users.ban", "--data", '{"userId": 1}'])
        assert result.exit_code == 0, result.output
        assert _table(result.stdout) == {
            "method": "POST",
            "endpoint": "/admin/users/ban",
            "body": '{"userId": 1}',
        }

    def test_resource_read(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "resolve", "users/123"])
        assert _table(result.stdout) == {"method": "GET", "endpoint": "/users/123"}

    def test_explicit_method_in_data(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "resolve", "users/123", "--data", '{"method": "delete"}'])
        assert _table(result.stdout) == {"method": "DELETE", "endpoint": "/users/123", "body": "{}"}

    def test_project_method_rules(self, cli_runner, isolated_config: Path) -> None:
        (isolated_config / "dynapi.json").write_text(
            json.dumps({"base_url": "https://api.test", "method_rules": {"ban": "PATCH"}}),
            encoding="utf-8",
        )
        result = cli_runner.invoke(app, ["--json", "resolve", "admin.users.ban"])
        assert _table(result.stdout)["method"] == "PATCH"

    def test_plain_output(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--plain", "resolve", "users.getProfile"])
        assert "method\tGET" in result.stdout
        assert "endpoint\t/users/getProfile" in result.stdout

    def test_controller_only_is_usage_error(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["resolve", "users"])
        assert result.exit_code != 0
        assert isinstance(result.exception, InvalidUsageError)

    def test_invalid_data(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["resolve", "users.create", "--data", "{oops"])
        assert isinstance(result.exception, InvalidUsageError)


class TestNormalizePath:
    def test_dotted_path_is_split(self) -> None:
        assert _normalize_path("users.123.follow") == "users/123/follow"

    def test_slash_path_keeps_dots(self) -> None:
        assert _normalize_path("files/report.pdf/get") == "files/report.pdf/get"
        assert _normalize_path("users/1.5/get") == "users/1.5/get"


# ---------------------------------------------------------------------------
# call
# ---------------------------------------------------------------------------


class TestCallCommand:
    def test_sends_request_and_prints_data(self, cli_runner, isolated_config: Path, mock_network) -> None:
        result = cli_runner.invoke(
            app,
            [
                "--json", "--quiet", "call", "users/123/follow",
                "--base-url", "https://api.test",
                "--data", '{"notify": true}',
                "--query", "source=cli",
                "--header", "X-Trace: abc",
            ],
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"ok": True}
        request = mock_network.last
        assert request.method == "POST"
        assert request.url == "https://api.test/users/123/follow?source=cli"
        assert request.headers["x-trace"] == "abc"
        assert json.loads(request.content) == {"notify": True}

    def test_method_override(self, cli_runner, isolated_config: Path, mock_network) -> None:
        cli_runner.invoke(
            app,
            ["--quiet", "call", "posts.7", "--method", "DELETE", "--base-url", "https://api.test"],
        )
        assert mock_network.last.method == "DELETE"
        assert mock_network.last.url.path == "/posts/7"
        assert json.loads(mock_network.last.content) == {}

    def test_failed_response_exit_code(
        self, cli_runner, isolated_config: Path, mock_network, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DYNAPI_BASE_URL", "https://api.test")
        mock_network._script.append(httpx.Response(404, json={"detail": "missing"}))
        result = cli_runner.invoke(app, ["--quiet", "call", "users.getProfile"])
        assert result.exit_code == EXIT_REQUEST_FAILED

    def test_missing_base_url(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["call", "users.getProfile"])
        assert isinstance(result.exception, ConfigError)

    def test_bad_header(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app, ["call", "users.getProfile", "--base-url", "https://api.test", "--header", "novalue"]
        )
        assert isinstance(result.exception, InvalidUsageError)

    def test_method_requires_object_data(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app,
            ["call", "users.create", "--base-url", "https://api.test", "--data", "[1]", "--method", "PUT"],
        )
        assert isinstance(result.exception, InvalidUsageError)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


class TestMain:
    @pytest.fixture(autouse=True)
    def _no_signal_handlers(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("dynapi.app._setup_signal_handlers", lambda: None)

    def test_usage_error_exit_code(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
        monkeypatch.setattr(sys, "argv", ["dynapi", "--no-color", "resolve", "users"])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == EXIT_INVALID_USAGE
        assert "Error:" in capsys.readouterr().err

    def test_config_error_exit_code(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "argv", ["dynapi", "--no-color", "call", "users.getProfile"])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == EXIT_CONFIG_ERROR
