"""Shared test fixtures for dynapi.

Provides a recording httpx handler, a client factory wired to
:class:`httpx.MockTransport`, config isolation, and output state resets.
These fixtures are automatically discovered by pytest and available to all
test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional, Union

import httpx
import pytest

from dynapi.client.dynamic import DynamicClient
from dynapi.client.transport import HttpxTransport
from dynapi.output import OutputFormat, OutputManager, reset_output, set_output

BASE_URL = "https://api.example.com"

Scripted = Union[httpx.Response, Exception]


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams per invocation.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Mock HTTP
# ---------------------------------------------------------------------------


class RecordingHandler:
    """httpx mock handler that records requests and replays scripted results.

    Each call pops the next scripted item: an :class:`httpx.Response` is
    returned, an exception is raised.  Once the script runs out, every
    request gets ``200 {"ok": true}``.
    """

    def __init__(self, script: Optional[list[Scripted]] = None) -> None:
        self.requests: list[httpx.Request] = []
        self._script = list(script or [])

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._script:
            item = self._script.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        return httpx.Response(200, json={"ok": True})

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def body(self, index: int = -1) -> Any:
        content = self.requests[index].content
        return json.loads(content) if content else None


@pytest.fixture
def recording_handler() -> Callable[..., RecordingHandler]:
    """Factory for :class:`RecordingHandler` instances."""
    return RecordingHandler


@pytest.fixture
def make_client() -> Callable[..., Any]:
    """Build a client whose transport is an :class:`httpx.MockTransport`.

    ``retry_delay`` defaults to 0 so retry tests do not sleep.
    """

    def _make(handler: Callable[..., Any], client_cls: type = DynamicClient, **settings: Any) -> Any:
        settings.setdefault("base_url", BASE_URL)
        settings.setdefault("retry_delay", 0)
        transport = HttpxTransport(httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        return client_cls(transport=transport, **settings)

    return _make


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an empty working directory with no ``DYNAPI_*`` variables set."""
    for var in ["DYNAPI_BASE_URL", "DYNAPI_TIMEOUT", "DYNAPI_RETRIES"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet PLAIN-format OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
