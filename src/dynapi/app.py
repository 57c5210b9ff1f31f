"""Typer application and CLI entry point for dynapi.

Two commands expose the routing engine from the shell:

* ``dynapi call users/123/follow --data '{"notify": true}'`` resolves the
  path, issues the request and prints the normalized response.
* ``dynapi resolve admin.users.ban`` prints the endpoint and inferred HTTP
  method without any network I/O.

:func:`main` is the console-script entry point declared in
``pyproject.toml``; it maps :class:`~dynapi.exceptions.DynapiError` to the
error's exit code.
"""

from __future__ import annotations

import asyncio
import json
import logging
import signal
import sys
from typing import Any, Optional

import typer
from pydantic import ValidationError
from rich.logging import RichHandler

from dynapi import __version__
from dynapi.exit_codes import EXIT_GENERIC_FAILURE, EXIT_REQUEST_FAILED

app = typer.Typer(
    name="dynapi",
    help="Call REST-like endpoints by path, with the HTTP method inferred from the action name.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"dynapi {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logger = logging.getLogger("dynapi")
    if verbose:
        if not any(isinstance(h, RichHandler) for h in logger.handlers):
            logger.addHandler(RichHandler(show_path=False, markup=False))
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.WARNING)


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Install the global :class:`~dynapi.output.OutputManager` from CLI flags."""
    from dynapi.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose)


# ------------------------------------------------------------------ #
# Argument parsing helpers
# ------------------------------------------------------------------ #


def _normalize_path(path: str) -> str:
    """Accept ``users/123/follow`` and ``users.123.follow`` alike.

    Dots are separators only in a path without slashes, so ``users/1.5/get``
    keeps its segments intact.
    """
    if "/" in path:
        return path
    return path.replace(".", "/")


def _parse_data(data: Optional[str]) -> Any:
    from dynapi.exceptions import InvalidUsageError

    if data is None:
        return None
    try:
        return json.loads(data)
    except json.JSONDecodeError as exc:
        raise InvalidUsageError(f"--data is not valid JSON: {exc}") from exc


def _parse_pairs(pairs: list[str], separator: str, option: str) -> dict[str, str]:
    from dynapi.exceptions import InvalidUsageError

    result: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition(separator)
        if not sep or not key.strip():
            raise InvalidUsageError(f"{option} expects KEY{separator}VALUE, got {pair!r}")
        result[key.strip()] = value.strip()
    return result


def _with_method(payload: Any, method: Optional[str]) -> Any:
    from dynapi.exceptions import InvalidUsageError
    from dynapi.routing.engine import RESERVED_METHOD_KEY

    if method is None:
        return payload
    if payload is None:
        return {RESERVED_METHOD_KEY: method}
    if not isinstance(payload, dict):
        raise InvalidUsageError("--method requires --data to be a JSON object")
    return {**payload, RESERVED_METHOD_KEY: method}


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("call")
def call_command(
    path: str = typer.Argument(..., help="Route path, e.g. users/123/follow or admin.users.ban."),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="JSON payload."),
    query: list[str] = typer.Option([], "--query", "-Q", help="Query parameter KEY=VALUE (repeatable)."),
    header: list[str] = typer.Option([], "--header", "-H", help="Header 'Name: value' (repeatable)."),
    method: Optional[str] = typer.Option(None, "--method", "-X", help="Override the inferred HTTP method."),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="API base URL."),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Per-attempt timeout in seconds."),
    retries: Optional[int] = typer.Option(None, "--retries", help="Retries after the first attempt."),
) -> None:
    """Resolve PATH, send the request and print the response."""
    from dynapi.client.dynamic import DynamicClient
    from dynapi.client.response import format_api_response
    from dynapi.config import resolve_config
    from dynapi.output import get_output

    config = resolve_config(cli_base_url=base_url, cli_timeout=timeout, cli_retries=retries)
    payload = _with_method(_parse_data(data), method)
    params = _parse_pairs(query, "=", "--query")
    headers = _parse_pairs(header, ":", "--header")

    async def _run() -> Any:
        async with DynamicClient(config) as client:
            return await client.invoke(
                _normalize_path(path),
                payload,
                params or None,
                headers=headers or None,
            )

    response = asyncio.run(_run())
    get_output().debug(f"success={response.success}")
    format_api_response(response)
    if not response.success:
        raise typer.Exit(EXIT_REQUEST_FAILED)


@app.command("resolve")
def resolve_command(
    path: str = typer.Argument(..., help="Route path, e.g. users/123 or users.getProfile."),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="JSON payload used for inference."),
) -> None:
    """Show the endpoint and HTTP method PATH resolves to, without sending anything."""
    from dynapi.config import load_project_config
    from dynapi.exceptions import ConfigError, InvalidUsageError
    from dynapi.models import MethodResolverOptions
    from dynapi.output import get_output
    from dynapi.routing.engine import ActionHandler, ParameterizedRoute, RouteEngine

    project = load_project_config() or {}
    try:
        options = MethodResolverOptions(
            default_method=project.get("default_method", "POST"),
            method_rules=project.get("method_rules", {}),
        )
    except ValidationError as exc:
        raise ConfigError(f"Invalid method settings in project config: {exc}") from exc

    def _describe(endpoint: str, body: Any, query: Any, method: str, **_: Any) -> dict[str, Any]:
        return {"endpoint": endpoint, "method": method, "body": body}

    engine = RouteEngine(_describe, options=options)
    handle = engine.route(_normalize_path(path))
    if not isinstance(handle, (ActionHandler, ParameterizedRoute)):
        raise InvalidUsageError(f"Path {path!r} does not end at an action or resource")
    resolved = handle(_parse_data(data))

    rows = [["method", resolved["method"]], ["endpoint", resolved["endpoint"]]]
    if resolved["body"] is not None:
        rows.append(["body", json.dumps(resolved["body"], default=str)])
    get_output().print_table(["field", "value"], rows, title="Resolved route")


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``dynapi`` console script.

    :class:`~dynapi.exceptions.DynapiError` instances (including
    :class:`~dynapi.exceptions.ClientError`) exit with the error's
    ``exit_code``; anything else exits with the generic failure code.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from dynapi.exceptions import DynapiError
        from dynapi.output import get_output

        if isinstance(exc, DynapiError):
            get_output().error(str(exc))
            sys.exit(exc.exit_code)
        get_output().error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
