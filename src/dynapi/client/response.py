"""Response normalization -- maps a :class:`TransportResponse` to :class:`APIResponse`.

Every completed HTTP exchange becomes an :class:`~dynapi.models.APIResponse`;
nothing here raises.  :func:`format_api_response` bridges the result to the
CLI output system.

See Also:
    :mod:`dynapi.output` -- the output manager that renders data.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from dynapi.client.transport import TransportResponse
from dynapi.models import APIResponse, ErrorInfo
from dynapi.output import get_output

logger = logging.getLogger(__name__)

PARSE_FAILURE_MESSAGE = "Failed to parse response"
GENERIC_FAILURE_MESSAGE = "Request failed"


def extract_response_data(response: TransportResponse) -> Any:
    """Decode the JSON body of *response*.

    Returns:
        The decoded object, or ``None`` for an empty body.

    Raises:
        ValueError: If the body is not valid JSON.
    """
    if not response.content:
        return None
    return response.json()


def parse_response(response: TransportResponse) -> APIResponse:
    """Normalize *response* into an :class:`APIResponse`.

    * A JSON object that already has a ``success`` key is passed through.
    * Otherwise ``success`` follows the status: 2xx carries the body as
      ``data``; anything else carries ``error.code``/``error.message`` from
      the status line.
    * A body that is not JSON gives ``success=False`` with
      ``"Failed to parse response"``.

    An empty 2xx body gives ``success=True`` with ``data=None``.
    """
    try:
        body = extract_response_data(response)
    except ValueError:
        logger.debug("Response from status %s is not valid JSON", response.status)
        return APIResponse(
            success=False,
            error=ErrorInfo(code=response.status, message=PARSE_FAILURE_MESSAGE),
        )

    if isinstance(body, dict) and "success" in body:
        try:
            return APIResponse.model_validate(body)
        except ValidationError:
            logger.debug("Body has a success key but is not an API response; wrapping it")

    if response.ok:
        return APIResponse(success=True, data=body)
    return APIResponse(
        success=False,
        error=ErrorInfo(
            code=response.status,
            message=response.status_text or GENERIC_FAILURE_MESSAGE,
        ),
    )


def format_api_response(response: APIResponse) -> None:
    """Print *response* using the global output system.

    The outcome line goes to stderr; ``data`` (or the error details) is
    rendered to stdout.
    """
    output = get_output()
    if response.success:
        output.info("OK")
        if response.data is not None:
            output.format_response(response.data)
        return

    error = response.error or ErrorInfo()
    output.info(f"FAILED {error.code if error.code is not None else ''}".rstrip())
    output.format_response(error.model_dump(exclude_none=True))
