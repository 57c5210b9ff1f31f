"""Request execution pipeline shared by every client.

:meth:`RequestPipeline.execute` runs one request end to end:

1. merge the envelope over the client config;
2. run the request interceptors, re-filling unset fields after each;
3. build the URL, headers and body once;
4. attempt loop -- one transport call per attempt, guarded by the
   per-attempt timeout or raced against the caller's cancellation event;
   retryable failures back off and try again;
5. normalize the response and run the response interceptors.

Only transport failures raise, as :class:`~dynapi.exceptions.ClientError`.
Error interceptors are notified once, with the final error.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from dynapi.client.interceptors import InterceptorManager, resolve
from dynapi.client.paths import build_url
from dynapi.client.request import (
    RequestEnvelope,
    build_headers,
    fill_missing,
    merge_config,
)
from dynapi.client.response import parse_response
from dynapi.client.retry import backoff_delay, classify_error, should_retry
from dynapi.client.serializer import SerializedBody, serialize
from dynapi.client.transport import Transport, TransportRequest, TransportResponse
from dynapi.exceptions import AbortError, ClientError, ErrorType
from dynapi.models import APIResponse, ClientConfig

logger = logging.getLogger(__name__)


class RequestPipeline:
    """Executes request envelopes for one client.

    Args:
        config: Client defaults merged into every envelope.
        transport: Sends the built requests.
        interceptors: Interceptor registry; snapshotted per request.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Transport,
        interceptors: InterceptorManager,
    ) -> None:
        self._config = config
        self._transport = transport
        self._interceptors = interceptors

    async def execute(self, envelope: RequestEnvelope) -> APIResponse:
        """Run *envelope* through interceptors, retry and normalization.

        Returns:
            The normalized response.  Non-2xx statuses are returned with
            ``success=False``.

        Raises:
            ClientError: When the final attempt fails or the failure is not
                retryable.
            InvalidUsageError: If the endpoint path is empty.
        """
        request_chain = self._interceptors.request_interceptors()
        response_chain = self._interceptors.response_interceptors()
        error_chain = self._interceptors.error_interceptors()

        request = merge_config(envelope, self._config)
        for entry in request_chain:
            result = await resolve(entry.fn(request))
            if result is not None:
                request = fill_missing(result, request)

        url = build_url(
            self._config.base_url,
            request.url,
            request.params,
            self._config.use_kebab_case,
        )
        headers = build_headers(request.headers, request.data)
        body = serialize(request.data)

        attempts = (request.retries or 0) + 1
        failures = 0
        while True:
            try:
                raw = await self._attempt(request, url, headers, body)
            except Exception as exc:
                error = classify_error(exc)
                failures += 1
                if failures >= attempts or not should_retry(error):
                    await self._notify_error(error_chain, error, request)
                    if error is exc:
                        raise
                    raise error from exc
                delay = backoff_delay(
                    failures - 1,
                    request.retry_delay or 0.0,
                    self._config.max_retry_delay,
                )
                logger.debug(
                    "%s error on %s %s: %s, retrying in %.2fs (attempt %d/%d)",
                    error.type.value, request.method, url, error.message,
                    delay, failures, attempts - 1,
                )
                await asyncio.sleep(delay)
                continue
            return await self._respond(raw, request, response_chain)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _attempt(
        self,
        request: RequestEnvelope,
        url: str,
        headers: dict[str, str],
        body: SerializedBody,
    ) -> TransportResponse:
        """Make one transport call under the request's cancellation policy."""
        signal = request.signal
        transport_request = TransportRequest(
            method=request.method or "GET",
            url=url,
            headers=dict(headers),
            content=body.content,
            data=dict(body.data),
            files=list(body.files),
            timeout=None if signal is not None else request.timeout,
        )

        if signal is None:
            try:
                return await asyncio.wait_for(
                    self._transport.send(transport_request), request.timeout
                )
            except asyncio.TimeoutError as exc:
                raise ClientError(
                    f"Request timed out after {request.timeout}s",
                    ErrorType.TIMEOUT,
                    exc,
                ) from exc

        if signal.is_set():
            raise AbortError()
        send = asyncio.ensure_future(self._transport.send(transport_request))
        aborted = asyncio.ensure_future(signal.wait())
        try:
            done, _ = await asyncio.wait(
                {send, aborted}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (send, aborted):
                if not task.done():
                    task.cancel()
        if send in done:
            return send.result()
        raise AbortError()

    async def _respond(
        self,
        raw: TransportResponse,
        request: RequestEnvelope,
        chain: tuple[Any, ...],
    ) -> APIResponse:
        """Normalize *raw* and run the response interceptor chain."""
        response = parse_response(raw)
        for entry in chain:
            result = await resolve(entry.fn(response, request))
            if result is not None:
                response = result
        return response

    async def _notify_error(
        self,
        chain: tuple[Any, ...],
        error: ClientError,
        request: RequestEnvelope,
    ) -> None:
        for entry in chain:
            try:
                await resolve(entry.fn(error, request))
            except Exception:
                logger.warning("Error interceptor %s failed", entry.id, exc_info=True)
