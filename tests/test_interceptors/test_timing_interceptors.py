"""Tests for the timing and performance interceptors using a fake clock."""

from __future__ import annotations

import logging

import httpx
import pytest

from dynapi.client.api_client import APIClient
from dynapi.client.request import RequestEnvelope
from dynapi.exceptions import ClientError
from dynapi.interceptors.timing import (
    REQUEST_ID_HEADER,
    performance_interceptor,
    tag_request,
    timing_interceptor,
)
from dynapi.models import APIResponse

LOGGER = "dynapi.interceptors.timing"


class _Clock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> _Clock:
    return _Clock()


class TestTagRequest:
    def test_adds_id(self) -> None:
        request_id, tagged = tag_request(RequestEnvelope(method="GET", url="/users"))
        assert request_id.startswith("GET_/users_")
        assert tagged.headers[REQUEST_ID_HEADER] == request_id

    def test_reuses_existing_id(self) -> None:
        envelope = RequestEnvelope(method="GET", url="/users", headers={REQUEST_ID_HEADER: "abc"})
        request_id, tagged = tag_request(envelope)
        assert request_id == "abc"
        assert tagged is envelope


class TestTimingInterceptor:
    def test_tags_request_with_id(self, clock) -> None:
        start, _, _ = timing_interceptor(clock=clock)
        tagged = start(RequestEnvelope(method="GET", url="/users", headers={"A": "1"}))
        assert tagged.headers["A"] == "1"
        assert tagged.headers[REQUEST_ID_HEADER].startswith("GET_/users_")

    def test_logs_duration(self, clock, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger=LOGGER)
        start, finish, _ = timing_interceptor(clock=clock)
        tagged = start(RequestEnvelope(method="GET", url="/users"))
        clock.now += 0.25
        response = APIResponse(success=True)

        assert finish(response, tagged) is response
        record = caplog.records[-1]
        assert record.levelno == logging.INFO
        assert "0.250s" in record.getMessage()

    def test_slow_requests_warn(self, clock, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger=LOGGER)
        start, finish, _ = timing_interceptor(clock=clock, slow_request_threshold=0.1)
        tagged = start(RequestEnvelope(method="GET", url="/users"))
        clock.now += 0.2
        finish(APIResponse(success=True), tagged)
        assert caplog.records[-1].levelno == logging.WARNING
        assert "Slow request" in caplog.records[-1].getMessage()

    def test_unmatched_response_is_ignored(self, clock, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger=LOGGER)
        _, finish, _ = timing_interceptor(clock=clock)
        finish(APIResponse(success=True), RequestEnvelope(url="/users"))
        assert caplog.records == []

    def test_log_timing_off(self, clock, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger=LOGGER)
        start, finish, _ = timing_interceptor(log_timing=False, clock=clock)
        finish(APIResponse(success=True), start(RequestEnvelope(method="GET", url="/users")))
        assert caplog.records == []

    def test_error_discards_start_time(self, clock, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger=LOGGER)
        start, finish, discard = timing_interceptor(clock=clock)
        tagged = start(RequestEnvelope(method="GET", url="/users"))

        discard(ClientError("refused"), tagged)
        finish(APIResponse(success=True), tagged)

        assert caplog.records == []

    @pytest.mark.asyncio
    async def test_header_reaches_server(self, make_client, recording_handler) -> None:
        handler = recording_handler()
        client = make_client(handler, client_cls=APIClient)
        start, finish, discard = timing_interceptor()
        client.interceptors.add_request_interceptor(start)
        client.interceptors.add_response_interceptor(finish)
        client.interceptors.add_error_interceptor(discard)

        await client.get("/users")

        assert handler.last.headers[REQUEST_ID_HEADER].startswith("GET_/users_")


class TestPerformanceInterceptor:
    @pytest.mark.parametrize(
        ("elapsed", "grade"),
        [(0.1, "fast"), (0.7, "medium"), (1.5, "slow")],
    )
    def test_grades(self, clock, caplog, elapsed: float, grade: str) -> None:
        caplog.set_level(logging.INFO, logger=LOGGER)
        start, finish, _ = performance_interceptor(clock=clock)
        envelope = start(RequestEnvelope(method="GET", url="/users"))
        clock.now += elapsed
        finish(APIResponse(success=True), envelope)
        assert f"({grade})" in caplog.records[-1].getMessage()

    def test_matches_by_request_id(self, clock, caplog) -> None:
        caplog.set_level(logging.INFO, logger=LOGGER)
        start, finish, _ = performance_interceptor(clock=clock)
        first = start(RequestEnvelope(method="GET", url="/users"))
        clock.now += 1.0
        second = start(RequestEnvelope(method="GET", url="/users"))
        clock.now += 0.2

        finish(APIResponse(success=True), second)
        finish(APIResponse(success=True), first)

        messages = [record.getMessage() for record in caplog.records]
        assert "200.00ms (fast)" in messages[0]
        assert "1200.00ms (slow)" in messages[1]

    def test_error_discards_start_time(self, clock, caplog) -> None:
        caplog.set_level(logging.INFO, logger=LOGGER)
        start, finish, discard = performance_interceptor(clock=clock)
        tagged = start(RequestEnvelope(method="GET", url="/users"))

        discard(ClientError("refused"), tagged)
        finish(APIResponse(success=True), tagged)

        assert caplog.records == []

    @pytest.mark.asyncio
    async def test_failed_request_does_not_skew_next(
        self, make_client, recording_handler, clock, caplog
    ) -> None:
        caplog.set_level(logging.INFO, logger=LOGGER)
        inner = recording_handler([httpx.ConnectError("refused")])

        def _handler(request: httpx.Request) -> httpx.Response:
            clock.now += 0.1
            return inner(request)

        client = make_client(_handler, client_cls=APIClient, retries=0)
        start, finish, discard = performance_interceptor(clock=clock)
        client.interceptors.add_request_interceptor(start)
        client.interceptors.add_response_interceptor(finish)
        client.interceptors.add_error_interceptor(discard)

        with pytest.raises(ClientError):
            await client.get("/users")
        clock.now += 5.0
        await client.get("/users")

        messages = [
            record.getMessage() for record in caplog.records if record.name == LOGGER
        ]
        assert len(messages) == 1
        assert "100.00ms (fast)" in messages[0]
