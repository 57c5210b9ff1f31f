"""Ordered interceptor collections for the request, response and error stages.

Interceptors are plain callables, sync or async:

* **request** -- ``fn(envelope) -> envelope``.  Each receives the previous
  interceptor's output, starting from the envelope merged with client
  defaults.  Returning ``None`` keeps the envelope unchanged.
* **response** -- ``fn(response, envelope) -> response``.  Runs after a
  successful transport call; ``None`` keeps the response unchanged.
* **error** -- ``fn(error, envelope)``.  Notified with the final
  :class:`~dynapi.exceptions.ClientError` before it is raised.  Its return
  value is ignored.

The pipeline takes a snapshot of each collection when a request starts, so
adding or removing interceptors mid-flight affects only later requests.
"""

from __future__ import annotations

import inspect
import uuid
from dataclasses import dataclass
from typing import Any, Callable

RequestInterceptor = Callable[..., Any]
ResponseInterceptor = Callable[..., Any]
ErrorInterceptor = Callable[..., Any]


@dataclass(frozen=True)
class InterceptorEntry:
    """An interceptor function with its registration id."""

    id: str
    fn: Callable[..., Any]


def generate_interceptor_id() -> str:
    """Return a new unique id for an interceptor registered without one."""
    return f"auto-{uuid.uuid4().hex}"


async def resolve(value: Any) -> Any:
    """Await *value* if it is awaitable, otherwise return it as-is."""
    if inspect.isawaitable(value):
        return await value
    return value


class _Stage:
    """One insertion-ordered collection of :class:`InterceptorEntry`."""

    def __init__(self) -> None:
        self._entries: list[InterceptorEntry] = []

    def add(self, interceptor_id: str, fn: Callable[..., Any]) -> str:
        self._entries.append(InterceptorEntry(interceptor_id, fn))
        return interceptor_id

    def remove(self, interceptor_id: str) -> bool:
        for index, entry in enumerate(self._entries):
            if entry.id == interceptor_id:
                del self._entries[index]
                return True
        return False

    def clear(self) -> None:
        self._entries.clear()

    def snapshot(self) -> tuple[InterceptorEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class InterceptorManager:
    """Registry of request, response and error interceptors for one client.

    Example::

        manager = InterceptorManager()
        token_id = manager.add_request_interceptor(add_token)
        manager.add_response_interceptor_with_id("audit", audit)
        manager.remove_request_interceptor(token_id)    # True
    """

    def __init__(self) -> None:
        self._request = _Stage()
        self._response = _Stage()
        self._error = _Stage()

    # ------------------------------------------------------------------ #
    # Request stage
    # ------------------------------------------------------------------ #

    def add_request_interceptor(self, fn: RequestInterceptor) -> str:
        """Register *fn* under a generated id and return the id."""
        return self._request.add(generate_interceptor_id(), fn)

    def add_request_interceptor_with_id(self, interceptor_id: str, fn: RequestInterceptor) -> str:
        return self._request.add(interceptor_id, fn)

    def remove_request_interceptor(self, interceptor_id: str) -> bool:
        """Remove the first interceptor registered as *interceptor_id*.

        Returns:
            ``True`` if one was removed.
        """
        return self._request.remove(interceptor_id)

    def clear_request_interceptors(self) -> None:
        self._request.clear()

    def request_interceptors(self) -> tuple[InterceptorEntry, ...]:
        return self._request.snapshot()

    # ------------------------------------------------------------------ #
    # Response stage
    # ------------------------------------------------------------------ #

    def add_response_interceptor(self, fn: ResponseInterceptor) -> str:
        return self._response.add(generate_interceptor_id(), fn)

    def add_response_interceptor_with_id(self, interceptor_id: str, fn: ResponseInterceptor) -> str:
        return self._response.add(interceptor_id, fn)

    def remove_response_interceptor(self, interceptor_id: str) -> bool:
        return self._response.remove(interceptor_id)

    def clear_response_interceptors(self) -> None:
        self._response.clear()

    def response_interceptors(self) -> tuple[InterceptorEntry, ...]:
        return self._response.snapshot()

    # ------------------------------------------------------------------ #
    # Error stage
    # ------------------------------------------------------------------ #

    def add_error_interceptor(self, fn: ErrorInterceptor) -> str:
        return self._error.add(generate_interceptor_id(), fn)

    def add_error_interceptor_with_id(self, interceptor_id: str, fn: ErrorInterceptor) -> str:
        return self._error.add(interceptor_id, fn)

    def remove_error_interceptor(self, interceptor_id: str) -> bool:
        return self._error.remove(interceptor_id)

    def clear_error_interceptors(self) -> None:
        self._error.clear()

    def error_interceptors(self) -> tuple[InterceptorEntry, ...]:
        return self._error.snapshot()

    # ------------------------------------------------------------------ #

    def clear_all_interceptors(self) -> None:
        """Empty all three stages."""
        self._request.clear()
        self._response.clear()
        self._error.clear()

    def get_stats(self) -> dict[str, int]:
        """Return the number of interceptors in each stage."""
        return {
            "request": len(self._request),
            "response": len(self._response),
            "error": len(self._error),
        }
