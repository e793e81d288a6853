"""
In-memory stand-ins for the HTTP client and the result sink.
"""

import threading
from dataclasses import dataclass

from web_fuzzer.core.records import HttpReply


@dataclass
class Call:
    method: str
    url: str
    headers: dict | None
    body: bytes
    user_agent: str
    proxy: object


def reply(status: int = 200, body: bytes = b"", url: str = "", reason: str = "") -> HttpReply:
    return HttpReply(status=status, reason=reason, body=body, effective_url=url)


class FakeClient:
    """
    Answers from a routing table keyed by ``(method, url)`` or ``url``.

    A route value may be an ``HttpReply``, an exception instance (raised),
    or a callable ``(method, url, proxy) -> HttpReply``.  Unknown URLs get
    an empty 404 whose effective URL is the requested one.
    """

    def __init__(self, routes=None) -> None:
        self.routes = dict(routes or {})
        self.calls: list[Call] = []
        self.closed_by: list[str] = []
        self._lock = threading.Lock()

    def perform(self, method, url, headers=None, body=b"", timeout=5,
                user_agent="", proxy=None):
        with self._lock:
            self.calls.append(Call(method, url, headers, body, user_agent, proxy))
        route = self.routes.get((method, url), self.routes.get(url))
        if route is None:
            return reply(404, b"", url, "Not Found")
        if isinstance(route, BaseException):
            raise route
        if callable(route):
            return route(method, url, proxy)
        return route

    def close(self) -> None:
        with self._lock:
            self.closed_by.append(threading.current_thread().name)

    @property
    def urls(self) -> list[str]:
        with self._lock:
            return [c.url for c in self.calls]


class ListSink:
    def __init__(self) -> None:
        self.records = []
        self._lock = threading.Lock()

    def emit(self, record) -> None:
        with self._lock:
            self.records.append(record)
