"""
Probe executor: tries every configured method against one resource.
"""

import time
from dataclasses import dataclass, field
from typing import Callable

from web_fuzzer.core.proxy import ProxyEntry, ProxyPool
from web_fuzzer.core.records import ResponseRecord
from web_fuzzer.errors import TransportError
from web_fuzzer.filters import FilterRule, evaluate
from web_fuzzer.utils.log import log
from web_fuzzer.utils.url import join_resource, substitute_token


@dataclass
class ProbeResult:
    """What a single :meth:`ProbeExecutor.probe` call did."""

    records: list[ResponseRecord] = field(default_factory=list)
    emitted: list[ResponseRecord] = field(default_factory=list)
    errors: int = 0
    directories: list[str] = field(default_factory=list)

    @property
    def requests(self) -> int:
        return len(self.records) + self.errors


class ProbeExecutor:
    """
    Issues one request per configured method for a ``(target, resource)``
    pair, reports accepted responses to the sink and discovered
    directories to the caller.

    Transport failures are swallowed: the attempt is skipped, nothing is
    emitted, and the next method is tried.
    """

    def __init__(
        self,
        client,
        methods,
        headers: dict[str, str] | None = None,
        payload: bytes = b"",
        timeout: float = 5,
        user_agent: str = "",
        delay: float = 0.0,
        rule: FilterRule | None = None,
        sink=None,
        fuzz_token: bool = False,
    ) -> None:
        self.client = client
        self.methods = tuple(methods)
        self.headers = dict(headers or {})
        self.payload = payload
        self.timeout = timeout
        self.user_agent = user_agent
        self.delay = delay
        self.rule = rule
        self.sink = sink
        self.fuzz_token = fuzz_token

    def build_url(self, target: str, resource: str) -> str:
        if self.fuzz_token:
            return substitute_token(target, resource)
        return join_resource(target, resource)

    def accepts(self, record: ResponseRecord) -> bool:
        return self.rule is None or evaluate(self.rule, record)

    def probe(
        self,
        target: str,
        resource: str,
        proxy: ProxyEntry | None = None,
        on_directory: Callable[[str], bool] | None = None,
        proxy_pool: ProxyPool | None = None,
    ) -> ProbeResult:
        """Try every method against ``target + resource``.

        With *proxy_pool* every attempt draws its own proxy from the pool;
        otherwise all attempts go through *proxy* (or direct when ``None``).

        *on_directory* is only given when recursion is enabled; it receives
        the effective URL of every GET that answered 200 with a URL ending
        in ``/``.
        """
        result = ProbeResult()
        url = self.build_url(target, resource)

        for method in self.methods:
            try:
                reply = self.client.perform(
                    method,
                    url,
                    headers=self.headers,
                    body=self.payload,
                    timeout=self.timeout,
                    user_agent=self.user_agent,
                    proxy=proxy_pool.select() if proxy_pool is not None else proxy,
                )
            except TransportError as exc:
                result.errors += 1
                log.debug("[SKIP] %s %s: %s", method, url, exc.cause or exc)
                self._pause()
                continue

            record = ResponseRecord.from_reply(reply, method)
            result.records.append(record)

            if (
                on_directory is not None
                and method == "GET"
                and record.status == 200
                and record.url.endswith("/")
            ):
                if on_directory(record.url):
                    result.directories.append(record.url)

            if self.accepts(record):
                if self.sink is not None:
                    self.sink.emit(record)
                result.emitted.append(record)

            self._pause()

        return result

    def _pause(self) -> None:
        if self.delay > 0:
            time.sleep(self.delay)
