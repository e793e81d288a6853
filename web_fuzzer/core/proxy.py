"""
Proxy pool with uniform random selection and anonymity verification.

Verification compares the IP reported by an echo service for a direct
request with the IP it reports through each proxy.  A proxy that leaks the
caller's address is removed; a proxy that fails to answer, or answers
without an IP address, is kept.
"""

import ipaddress
import json
import random
import threading
import urllib.parse
from dataclasses import dataclass

from web_fuzzer.errors import ConfigurationError, ProxyVerificationError, TransportError
from web_fuzzer.utils.log import log

_SCHEMES = frozenset({"http", "https", "socks5", "socks5h", "socks4"})


@dataclass(frozen=True)
class ProxyEntry:
    scheme: str
    host: str
    port: int

    @classmethod
    def parse(cls, uri: str) -> "ProxyEntry":
        """Parse ``[scheme://]host:port``; the scheme defaults to ``http``."""
        raw = uri.strip()
        if "://" not in raw:
            raw = "http://" + raw
        parsed = urllib.parse.urlsplit(raw)
        scheme = parsed.scheme.lower()
        if scheme not in _SCHEMES or not parsed.hostname:
            raise ConfigurationError(f"invalid proxy {uri!r}")
        try:
            port = parsed.port
        except ValueError as exc:
            raise ConfigurationError(f"invalid proxy port in {uri!r}") from exc
        if port is None:
            raise ConfigurationError(f"proxy {uri!r} has no port")
        return cls(scheme=scheme, host=parsed.hostname, port=port)

    @property
    def url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.scheme}://{host}:{self.port}"

    def __str__(self) -> str:
        return self.url


def extract_ip(body: bytes) -> str | None:
    """Pull the caller's IP out of an echo-service reply.

    Understands plain-text replies (``api.ipify.org``) and JSON objects
    with an ``ip`` or ``origin`` key (``?format=json``, httpbin ``/ip``).
    Returns ``None`` when the reply does not hold an IP address.
    """
    text = body.decode("utf-8", errors="replace").strip()
    if text.startswith("{"):
        try:
            data = json.loads(text)
        except ValueError:
            return None
        text = ""
        for key in ("ip", "origin"):
            if isinstance(data, dict) and data.get(key):
                # httpbin reports "client, proxy" chains as a comma list.
                text = str(data[key]).split(",")[0].strip()
                break
    try:
        return str(ipaddress.ip_address(text))
    except ValueError:
        return None


class ProxyPool:
    """Lock-guarded collection of proxies shared by all workers."""

    def __init__(self, entries=()) -> None:
        self._entries: list[ProxyEntry] = list(entries)
        self._lock = threading.Lock()

    @classmethod
    def from_uris(cls, uris) -> "ProxyPool":
        return cls(ProxyEntry.parse(u) for u in uris)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def entries(self) -> list[ProxyEntry]:
        with self._lock:
            return list(self._entries)

    def select(self) -> ProxyEntry | None:
        """Uniform random pick with replacement; ``None`` if empty."""
        with self._lock:
            if not self._entries:
                return None
            return random.choice(self._entries)

    def remove(self, entry: ProxyEntry) -> bool:
        with self._lock:
            try:
                self._entries.remove(entry)
            except ValueError:
                return False
            return True

    def verify(self, client, echo_url: str, timeout: float, user_agent: str) -> list[ProxyEntry]:
        """Drop every proxy that does not hide the caller's IP.

        Returns the removed entries.  Raises
        :class:`ProxyVerificationError` if the direct echo request fails or
        does not yield an IP, or if no proxy is left afterwards.
        """
        started_with = len(self)
        try:
            reply = client.perform("GET", echo_url, timeout=timeout, user_agent=user_agent)
        except TransportError as exc:
            raise ProxyVerificationError(
                f"cannot reach echo service {echo_url} directly: {exc.cause or exc}"
            ) from exc
        if not 200 <= reply.status < 300:
            raise ProxyVerificationError(
                f"echo service {echo_url} answered HTTP {reply.status}"
            )
        real_ip = extract_ip(reply.body)
        if real_ip is None:
            raise ProxyVerificationError(
                f"echo service {echo_url} did not answer with an IP address"
            )
        log.info("[PROXY] Real IP according to %s: %s", echo_url, real_ip)

        removed: list[ProxyEntry] = []
        for entry in self.entries:
            try:
                reply = client.perform(
                    "GET", echo_url, timeout=timeout, user_agent=user_agent, proxy=entry,
                )
            except TransportError as exc:
                log.warning("[PROXY] %s unreachable, keeping it: %s", entry, exc.cause or exc)
                continue
            if not 200 <= reply.status < 300:
                log.warning("[PROXY] %s answered HTTP %d, keeping it", entry, reply.status)
                continue
            seen_ip = extract_ip(reply.body)
            if seen_ip is None:
                log.warning("[PROXY] %s returned no IP address, keeping it", entry)
                continue
            if seen_ip == real_ip:
                self.remove(entry)
                removed.append(entry)
                log.warning("[PROXY] %s leaks the real IP – removed", entry)
            else:
                log.info("[PROXY] %s OK (seen as %s)", entry, seen_ip)

        if started_with and not len(self):
            raise ProxyVerificationError("no working proxies")
        log.info("[PROXY] %d of %d proxies kept", len(self), started_with)
        return removed
