"""
HTTP session creation and the HTTP client used by the fuzzer.

Provides:
* ``requests.Session`` objects with connection-level retries and keep-alive
* ``HttpClient``, which gives every worker thread its own session and maps
  ``requests`` replies and errors onto ``HttpReply`` / ``TransportError``
"""

import threading

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from web_fuzzer.config import (
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    MAX_RETRIES,
    POOL_SIZE,
)
from web_fuzzer.core.proxy import ProxyEntry
from web_fuzzer.core.records import HttpReply
from web_fuzzer.errors import TransportError


def build_session(verify_ssl: bool = True, max_retries: int = MAX_RETRIES) -> requests.Session:
    """Return a ``requests.Session`` with keep-alive and retry logic.

    Only connection failures are retried.  Every HTTP status the server
    sends back (including 5xx) is returned as-is, since the status *is*
    the result being observed.
    """
    session = requests.Session()
    retry = Retry(
        total=max_retries,
        connect=max_retries,
        read=0,
        status_forcelist=(),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(
        max_retries=retry,
        pool_connections=POOL_SIZE,
        pool_maxsize=POOL_SIZE,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = verify_ssl
    # Proxies come from the pool only, never from the environment.
    session.trust_env = False
    session.headers.update({
        "Accept": "*/*",
        "Connection": "keep-alive",
    })
    return session


def proxy_mapping(proxy: ProxyEntry | None) -> dict[str, str] | None:
    """``requests`` proxies mapping routing both schemes through *proxy*."""
    if proxy is None:
        return None
    return {"http": proxy.url, "https": proxy.url}


class HttpClient:
    """
    Thread-safe HTTP client capability.

    Each thread lazily gets its own ``requests.Session`` because sessions
    are not meant to be shared between threads.
    """

    def __init__(self, verify_ssl: bool = True, max_retries: int = MAX_RETRIES) -> None:
        self.verify_ssl = verify_ssl
        self.max_retries = max_retries
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = build_session(self.verify_ssl, self.max_retries)
            self._local.session = session
        return session

    def perform(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        body: bytes = b"",
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        proxy: ProxyEntry | None = None,
    ) -> HttpReply:
        """Send one request and return the final (post-redirect) reply.

        Raises :class:`TransportError` when no response is received.
        """
        request_headers = {"User-Agent": user_agent}
        if headers:
            request_headers.update(headers)
        try:
            resp = self.session.request(
                method,
                url,
                headers=request_headers,
                data=body or None,
                timeout=timeout,
                proxies=proxy_mapping(proxy),
                allow_redirects=True,
            )
        except requests.RequestException as exc:
            raise TransportError(url, exc) from exc
        return HttpReply(
            status=resp.status_code,
            reason=resp.reason or "",
            body=resp.content,
            effective_url=resp.url,
        )

    def close(self) -> None:
        """Close the calling thread's session, if it has one."""
        session = getattr(self._local, "session", None)
        if session is not None:
            session.close()
            self._local.session = None
