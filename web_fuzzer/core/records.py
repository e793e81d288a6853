"""
Data passed between the HTTP client, the probe executor and the sink.
"""

from dataclasses import dataclass
from http import HTTPStatus


@dataclass(frozen=True)
class HttpReply:
    """Raw reply from the HTTP client capability."""

    status: int
    reason: str
    body: bytes
    effective_url: str


@dataclass(frozen=True)
class ResponseRecord:
    """
    Normalised result of one (method, URL) probe.

    ``length`` is ``None`` when the body is empty and the body's byte
    length otherwise, so "no body" and a zero length are never conflated.
    """

    status: int
    reason: str
    length: int | None
    url: str
    method: str
    content: str

    @classmethod
    def from_reply(cls, reply: HttpReply, method: str) -> "ResponseRecord":
        return cls(
            status=reply.status,
            reason=reply.reason or reason_phrase(reply.status),
            length=len(reply.body) or None,
            url=reply.effective_url,
            method=method,
            content=reply.body.decode("utf-8", errors="replace"),
        )

    def to_dict(self) -> dict:
        """Fields printed in JSON output (the body is never printed)."""
        return {
            "status": self.status,
            "length": self.length,
            "reason": self.reason,
            "url": self.url,
            "method": self.method,
        }


def reason_phrase(status: int) -> str:
    """Standard reason phrase for *status*, or ``"Unknown"``."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Unknown"
