"""
Configuration constants and the validated run configuration.
"""

from dataclasses import dataclass, field

from web_fuzzer.errors import ConfigurationError
from web_fuzzer.utils.url import FUZZ_TOKEN

VERSION = "0.2.0"

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_CONCURRENCY = 10       # worker threads per generation
DEFAULT_TIMEOUT = 5            # seconds per request
DEFAULT_DELAY = 0.0            # seconds each worker waits between requests
DEFAULT_MAX_DEPTH = 0          # 0 = unlimited recursion
DEFAULT_USER_AGENT = f"web-fuzzer/{VERSION}"
DEFAULT_METHODS = (
    "GET", "POST", "PUT", "DELETE", "HEAD", "TRACE", "PATCH", "OPTIONS",
)

# Echo service used to learn the caller's public IP when verifying proxies.
DEFAULT_ECHO_URL = "https://api.ipify.org"

# ---------------------------------------------------------------------------
# HTTP tuning
# ---------------------------------------------------------------------------
MAX_RETRIES = 1                # connection-level retries only, never on status
POOL_SIZE = 4                  # keep-alive connections per worker session


def parse_methods(raw: str | list[str] | tuple[str, ...]) -> tuple[str, ...]:
    """Upper-case and de-duplicate HTTP methods, keeping their order.

    Accepts either a comma-separated string or a sequence of names.
    """
    if isinstance(raw, str):
        raw = raw.split(",")
    methods: list[str] = []
    for m in raw:
        m = m.strip().upper()
        if m and m not in methods:
            methods.append(m)
    return tuple(methods)


def parse_header(raw: str) -> tuple[str, str]:
    """Split a ``name=value`` header definition."""
    name, sep, value = raw.partition("=")
    name = name.strip()
    if not sep or not name:
        raise ConfigurationError(
            f"invalid header {raw!r}; expected the form name=value"
        )
    return name, value.strip()


@dataclass
class FuzzerConfig:
    """Everything one fuzzing run needs, validated by :meth:`validate`."""

    target: str
    wordlist: str
    concurrency: int = DEFAULT_CONCURRENCY
    timeout: float = DEFAULT_TIMEOUT
    methods: tuple[str, ...] = DEFAULT_METHODS
    user_agent: str = DEFAULT_USER_AGENT
    delay: float = DEFAULT_DELAY
    headers: dict[str, str] = field(default_factory=dict)
    payload: bytes = b""
    filter: str = ""
    recursive: bool = False
    fuzz_token: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH
    proxies: list[str] = field(default_factory=list)
    verify_proxies: bool = False
    echo_url: str = DEFAULT_ECHO_URL
    json_output: bool = False
    verify_ssl: bool = True
    progress: bool = False

    def validate(self) -> "FuzzerConfig":
        """Raise :class:`ConfigurationError` for unusable settings.

        Returns ``self`` so calls can be chained.
        """
        if not self.target or not self.target.strip():
            raise ConfigurationError("no target specified")
        if not self.wordlist:
            raise ConfigurationError("no wordlist specified")
        if self.concurrency <= 0:
            raise ConfigurationError(
                f"concurrency must be a positive integer, got {self.concurrency}"
            )
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")
        if self.delay < 0:
            raise ConfigurationError(f"delay cannot be negative, got {self.delay}")
        if self.max_depth < 0:
            raise ConfigurationError(
                f"max depth cannot be negative, got {self.max_depth}"
            )

        self.methods = parse_methods(self.methods)
        if not self.methods:
            raise ConfigurationError("at least one HTTP method is required")

        if self.recursive and self.fuzz_token:
            raise ConfigurationError(
                "recursive mode and parameter fuzzing (--fuzzme) are mutually exclusive"
            )
        if self.fuzz_token and FUZZ_TOKEN not in self.target:
            raise ConfigurationError(
                f"parameter fuzzing needs {FUZZ_TOKEN} somewhere in the target URL"
            )
        if self.verify_proxies and not self.proxies:
            raise ConfigurationError("--verify-proxies given but no proxies configured")
        return self
