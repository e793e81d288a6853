"""
Exception hierarchy for the fuzzer.

Configuration and proxy errors are fatal and surface before (or instead of)
any probing.  ``TransportError`` is raised by the HTTP client for a single
request and is always recovered by the probe executor.
"""


class FuzzerError(Exception):
    """Base class for every error raised by web_fuzzer."""


class ConfigurationError(FuzzerError):
    """Invalid or inconsistent run configuration."""


class FilterSyntaxError(ConfigurationError):
    """A filter expression could not be parsed."""

    def __init__(self, message: str, column: int | None = None) -> None:
        self.column = column
        if column is not None:
            message = f"{message} (at column {column})"
        super().__init__(message)


class ProxyVerificationError(FuzzerError):
    """The proxy pool could not be verified or no proxy survived."""


class TransportError(FuzzerError):
    """A single HTTP request failed before a response was received."""

    def __init__(self, url: str, cause: BaseException | None = None) -> None:
        self.url = url
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"request to {url} failed{detail}")


class WorkerError(FuzzerError):
    """A worker thread died from an unexpected exception."""
