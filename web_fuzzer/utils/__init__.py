"""Utility helpers for URL building and logging."""

from web_fuzzer.utils.url import (
    FUZZ_TOKEN,
    collapse_separators,
    join_resource,
    normalise_target,
    substitute_token,
)
from web_fuzzer.utils.log import setup_logging, log

__all__ = [
    "FUZZ_TOKEN",
    "collapse_separators",
    "join_resource",
    "normalise_target",
    "substitute_token",
    "setup_logging",
    "log",
]
