"""
Target normalisation and request-URL building.
"""

import re

FUZZ_TOKEN = "%FUZZME%"

# A run of two or more slashes that is not part of "scheme://".
_DUP_SEP_RE = re.compile(r"([^:])//+")


def collapse_separators(url: str) -> str:
    """Collapse runs of ``/`` into one, leaving ``scheme://`` untouched."""
    return _DUP_SEP_RE.sub(r"\1/", url)


def normalise_target(raw: str, fuzz_token: bool = False) -> str:
    """
    Turn a user-supplied target into the base URL of the first generation.

    A missing scheme becomes ``http://`` and an upper-case ``HTTP(S)``
    scheme is lower-cased.  Outside parameter-fuzzing mode the target
    always ends with ``/`` so that word-list entries are appended as path
    segments.
    """
    target = raw.strip()
    scheme, sep, rest = target.partition("://")
    if sep and scheme.lower() in ("http", "https"):
        target = f"{scheme.lower()}://{rest}"
    else:
        target = "http://" + target
    if fuzz_token:
        return target
    if not target.endswith("/"):
        target += "/"
    return collapse_separators(target)


def join_resource(target: str, resource: str) -> str:
    """
    Append *resource* to *target* as a path segment.

    >>> join_resource("http://example.com", "/admin")
    'http://example.com/admin'
    """
    return collapse_separators(f"{target}/{resource}")


def substitute_token(target: str, resource: str) -> str:
    """Replace every ``%FUZZME%`` in *target* with *resource*."""
    return target.replace(FUZZ_TOKEN, resource)
