"""
web_fuzzer
==========
Multi-threaded web content discovery.  Probes a target with every entry of
a word list and every configured HTTP method, optionally follows discovered
directories breadth-first, rotates requests over a proxy pool and reports
only the responses that match a filter expression.

Package structure
-----------------
web_fuzzer/
├── __init__.py       – package init and public API
├── config.py         – defaults and FuzzerConfig
├── errors.py         – exception hierarchy
├── session.py        – requests.Session factory and HttpClient
├── output.py         – ConsoleSink (text / JSON lines)
├── wordlist.py       – word-list loading
├── fuzzer.py         – Fuzzer facade wiring everything together
├── cli.py            – argparse CLI (``python -m web_fuzzer``)
├── core/             – level scheduler, probe executor, proxy pool
├── filters/          – filter language: lexer, parser, evaluator
└── utils/            – URL building and logging

Quick start
-----------
    from web_fuzzer import Fuzzer, FuzzerConfig

    config = FuzzerConfig(
        target="http://example.com",
        wordlist="wordlist.txt",
        methods=("GET",),
        filter="status == 200; status == 301",
        recursive=True,
    )
    Fuzzer(config).run()
"""

from .config  import FuzzerConfig, VERSION
from .errors  import (
    ConfigurationError,
    FilterSyntaxError,
    FuzzerError,
    ProxyVerificationError,
    TransportError,
    WorkerError,
)
from .filters import parse, evaluate
from .fuzzer  import Fuzzer

__version__ = VERSION

__all__ = [
    "Fuzzer",
    "FuzzerConfig",
    "parse",
    "evaluate",
    "FuzzerError",
    "ConfigurationError",
    "FilterSyntaxError",
    "ProxyVerificationError",
    "TransportError",
    "WorkerError",
]
