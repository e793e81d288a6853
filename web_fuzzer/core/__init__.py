"""Core engine – level scheduler, probe executor and proxy pool."""

from web_fuzzer.core.probe import ProbeExecutor, ProbeResult
from web_fuzzer.core.proxy import ProxyEntry, ProxyPool
from web_fuzzer.core.records import HttpReply, ResponseRecord
from web_fuzzer.core.scheduler import Frontier, LevelScheduler, RunStats, WorkQueue

__all__ = [
    "Frontier",
    "HttpReply",
    "LevelScheduler",
    "ProbeExecutor",
    "ProbeResult",
    "ProxyEntry",
    "ProxyPool",
    "ResponseRecord",
    "RunStats",
    "WorkQueue",
]
