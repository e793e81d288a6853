"""
Console result sink.

Workers call :meth:`ConsoleSink.emit` concurrently; each record is written
as one whole line under a lock.  Lines go through ``tqdm.write`` so they
never tear a running progress bar.
"""

import json
import sys
import threading

from tqdm import tqdm

from web_fuzzer.core.records import ResponseRecord


def format_text(record: ResponseRecord) -> str:
    length = "null" if record.length is None else record.length
    return (
        f"[{record.status}] URL: {record.url} | Method: {record.method} | "
        f"Reason: {record.reason} | Length: {length}"
    )


def format_json(record: ResponseRecord) -> str:
    return json.dumps(record.to_dict())


class ConsoleSink:

    def __init__(self, json_output: bool = False, stream=None) -> None:
        self.json_output = json_output
        self.stream = stream
        self.count = 0
        self._lock = threading.Lock()

    def emit(self, record: ResponseRecord) -> None:
        line = format_json(record) if self.json_output else format_text(record)
        with self._lock:
            tqdm.write(line, file=self.stream or sys.stdout)
            self.count += 1
