"""
Level-synchronised BFS over discovered directories.

Every target popped from the frontier starts a *generation*: a fresh work
queue is filled from the canonical word list and closed, ``concurrency``
worker threads drain it, and the scheduler joins all of them before the
next target is popped.  Directories found while a generation runs are
pushed to the frontier and probed with the whole word list later on, so a
flat word list powers arbitrarily deep discovery.

Only the frontier and the proxy pool are shared between workers; every
counter is kept per worker and summed after the join.
"""

import sys
import threading
from collections import deque
from dataclasses import dataclass

from tqdm import tqdm

from web_fuzzer.core.probe import ProbeExecutor, ProbeResult
from web_fuzzer.core.proxy import ProxyPool
from web_fuzzer.errors import ConfigurationError, WorkerError
from web_fuzzer.utils.log import log


class WorkQueue:
    """
    Closable FIFO of resources for one generation.

    ``get()`` blocks until an item is available and returns ``None`` once
    the queue has been closed and fully drained.
    """

    def __init__(self) -> None:
        self._items: deque[str] = deque()
        self._closed = False
        self._cond = threading.Condition()

    @classmethod
    def from_words(cls, words) -> "WorkQueue":
        """Build a closed queue holding a copy of *words*."""
        queue = cls()
        for word in words:
            queue.put(word)
        queue.close()
        return queue

    def put(self, item: str) -> None:
        with self._cond:
            if self._closed:
                raise RuntimeError("put() on a closed WorkQueue")
            self._items.append(item)
            self._cond.notify()

    def close(self) -> None:
        """Signal that no more items will be added."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def get(self) -> str | None:
        with self._cond:
            while not self._items and not self._closed:
                self._cond.wait()
            if self._items:
                return self._items.popleft()
            return None

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)


class Frontier:
    """
    FIFO of ``(target, depth)`` pairs awaiting their generation.

    Remembers every target ever pushed so a directory reached twice is
    only probed once.
    """

    def __init__(self) -> None:
        self._pending: deque[tuple[str, int]] = deque()
        self._seen: set[str] = set()
        self._lock = threading.Lock()

    def push(self, target: str, depth: int = 0) -> bool:
        """Queue *target*; returns False if it was already seen."""
        with self._lock:
            if target in self._seen:
                return False
            self._seen.add(target)
            self._pending.append((target, depth))
            return True

    def pop(self) -> tuple[str, int] | None:
        with self._lock:
            if not self._pending:
                return None
            return self._pending.popleft()

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)


@dataclass
class WorkerStats:
    requests: int = 0
    errors: int = 0
    emitted: int = 0
    directories: int = 0
    failure: BaseException | None = None

    def add(self, result: ProbeResult) -> None:
        self.requests += result.requests
        self.errors += result.errors
        self.emitted += len(result.emitted)
        self.directories += len(result.directories)

    def merge(self, other: "WorkerStats") -> None:
        self.requests += other.requests
        self.errors += other.errors
        self.emitted += other.emitted
        self.directories += other.directories
        if self.failure is None:
            self.failure = other.failure


@dataclass
class RunStats:
    generations: int = 0
    requests: int = 0
    errors: int = 0
    emitted: int = 0
    directories: int = 0

    def add(self, stats: WorkerStats) -> None:
        self.requests += stats.requests
        self.errors += stats.errors
        self.emitted += stats.emitted
        self.directories += stats.directories


class LevelScheduler:
    """Runs one generation per frontier target, strictly one at a time."""

    def __init__(
        self,
        executor: ProbeExecutor,
        concurrency: int,
        recursive: bool = False,
        max_depth: int = 0,
        proxy_pool: ProxyPool | None = None,
        progress: bool = False,
    ) -> None:
        if concurrency <= 0:
            raise ConfigurationError(
                f"concurrency must be a positive integer, got {concurrency}"
            )
        self.executor = executor
        self.concurrency = concurrency
        self.recursive = recursive
        self.max_depth = max_depth
        self.proxy_pool = proxy_pool
        self.progress = progress
        self.frontier = Frontier()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self, initial_target: str, words) -> RunStats:
        """Probe *initial_target* and, when recursive, everything found
        below it.  Returns once the frontier is empty."""
        words = tuple(words)
        stats = RunStats()
        self.frontier = Frontier()
        self.frontier.push(initial_target, 0)

        while True:
            item = self.frontier.pop()
            if item is None:
                break
            target, depth = item
            stats.generations += 1
            log.info("[GEN] #%d %s (depth %d, %d words, %d workers)",
                     stats.generations, target, depth, len(words), self.concurrency)
            gen = self._run_generation(target, depth, words)
            stats.add(gen)
            log.info("[GEN] #%d done: requests=%d emitted=%d skipped=%d new_dirs=%d queued=%d",
                     stats.generations, gen.requests, gen.emitted, gen.errors,
                     gen.directories, len(self.frontier))

        log.info(
            "[DONE] generations=%d  requests=%d  emitted=%d  skipped=%d  dirs=%d",
            stats.generations, stats.requests, stats.emitted,
            stats.errors, stats.directories,
        )
        return stats

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _run_generation(self, target: str, depth: int, words: tuple[str, ...]) -> WorkerStats:
        queue = WorkQueue.from_words(words)
        on_directory = self._directory_callback(depth) if self.recursive else None
        bar = None
        if self.progress:
            bar = tqdm(total=len(words), desc=f"depth {depth}", unit="word",
                       leave=False, dynamic_ncols=True, file=sys.stderr)

        per_worker = [WorkerStats() for _ in range(self.concurrency)]
        threads = [
            threading.Thread(
                target=self._worker,
                args=(target, queue, on_directory, per_worker[n], bar),
                name=f"fuzz-worker-{n}",
                daemon=True,
            )
            for n in range(self.concurrency)
        ]
        for thread in threads:
            thread.start()
        # Barrier: the next generation only starts once every worker exited.
        for thread in threads:
            thread.join()
        if bar is not None:
            bar.close()

        total = WorkerStats()
        for worker_stats in per_worker:
            total.merge(worker_stats)
        if total.failure is not None:
            raise WorkerError(
                f"a worker failed while probing {target}: {total.failure!r}"
            ) from total.failure
        return total

    def _directory_callback(self, depth: int):
        def push(url: str) -> bool:
            if self.max_depth and depth + 1 > self.max_depth:
                log.debug("[DIR] %s beyond max depth %d, not followed", url, self.max_depth)
                return False
            pushed = self.frontier.push(url, depth + 1)
            if pushed:
                log.info("[DIR] Found directory %s", url)
            return pushed
        return push

    def _worker(self, target, queue: WorkQueue, on_directory, stats: WorkerStats, bar) -> None:
        try:
            while True:
                resource = queue.get()
                if resource is None:
                    break
                stats.add(self.executor.probe(
                    target, resource, on_directory=on_directory,
                    proxy_pool=self.proxy_pool,
                ))
                if bar is not None:
                    bar.update(1)
        except Exception as exc:
            log.exception("[ERR] %s died", threading.current_thread().name)
            stats.failure = exc
        finally:
            # Drop this thread's HTTP session along with the thread.
            self.executor.client.close()
