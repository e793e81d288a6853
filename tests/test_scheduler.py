"""
Tests for the work queue, the frontier and the level scheduler:
replay and barrier properties, recursion and worker failures.
"""

import threading
import time
import unittest
from collections import Counter
from unittest.mock import patch

from fakes import FakeClient, ListSink, reply

from web_fuzzer.core.probe import ProbeExecutor
from web_fuzzer.core.proxy import ProxyPool
from web_fuzzer.core.scheduler import Frontier, LevelScheduler, WorkQueue
from web_fuzzer.errors import ConfigurationError, TransportError, WorkerError


def directory(url):
    return reply(200, b"<html>index</html>", url)


def make_scheduler(client, concurrency=4, methods=("GET",), sink=None, **kwargs):
    executor = ProbeExecutor(client, methods, timeout=1, user_agent="ua",
                             sink=sink if sink is not None else ListSink())
    return LevelScheduler(executor, concurrency, **kwargs)


class TestWorkQueue(unittest.TestCase):
    def test_fifo_then_none_after_close(self):
        q = WorkQueue.from_words(["a", "b"])
        self.assertTrue(q.closed)
        self.assertEqual([q.get(), q.get(), q.get()], ["a", "b", None])

    def test_put_after_close_rejected(self):
        q = WorkQueue()
        q.close()
        with self.assertRaises(RuntimeError):
            q.put("a")

    def test_blocked_consumer_released_by_close(self):
        q = WorkQueue()
        got = []
        t = threading.Thread(target=lambda: got.append(q.get()))
        t.start()
        time.sleep(0.05)
        self.assertTrue(t.is_alive())
        q.close()
        t.join(timeout=2)
        self.assertFalse(t.is_alive())
        self.assertEqual(got, [None])

    def test_blocked_consumer_receives_item(self):
        q = WorkQueue()
        got = []
        t = threading.Thread(target=lambda: got.append(q.get()))
        t.start()
        q.put("x")
        t.join(timeout=2)
        self.assertEqual(got, ["x"])

    def test_source_list_not_consumed(self):
        words = ["a", "b"]
        q = WorkQueue.from_words(words)
        q.get()
        self.assertEqual(words, ["a", "b"])
        self.assertEqual(len(q), 1)


class TestFrontier(unittest.TestCase):
    def test_fifo_order(self):
        f = Frontier()
        f.push("http://h/a/", 1)
        f.push("http://h/b/", 1)
        self.assertEqual(f.pop(), ("http://h/a/", 1))
        self.assertEqual(f.pop(), ("http://h/b/", 1))
        self.assertIsNone(f.pop())

    def test_duplicate_ignored_even_after_pop(self):
        f = Frontier()
        self.assertTrue(f.push("http://h/a/"))
        f.pop()
        self.assertFalse(f.push("http://h/a/"))
        self.assertEqual(len(f), 0)

    def test_concurrent_pushes(self):
        f = Frontier()
        threads = [
            threading.Thread(target=lambda n=n: [f.push(f"http://h/{n}/{i}/") for i in range(100)])
            for n in range(8)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(len(f), 800)


class TestLevelScheduler(unittest.TestCase):
    def test_non_positive_concurrency_rejected(self):
        for n in (0, -3):
            with self.subTest(n=n):
                with self.assertRaises(ConfigurationError):
                    make_scheduler(FakeClient(), concurrency=n)

    def test_single_generation_without_recursion(self):
        client = FakeClient({"http://h/b/": directory("http://h/b/")})
        stats = make_scheduler(client).run("http://h/", ["a", "b/"])
        self.assertEqual(stats.generations, 1)
        self.assertEqual(sorted(client.urls), ["http://h/a", "http://h/b/"])

    def test_end_to_end_recursion(self):
        client = FakeClient({"http://h/b/": directory("http://h/b/")})
        sched = make_scheduler(client, recursive=True)
        stats = sched.run("http://h/", ["a", "b/"])
        self.assertEqual(stats.generations, 2)
        self.assertEqual(stats.directories, 1)
        self.assertEqual(
            sorted(client.urls[2:]), ["http://h/b/a", "http://h/b/b/"],
        )
        self.assertEqual(sorted(client.urls[:2]), ["http://h/a", "http://h/b/"])

    def test_replay_invariant(self):
        words = [f"w{i}" for i in range(40)] + ["d1/", "d2/"]
        routes = {
            "http://h/d1/": directory("http://h/d1/"),
            "http://h/d2/": directory("http://h/d2/"),
            "http://h/d1/d2/": directory("http://h/d1/d2/"),
        }
        client = FakeClient(routes)
        stats = make_scheduler(client, concurrency=8, recursive=True).run("http://h/", words)

        targets = ["http://h/", "http://h/d1/", "http://h/d2/", "http://h/d1/d2/"]
        self.assertEqual(stats.generations, len(targets))
        counts = Counter(client.urls)
        for target in targets:
            for word in words:
                with self.subTest(target=target, word=word):
                    self.assertEqual(counts[target + word], 1)
        self.assertEqual(len(client.calls), len(targets) * len(words))

    def test_barrier_between_generations(self):
        def slow(method, url, proxy):
            time.sleep(0.01)
            if url == "http://h/b/":
                return directory(url)
            return reply(404, b"", url)

        words = [f"x{i}" for i in range(30)] + ["b/"]
        client = FakeClient({f"http://h/{w}": slow for w in words})
        make_scheduler(client, concurrency=6, recursive=True).run("http://h/", words)

        urls = client.urls
        second = [i for i, u in enumerate(urls) if u.startswith("http://h/b/") and u != "http://h/b/"]
        first = [i for i, u in enumerate(urls) if i not in second]
        self.assertEqual(len(second), len(words))
        self.assertLess(max(first), min(second))

    def test_generations_in_bfs_order(self):
        routes = {
            "http://h/a/": directory("http://h/a/"),
            "http://h/b/": directory("http://h/b/"),
            "http://h/a/a/": directory("http://h/a/a/"),
        }
        client = FakeClient(routes)
        order = []
        sched = make_scheduler(client, concurrency=1, recursive=True)
        real_run = sched._run_generation

        def spy(target, depth, words):
            order.append((target, depth))
            return real_run(target, depth, words)

        sched._run_generation = spy
        sched.run("http://h/", ["a/", "b/"])
        self.assertEqual(order, [
            ("http://h/", 0),
            ("http://h/a/", 1),
            ("http://h/b/", 1),
            ("http://h/a/a/", 2),
        ])

    def test_max_depth(self):
        routes = {
            "http://h/a/": directory("http://h/a/"),
            "http://h/a/a/": directory("http://h/a/a/"),
        }
        client = FakeClient(routes)
        stats = make_scheduler(client, recursive=True, max_depth=1).run("http://h/", ["a/"])
        self.assertEqual(stats.generations, 2)
        self.assertNotIn("http://h/a/a/a/", client.urls)

    def test_redirect_to_known_directory_not_revisited(self):
        # "b" redirects to "b/", and "b/" itself is also in the list.
        client = FakeClient({
            "http://h/b": directory("http://h/b/"),
            "http://h/b/": directory("http://h/b/"),
        })
        stats = make_scheduler(client, recursive=True).run("http://h/", ["b", "b/"])
        self.assertEqual(stats.generations, 2)

    def test_proxy_drawn_for_every_request(self):
        client = FakeClient()
        pool = ProxyPool.from_uris(["http://p:8080"])
        with patch.object(pool, "select", wraps=pool.select) as select:
            make_scheduler(client, methods=("GET", "POST"), proxy_pool=pool).run(
                "http://h/", ["a", "b"],
            )
        self.assertEqual(select.call_count, 4)
        self.assertTrue(all(c.proxy is not None and c.proxy.host == "p" for c in client.calls))

    def test_worker_sessions_closed_after_each_generation(self):
        client = FakeClient({"http://h/b/": directory("http://h/b/")})
        make_scheduler(client, concurrency=3, recursive=True).run("http://h/", ["a", "b/"])
        self.assertEqual(len(client.closed_by), 6)
        self.assertTrue(all(name.startswith("fuzz-worker-") for name in client.closed_by))

    def test_transport_errors_counted_not_fatal(self):
        client = FakeClient({"http://h/a": TransportError("http://h/a")})
        sink = ListSink()
        stats = make_scheduler(client, sink=sink).run("http://h/", ["a", "b"])
        self.assertEqual(stats.errors, 1)
        self.assertEqual(stats.requests, 2)
        self.assertEqual([r.url for r in sink.records], ["http://h/b"])

    def test_worker_crash_surfaces_after_barrier(self):
        class BrokenSink:
            def emit(self, record):
                raise ValueError("disk full")

        client = FakeClient()
        sched = make_scheduler(client, concurrency=2, sink=BrokenSink())
        with self.assertRaises(WorkerError):
            sched.run("http://h/", ["a", "b", "c"])


if __name__ == "__main__":
    unittest.main()
