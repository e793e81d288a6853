"""
Fuzzer facade: turns a :class:`FuzzerConfig` into a running engine.

Everything that can fail on bad input (filter syntax, word list, proxy
URIs, option conflicts) is checked before the first request is sent.
"""

from web_fuzzer.config import FuzzerConfig
from web_fuzzer.core.probe import ProbeExecutor
from web_fuzzer.core.proxy import ProxyPool
from web_fuzzer.core.scheduler import LevelScheduler, RunStats
from web_fuzzer.filters import parse
from web_fuzzer.output import ConsoleSink
from web_fuzzer.session import HttpClient
from web_fuzzer.utils.log import log
from web_fuzzer.utils.url import normalise_target
from web_fuzzer.wordlist import load_wordlist


class Fuzzer:

    def __init__(self, config: FuzzerConfig, sink=None, client=None) -> None:
        self.config = config
        self.sink = sink if sink is not None else ConsoleSink(json_output=config.json_output)
        self.client = client if client is not None else HttpClient(verify_ssl=config.verify_ssl)

    def run(self) -> RunStats:
        cfg = self.config.validate()

        rule = parse(cfg.filter) if cfg.filter.strip() else None
        target = normalise_target(cfg.target, cfg.fuzz_token)
        words = load_wordlist(cfg.wordlist)
        pool = ProxyPool.from_uris(cfg.proxies) if cfg.proxies else None

        log.info("Target URL       : %s", target)
        log.info("Wordlist         : %s (%d words)", cfg.wordlist, len(words))
        log.info("Methods          : %s", ",".join(cfg.methods))
        log.info("Workers          : %d", cfg.concurrency)
        if rule is not None:
            log.info("Filter           : %s (%d group(s))", cfg.filter, len(rule))
        if cfg.recursive:
            log.info("Recursion        : on%s",
                     f" (max depth {cfg.max_depth})" if cfg.max_depth else "")
        if cfg.fuzz_token:
            log.info("Mode             : parameter fuzzing")
        if cfg.delay:
            log.info("Delay            : %.2f s per worker", cfg.delay)

        if pool is not None:
            log.info("Proxies          : %d", len(pool))
            if cfg.verify_proxies:
                pool.verify(self.client, cfg.echo_url, cfg.timeout, cfg.user_agent)
                self.client.close()

        executor = ProbeExecutor(
            self.client,
            cfg.methods,
            headers=cfg.headers,
            payload=cfg.payload,
            timeout=cfg.timeout,
            user_agent=cfg.user_agent,
            delay=cfg.delay,
            rule=rule,
            sink=self.sink,
            fuzz_token=cfg.fuzz_token,
        )
        scheduler = LevelScheduler(
            executor,
            cfg.concurrency,
            recursive=cfg.recursive,
            max_depth=cfg.max_depth,
            proxy_pool=pool,
            progress=cfg.progress,
        )
        return scheduler.run(target, words)
