"""
Command-line interface for the web fuzzer.
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from web_fuzzer.config import (
    DEFAULT_CONCURRENCY,
    DEFAULT_DELAY,
    DEFAULT_ECHO_URL,
    DEFAULT_MAX_DEPTH,
    DEFAULT_METHODS,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    VERSION,
    FuzzerConfig,
    parse_header,
    parse_methods,
)
from web_fuzzer.errors import (
    ConfigurationError,
    FuzzerError,
    ProxyVerificationError,
    WorkerError,
)
from web_fuzzer.fuzzer import Fuzzer
from web_fuzzer.utils.log import log, setup_logging

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2
EXIT_PROXY = 3
EXIT_INTERRUPTED = 130

_FILTER_HELP = """\
Filters:
  A filter is a list of ';'-separated groups.  A response is shown when at
  least one group matches.  A group is a chain of comparisons joined with
  'and' / 'or', evaluated strictly from left to right.

  Fields:  status   status code (200, 301, 404, ...)
           length   body size in bytes, or null for an empty body
           content  response body (groups using it never match empty bodies)
           url      final URL after redirects
  Operators:  ==  !=  <  >  <=  >=  =~ /regex/flags  !~ /regex/flags

  Examples:
    -f 'url =~ /\\.txt$/ and status != 200'
    -f 'status == 200; content =~ /admin/i'
    -f 'status > 300 and status < 400 or status == 200'

Parameter fuzzing:
  With --fuzzme every %FUZZME% in the target is replaced by each word
  instead of appending the word as a path:
    web-fuzzer -w sqli.txt --fuzzme 'https://target/page.php?id=%FUZZME%' \\
               -f 'content =~ /SQL/'
"""


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="web-fuzzer",
        description="Multi-threaded web content discovery – probes a target "
                    "with every word of a word list, optionally following "
                    "discovered directories.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  web-fuzzer -w wordlist.txt -T 16 http://example.com\n"
            "  web-fuzzer -w wordlist.txt -d 2 -u 'Googlebot/1.0' https://example.com\n"
            "  web-fuzzer -w wordlist.txt -f 'content =~ /admin/i' https://example.com\n"
            "  web-fuzzer -w wordlist.txt -H DNT=1 -r http://example.com\n"
            "\n" + _FILTER_HELP
        ),
    )
    parser.add_argument(
        "url",
        help="Target URL (e.g. https://example.com)",
    )
    parser.add_argument(
        "-v", "--version", action="version", version=f"%(prog)s {VERSION}",
    )
    parser.add_argument(
        "-w", "--wordlist", required=True,
        help="Word list of paths (or payloads with --fuzzme) to request",
    )
    parser.add_argument(
        "-T", "--tasks", dest="concurrency", type=int, default=DEFAULT_CONCURRENCY,
        help=f"Number of worker threads (default: {DEFAULT_CONCURRENCY})",
    )
    parser.add_argument(
        "-t", "--timeout", type=float, default=DEFAULT_TIMEOUT,
        help=f"Timeout for each request in seconds (default: {DEFAULT_TIMEOUT})",
    )
    parser.add_argument(
        "-m", "--methods", default=",".join(DEFAULT_METHODS),
        help="Comma-separated list of HTTP methods to request "
             f"(default: {','.join(DEFAULT_METHODS)})",
    )
    parser.add_argument(
        "-u", "--useragent", dest="user_agent", default=DEFAULT_USER_AGENT,
        help=f"User-Agent string (default: {DEFAULT_USER_AGENT})",
    )
    parser.add_argument(
        "-d", "--delay", type=float, default=DEFAULT_DELAY,
        help="Seconds each worker waits between requests (default: 0)",
    )
    parser.add_argument(
        "-j", "--json", dest="json_output", action="store_true",
        help="Print each result as a JSON object",
    )
    parser.add_argument(
        "-r", "--recursive", dest="recursive", action="store_true", default=False,
        help="Go recursive into discovered directories",
    )
    parser.add_argument(
        "--norecursive", dest="recursive", action="store_false",
        help="Do not follow directories recursively (default)",
    )
    parser.add_argument(
        "--depth", dest="max_depth", type=int, default=DEFAULT_MAX_DEPTH,
        help="Maximum recursion depth (0 = unlimited, default: 0)",
    )
    parser.add_argument(
        "-H", "--header", dest="headers", action="append", default=[],
        metavar="NAME=VALUE",
        help="Header to send with every request (repeatable)",
    )
    parser.add_argument(
        "-p", "--payload", default="",
        help="Request body sent with every request",
    )
    parser.add_argument(
        "-f", "--filter", default="",
        help="Only display results matching this filter (see Filters below)",
    )
    parser.add_argument(
        "--fuzzme", dest="fuzz_token", action="store_true",
        help="Replace %%FUZZME%% in the URL instead of appending paths",
    )
    parser.add_argument(
        "-x", "--proxy", dest="proxies", action="append", default=[],
        metavar="URI",
        help="Proxy to route requests through, picked at random per "
             "request (repeatable, e.g. http://10.0.0.1:8080)",
    )
    parser.add_argument(
        "--proxy-file",
        help="File with one proxy URI per line",
    )
    parser.add_argument(
        "--verify-proxies", action="store_true",
        help="Drop proxies that do not hide your IP before fuzzing",
    )
    parser.add_argument(
        "--echo-url", default=DEFAULT_ECHO_URL,
        help=f"IP echo service used by --verify-proxies (default: {DEFAULT_ECHO_URL})",
    )
    parser.add_argument(
        "--no-verify-ssl", dest="verify_ssl", action="store_false", default=True,
        help="Disable TLS certificate verification",
    )
    parser.add_argument(
        "--progress", action="store_true",
        help="Show a progress bar for each generation",
    )
    parser.add_argument(
        "--debug", action="store_true",
        help="Enable verbose debug logging (includes skipped requests)",
    )
    parser.add_argument(
        "--log-file",
        help="Write detailed logs to this file (always at DEBUG level)",
    )
    return parser.parse_args(argv)


def _read_proxy_file(path: str) -> list[str]:
    try:
        lines = Path(path).read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise ConfigurationError(f"can't open proxy file {path}: {exc.strerror}") from exc
    return [ln.strip() for ln in lines if ln.strip() and not ln.lstrip().startswith("#")]


def build_config(args: argparse.Namespace) -> FuzzerConfig:
    """Translate parsed arguments into a validated :class:`FuzzerConfig`."""
    proxies = list(args.proxies)
    if args.proxy_file:
        proxies.extend(_read_proxy_file(args.proxy_file))
    return FuzzerConfig(
        target=args.url,
        wordlist=args.wordlist,
        concurrency=args.concurrency,
        timeout=args.timeout,
        methods=parse_methods(args.methods),
        user_agent=args.user_agent,
        delay=args.delay,
        headers=dict(parse_header(h) for h in args.headers),
        payload=args.payload.encode("utf-8"),
        filter=args.filter,
        recursive=args.recursive,
        fuzz_token=args.fuzz_token,
        max_depth=args.max_depth,
        proxies=proxies,
        verify_proxies=args.verify_proxies,
        echo_url=args.echo_url,
        json_output=args.json_output,
        verify_ssl=args.verify_ssl,
        progress=args.progress,
    ).validate()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    setup_logging(debug=args.debug, log_file=args.log_file)

    if args.debug:
        logging.getLogger("urllib3").setLevel(logging.DEBUG)

    if not args.verify_ssl:
        import urllib3
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        log.warning("TLS certificate verification is DISABLED (--no-verify-ssl)")

    t0 = time.monotonic()
    try:
        config = build_config(args)
        Fuzzer(config).run()
    except ConfigurationError as exc:
        log.error("[!] %s", exc)
        return EXIT_CONFIG
    except ProxyVerificationError as exc:
        log.error("[!] Proxy verification failed: %s", exc)
        return EXIT_PROXY
    except WorkerError as exc:
        log.error("[ERR] %s", exc)
        return EXIT_FAILURE
    except FuzzerError as exc:
        log.error("[!] %s", exc)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        log.warning("Interrupted by user")
        return EXIT_INTERRUPTED

    elapsed = time.monotonic() - t0
    log.info("Total elapsed time: %.1f s", elapsed)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
