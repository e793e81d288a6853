"""
Word-list loading.  The list is read once; every generation replays it.
"""

from pathlib import Path

from web_fuzzer.errors import ConfigurationError
from web_fuzzer.utils.log import log


def load_wordlist(path: str | Path) -> list[str]:
    """Return the non-blank lines of *path*, line endings stripped.

    Bytes that are not valid UTF-8 are dropped rather than failing the run.
    """
    wl_path = Path(path).expanduser()
    try:
        with wl_path.open("r", encoding="utf-8", errors="ignore", newline="") as fh:
            words = [line.rstrip("\r\n") for line in fh]
    except OSError as exc:
        raise ConfigurationError(f"can't open wordlist {wl_path}: {exc.strerror}") from exc

    words = [w for w in words if w.strip()]
    if not words:
        raise ConfigurationError(f"wordlist {wl_path} is empty")
    log.debug("Loaded %d words from %s", len(words), wl_path)
    return words
