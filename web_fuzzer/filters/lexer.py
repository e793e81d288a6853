"""
Tokenizer for the filter language.

A regex literal (``/pattern/flags``) is only recognised directly after a
``=~`` or ``!~`` operator, so ``/`` never needs escaping anywhere else.
"""

from dataclasses import dataclass

from web_fuzzer.errors import FilterSyntaxError
from web_fuzzer.filters.nodes import OPERATORS, REGEX_OPERATORS

IDENT = "IDENT"
LOGIC = "LOGIC"
OP = "OP"
INT = "INT"
STRING = "STRING"
REGEX = "REGEX"
SEMI = "SEMI"
EOF = "EOF"

_LOGIC_SYMBOLS = {"&&": "and", "||": "or"}
_LOGIC_WORDS = frozenset({"and", "or"})


@dataclass(frozen=True)
class Token:
    kind: str
    value: object
    column: int


def tokenize(text: str) -> list[Token]:
    """Split *text* into tokens, ending with a single ``EOF`` token."""
    tokens: list[Token] = []
    pos = 0
    n = len(text)

    while pos < n:
        ch = text[pos]

        if ch.isspace():
            pos += 1
            continue

        if ch == ";":
            tokens.append(Token(SEMI, ";", pos))
            pos += 1
            continue

        two = text[pos:pos + 2]
        if two in _LOGIC_SYMBOLS:
            tokens.append(Token(LOGIC, _LOGIC_SYMBOLS[two], pos))
            pos += 2
            continue

        op = next((o for o in OPERATORS if text.startswith(o, pos)), None)
        if op is not None:
            tokens.append(Token(OP, op, pos))
            pos += len(op)
            if op in REGEX_OPERATORS:
                pos = _skip_space(text, pos)
                if pos < n and text[pos] == "/":
                    token, pos = _read_regex(text, pos)
                    tokens.append(token)
            continue

        if ch.isdigit():
            start = pos
            while pos < n and text[pos].isdigit():
                pos += 1
            tokens.append(Token(INT, int(text[start:pos]), start))
            continue

        if ch in "\"'":
            token, pos = _read_string(text, pos)
            tokens.append(token)
            continue

        if ch.isalpha() or ch == "_":
            start = pos
            while pos < n and (text[pos].isalnum() or text[pos] == "_"):
                pos += 1
            word = text[start:pos]
            if word.lower() in _LOGIC_WORDS:
                tokens.append(Token(LOGIC, word.lower(), start))
            else:
                tokens.append(Token(IDENT, word, start))
            continue

        raise FilterSyntaxError(f"unexpected character {ch!r}", pos)

    tokens.append(Token(EOF, None, n))
    return tokens


def _skip_space(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def _read_string(text: str, pos: int) -> tuple[Token, int]:
    quote = text[pos]
    start = pos
    pos += 1
    chars: list[str] = []
    while pos < len(text):
        ch = text[pos]
        if ch == "\\" and pos + 1 < len(text):
            chars.append(text[pos + 1])
            pos += 2
            continue
        if ch == quote:
            return Token(STRING, "".join(chars), start), pos + 1
        chars.append(ch)
        pos += 1
    raise FilterSyntaxError("unterminated string literal", start)


def _read_regex(text: str, pos: int) -> tuple[Token, int]:
    """Read ``/pattern/flags``; the value is a ``(pattern, flags)`` pair."""
    start = pos
    pos += 1
    chars: list[str] = []
    while pos < len(text):
        ch = text[pos]
        if ch == "\\" and pos + 1 < len(text):
            # Keep the escape: re understands "\/" as a literal slash.
            chars.append(text[pos:pos + 2])
            pos += 2
            continue
        if ch == "/":
            pos += 1
            flags_start = pos
            while pos < len(text) and text[pos].isalpha():
                pos += 1
            return Token(REGEX, ("".join(chars), text[flags_start:pos]), start), pos
        chars.append(ch)
        pos += 1
    raise FilterSyntaxError("unterminated regular expression", start)
