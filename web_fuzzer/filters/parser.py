"""
Recursive-descent parser for the filter language.

    filter     = group { ";" group }
    group      = comparison { ("and" | "or") comparison }
    comparison = field op value

``and`` and ``or`` have the same precedence and are folded strictly from
left to right: ``a or b and c`` means ``(a or b) and c``.
"""

import re

from web_fuzzer.errors import FilterSyntaxError
from web_fuzzer.filters.lexer import (
    EOF, IDENT, INT, LOGIC, OP, REGEX, SEMI, STRING, Token, tokenize,
)
from web_fuzzer.filters.nodes import (
    FIELDS,
    NUMERIC_FIELDS,
    REGEX_OPERATORS,
    And,
    Comparison,
    FilterRule,
    Group,
    Node,
    Or,
    references,
)

_REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
}


def parse(text: str) -> FilterRule:
    """Parse *text* into a :class:`FilterRule`.

    Raises :class:`~web_fuzzer.errors.FilterSyntaxError` for anything that
    is not a well-formed filter.
    """
    return _Parser(tokenize(text), text).parse_filter()


class _Parser:

    def __init__(self, tokens: list[Token], source: str) -> None:
        self._tokens = tokens
        self._source = source
        self._pos = 0

    def _peek(self) -> Token:
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        if tok.kind != EOF:
            self._pos += 1
        return tok

    def parse_filter(self) -> FilterRule:
        groups: list[Group] = []
        while True:
            tok = self._peek()
            if tok.kind == SEMI:
                self._advance()
                continue
            if tok.kind == EOF:
                break
            groups.append(self._group())
            tok = self._peek()
            if tok.kind == SEMI:
                self._advance()
            elif tok.kind != EOF:
                raise FilterSyntaxError(
                    f"expected 'and', 'or' or ';' but found {_describe(tok)}",
                    tok.column,
                )
        if not groups:
            raise FilterSyntaxError("filter contains no expressions", 0)
        return FilterRule(groups=tuple(groups), source=self._source)

    def _group(self) -> Group:
        expr: Node = self._comparison()
        while self._peek().kind == LOGIC:
            keyword = self._advance().value
            right = self._comparison()
            expr = And(expr, right) if keyword == "and" else Or(expr, right)
        return Group(expr=expr, uses_content=references(expr, "content"))

    def _comparison(self) -> Comparison:
        tok = self._advance()
        if tok.kind != IDENT or tok.value.lower() not in FIELDS:
            raise FilterSyntaxError(
                f"expected a field name ({', '.join(FIELDS)}) but found "
                f"{_describe(tok)}",
                tok.column,
            )
        field = tok.value.lower()

        op_tok = self._advance()
        if op_tok.kind != OP:
            raise FilterSyntaxError(
                f"expected a comparison operator after '{field}' but found "
                f"{_describe(op_tok)}",
                op_tok.column,
            )
        op = op_tok.value

        value_tok = self._advance()
        if op in REGEX_OPERATORS:
            return Comparison(field, op, self._regex(value_tok, op))
        if field in NUMERIC_FIELDS:
            return Comparison(field, op, self._numeric_value(value_tok, field, op))
        return Comparison(field, op, self._text_value(value_tok, field))

    @staticmethod
    def _regex(tok: Token, op: str) -> "re.Pattern[str]":
        if tok.kind != REGEX:
            raise FilterSyntaxError(
                f"'{op}' needs a regular expression like /pattern/ but found "
                f"{_describe(tok)}",
                tok.column,
            )
        pattern, flag_letters = tok.value
        flags = 0
        for letter in flag_letters:
            if letter not in _REGEX_FLAGS:
                raise FilterSyntaxError(
                    f"unknown regular expression flag {letter!r}", tok.column
                )
            flags |= _REGEX_FLAGS[letter]
        try:
            return re.compile(pattern, flags)
        except re.error as exc:
            raise FilterSyntaxError(
                f"invalid regular expression /{pattern}/: {exc}", tok.column
            ) from exc

    @staticmethod
    def _numeric_value(tok: Token, field: str, op: str) -> int | None:
        if tok.kind == INT:
            return tok.value
        if tok.kind == IDENT and tok.value.lower() == "null":
            if field != "length" or op not in ("==", "!="):
                raise FilterSyntaxError(
                    "null can only be compared with '==' or '!=' on 'length'",
                    tok.column,
                )
            return None
        raise FilterSyntaxError(
            f"'{field}' is numeric; expected an integer but found "
            f"{_describe(tok)}",
            tok.column,
        )

    @staticmethod
    def _text_value(tok: Token, field: str) -> str:
        if tok.kind == STRING:
            return tok.value
        if tok.kind == INT:
            return str(tok.value)
        raise FilterSyntaxError(
            f"'{field}' is text; expected a quoted string but found "
            f"{_describe(tok)}",
            tok.column,
        )


def _describe(tok: Token) -> str:
    if tok.kind == EOF:
        return "end of filter"
    if tok.kind == REGEX:
        return f"regular expression /{tok.value[0]}/"
    return repr(tok.value)
