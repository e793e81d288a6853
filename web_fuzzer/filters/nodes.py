"""
Immutable expression tree produced by the filter parser.
"""

import re
from dataclasses import dataclass
from typing import Union

FIELDS = ("status", "length", "content", "url")
NUMERIC_FIELDS = frozenset({"status", "length"})
TEXT_FIELDS = frozenset({"content", "url"})

# Longest operators first so the lexer matches "<=" before "<".
OPERATORS = ("==", "!=", "<=", ">=", "=~", "!~", "<", ">")
REGEX_OPERATORS = frozenset({"=~", "!~"})


@dataclass(frozen=True)
class Comparison:
    """``field OP value``.  *value* is ``None`` for the ``null`` literal."""

    field: str
    op: str
    value: Union[int, str, "re.Pattern[str]", None]


@dataclass(frozen=True)
class And:
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class Or:
    left: "Node"
    right: "Node"


Node = Union[Comparison, And, Or]


def references(node: Node, field: str) -> bool:
    """Return True if any comparison below *node* reads *field*."""
    if isinstance(node, Comparison):
        return node.field == field
    return references(node.left, field) or references(node.right, field)


@dataclass(frozen=True)
class Group:
    """One ``;``-separated alternative of a filter."""

    expr: Node
    uses_content: bool


@dataclass(frozen=True)
class FilterRule:
    """A parsed filter: matches when any of its groups matches."""

    groups: tuple[Group, ...]
    source: str = ""

    def __len__(self) -> int:
        return len(self.groups)
