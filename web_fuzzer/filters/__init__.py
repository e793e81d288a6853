"""Filter predicate language: ``parse`` text once, ``evaluate`` per response."""

from web_fuzzer.filters.evaluator import evaluate
from web_fuzzer.filters.nodes import And, Comparison, FilterRule, Group, Or
from web_fuzzer.filters.parser import parse

__all__ = [
    "parse",
    "evaluate",
    "FilterRule",
    "Group",
    "Comparison",
    "And",
    "Or",
]
