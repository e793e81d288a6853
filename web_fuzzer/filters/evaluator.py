"""
Pure evaluation of a parsed filter against one response record.
"""

import operator

from web_fuzzer.filters.nodes import And, Comparison, FilterRule, Node, Or

_COMPARATORS = {
    "==": operator.eq,
    "!=": operator.ne,
    "<":  operator.lt,
    ">":  operator.gt,
    "<=": operator.le,
    ">=": operator.ge,
}


def evaluate(rule: FilterRule, record) -> bool:
    """Return True if any group of *rule* matches *record*.

    *record* is anything with ``status``, ``length``, ``content`` and
    ``url`` attributes (normally a ``ResponseRecord``).  A group that
    reads ``content`` never matches a record with an empty body.
    """
    for group in rule.groups:
        if group.uses_content and not record.content:
            continue
        if _eval(group.expr, record):
            return True
    return False


def _eval(node: Node, record) -> bool:
    if isinstance(node, And):
        return _eval(node.left, record) and _eval(node.right, record)
    if isinstance(node, Or):
        return _eval(node.left, record) or _eval(node.right, record)
    return _compare(node, record)


def _compare(cmp: Comparison, record) -> bool:
    actual = getattr(record, cmp.field)

    if cmp.op in ("=~", "!~"):
        if actual is None:
            return False
        matched = cmp.value.search(str(actual)) is not None
        return matched if cmp.op == "=~" else not matched

    # length is None for an empty body; only "== null" / "!= null" can
    # say anything about it.
    if cmp.value is None:
        return (actual is None) == (cmp.op == "==")
    if actual is None:
        return False

    try:
        return _COMPARATORS[cmp.op](actual, cmp.value)
    except TypeError:
        return False
