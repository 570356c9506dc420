"""Filter expression compiler.

Turns short comparison strings into the query parameters understood by the
table endpoints::

    >>> compile_filters(["pri<=2.8", "qty>50"])
    'pri__lte=2.8&qty__gt=50'

All filters are combined with AND. Values cannot be quoted, so a value that
itself starts with a comparison symbol cannot be expressed. Expressions that
do not parse are skipped.
"""

import re
from typing import Iterable
from urllib.parse import quote

# longest symbols first so ">=" is not read as ">" followed by "=..."
_FILTER_PATTERN = re.compile(
    r"^\s*(?P<field>\w+)\s*(?P<op>==|>=|<=|=|>|<)\s*(?P<value>.+)$",
    re.DOTALL,
)

OPERATORS = {
    "=": "",
    "==": "",
    ">": "__gt",
    ">=": "__gte",
    "<": "__lt",
    "<=": "__lte",
}


def compile_filter(expression: str) -> str | None:
    """Compile one expression to ``field[__op]=value``, or None if malformed."""
    match = _FILTER_PATTERN.match(expression)
    if match is None:
        return None

    field = quote(match.group("field"), safe="") + OPERATORS[match.group("op")]
    value = quote(match.group("value"), safe="")
    return f"{field}={value}"


def compile_filters(expressions: Iterable[str]) -> str:
    """Compile filter expressions into a query string (without ``?``).

    Args:
        expressions: Strings such as ``"qty>50"`` or ``"name=Hello World"``.

    Returns:
        Parameters joined by ``&``; empty when nothing parsed.
    """
    params = []
    for expression in expressions:
        param = compile_filter(expression)
        if param is not None:
            params.append(param)
    return "&".join(params)
