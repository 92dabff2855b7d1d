"""
===================================
Literal quoting and query debugging.
===================================

Helpers turning a parameterized query into a human readable one, for
logging only. The output of debug_query() must never be executed: values
are inlined with best-effort escaping.

Functions:
- quote_value: Escape one value as a SQL literal
- debug_query: Substitute placeholders (``?`` or ``:name``) with literals
"""

import re
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence, Union

Params = Union[Sequence[Any], Mapping[Any, Any]]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _is_numeric_string(value: str) -> bool:
    try:
        float(value)
    except ValueError:
        return False
    return True


def quote_value(value: Any, connection: Optional[Any] = None) -> Any:
    """
    Safely escape a value for use as a SQL literal.

    Numbers are returned unchanged. When a connection is given its quote()
    method does the escaping; otherwise single quotes are doubled the
    SQL-standard way.

    Args:
        value: Value to escape
        connection: Optional object exposing quote(value) -> str

    Returns:
        The escaped literal (numbers are returned as-is)

    Example:
        >>> quote_value("l'île")
        "'l''île'"
        >>> quote_value(3)
        3
    """
    if _is_number(value):
        return value
    if value is None:
        return 'NULL'
    if isinstance(value, bool):
        return '1' if value else '0'
    if connection is not None:
        return connection.quote(value)
    return "'" + str(value).replace("'", "''") + "'"


def _literal(value: Any, quoted: bool, connection: Optional[Any]) -> str:
    if quoted:
        return str(quote_value(value, connection))
    if isinstance(value, str) and not _is_numeric_string(value):
        return "'" + value + "'"
    if value is None:
        return 'NULL'
    return str(value)


def debug_query(
    query: str,
    params: Optional[Params] = None,
    quoted: bool = True,
    connection: Optional[Any] = None
) -> str:
    """
    Replace the parameter placeholders of a query with literal values.

    Positional parameters (a sequence) replace ``?`` placeholders in order;
    a mapping replaces ``:name`` placeholders (keys may include the colon).
    Each parameter replaces exactly one occurrence, in declaration order.
    The query is scanned once, so placeholder characters inside inlined
    values are never substituted again.

    Args:
        query: SQL query with placeholders
        params: Bound parameters, a sequence or a mapping
        quoted: If True escape each value with quote_value(); otherwise only
            wrap non-numeric strings in single quotes
        connection: Optional connection used to quote values

    Returns:
        The query with inlined values

    Example:
        >>> debug_query('SELECT * FROM book WHERE id = ?', [2])
        'SELECT * FROM book WHERE id = 2'
    """
    if not params or not query:
        return query

    if isinstance(params, Mapping):
        literals = {}
        for key, value in params.items():
            name = str(key) if str(key).startswith(':') else ':' + str(key)
            literals.setdefault(name, _literal(value, quoted, connection))

        # longest names first so ':id' never matches the start of ':id_author'
        names = sorted(literals, key=len, reverse=True)
        pattern = re.compile('(?:' + '|'.join(re.escape(name) for name in names) + r')\b')

        def replace_named(match: re.Match) -> str:
            name = match.group(0)
            if name in literals:
                return literals.pop(name)
            return name

        return pattern.sub(replace_named, query)

    remaining = iter([_literal(value, quoted, connection) for value in params])

    def replace_positional(match: re.Match) -> str:
        return next(remaining, match.group(0))

    return re.sub(r'\?', replace_positional, query)
