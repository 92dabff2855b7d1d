"""
=======================================
WHERE / HAVING criteria list and renderer.
=======================================

A criteria list is a plain Python list holding two kinds of fragments:

- Criterion: one condition (column, value, operator, connector)
- Bracket: an open or close marker used to nest conditions

render_criteria() turns such a list into a SQL fragment plus the ordered list
of values bound to its ``?`` placeholders. Rendering is a pure function: the
same list always gives the same (sql, params) pair and nothing is cached.

Example:
    >>> criteria = [
    ...     make_criterion('title', 'Dune', Operator.NOT_EQUALS),
    ...     make_bracket(BRACKET_OPEN, Connector.OR),
    ...     make_criterion('score', 5, Operator.GREATER_THAN_OR_EQUAL),
    ...     make_criterion('score', 10, Operator.LESS_THAN_OR_EQUAL),
    ...     make_bracket(BRACKET_CLOSE),
    ... ]
    >>> render_criteria(criteria)
    ('title != ? OR ( score >= ? AND score <= ? ) ', ['Dune', 5, 10])
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple, Union

from querybuilder.exceptions import InvalidCriteriaError

logger = logging.getLogger(__name__)

BRACKET_OPEN = '('
BRACKET_CLOSE = ')'


class Connector(str, Enum):
    """Logical connectors joining a fragment to its predecessor."""
    AND = 'AND'
    OR = 'OR'

    @classmethod
    def coerce(cls, value: Any) -> 'Connector':
        """Return the matching connector, AND for anything unknown."""
        try:
            return cls(value)
        except ValueError:
            return cls.AND


class Operator(str, Enum):
    """Comparison operators understood by the criteria renderer."""
    EQUALS = '='
    NOT_EQUALS = '!='
    LESS_THAN = '<'
    LESS_THAN_OR_EQUAL = '<='
    GREATER_THAN = '>'
    GREATER_THAN_OR_EQUAL = '>='
    IN = 'IN'
    NOT_IN = 'NOT IN'
    EXISTS = 'EXISTS'
    NOT_EXISTS = 'NOT EXISTS'
    LIKE = 'LIKE'
    NOT_LIKE = 'NOT LIKE'
    REGEXP = 'REGEXP'
    NOT_REGEXP = 'NOT REGEXP'
    BETWEEN = 'BETWEEN'
    NOT_BETWEEN = 'NOT BETWEEN'
    IS_NULL = 'IS NULL'
    IS_NOT_NULL = 'IS NOT NULL'
    # the column holds a complete SQL condition, e.g. "password = md5(?)"
    RAW_CRITERIA = 'raw'
    # the value holds a SelectQueryBuilder or a raw SQL subquery
    SUB_QUERY_IN = 'subquery_in'
    SUB_QUERY_NOT_IN = 'subquery_not_in'
    SUB_QUERY_EXISTS = 'subquery_exists'
    SUB_QUERY_NOT_EXISTS = 'subquery_not_exists'

    @classmethod
    def coerce(cls, value: Any) -> 'Operator':
        """Return the matching operator, EQUALS for anything unknown."""
        try:
            return cls(value)
        except ValueError:
            return cls.EQUALS


# SQL keywords emitted for the subquery operators
_SUBQUERY_KEYWORDS = {
    Operator.SUB_QUERY_IN: Operator.IN.value,
    Operator.SUB_QUERY_NOT_IN: Operator.NOT_IN.value,
    Operator.SUB_QUERY_EXISTS: Operator.EXISTS.value,
    Operator.SUB_QUERY_NOT_EXISTS: Operator.NOT_EXISTS.value,
}


@dataclass(frozen=True)
class Criterion:
    """One condition of a WHERE or HAVING clause."""
    column: Optional[str]
    value: Any
    operator: Operator = Operator.EQUALS
    connector: Connector = Connector.AND


@dataclass(frozen=True)
class Bracket:
    """Open or close marker nesting the conditions between them.

    An open bracket carries the connector joining the group to the previous
    fragment at the same depth; a close bracket carries None.
    """
    bracket: str
    connector: Optional[Connector] = None

    @property
    def is_open(self) -> bool:
        return self.bracket == BRACKET_OPEN


CriteriaItem = Union[Criterion, Bracket]


def make_criterion(
    column: Optional[str],
    value: Any,
    operator: Any = Operator.EQUALS,
    connector: Any = Connector.AND
) -> Criterion:
    """
    Build a criterion, applying the construction-time value rules.

    Unknown operators silently become EQUALS and unknown connectors AND.
    BETWEEN values are sorted ascending, scalar IN values are wrapped in a
    list and IS [NOT] NULL values are dropped.

    Args:
        column: Column name, raw SQL condition (RAW_CRITERIA) or None
        value: Value to compare with; shape depends on the operator
        operator: Operator member or its string value
        connector: Connector member or its string value

    Returns:
        The new Criterion

    Raises:
        InvalidCriteriaError: If a BETWEEN value is not a 2-element list/tuple
    """
    operator = Operator.coerce(operator)
    connector = Connector.coerce(connector)

    if operator in (Operator.BETWEEN, Operator.NOT_BETWEEN):
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            message = (
                f"the operator {operator.value} needs a list value with 2 elements: "
                f"minimum and maximum, got {value!r}"
            )
            logger.error(message)
            raise InvalidCriteriaError(message)
        value = sorted(value)
    elif operator in (Operator.IN, Operator.NOT_IN):
        value = list(value) if isinstance(value, (list, tuple, set, frozenset)) else [value]
    elif operator in (Operator.IS_NULL, Operator.IS_NOT_NULL):
        value = None

    return Criterion(column=column, value=value, operator=operator, connector=connector)


def make_bracket(bracket: str, connector: Any = Connector.AND) -> Bracket:
    """Build a bracket marker; close brackets never carry a connector."""
    if bracket == BRACKET_OPEN:
        return Bracket(BRACKET_OPEN, Connector.coerce(connector))
    return Bracket(BRACKET_CLOSE, None)


def is_balanced(criteria: Sequence[CriteriaItem]) -> bool:
    """
    Check that every open bracket is closed and no close comes first.

    Args:
        criteria: Criteria list to inspect

    Returns:
        True if the bracket markers are balanced
    """
    depth = 0
    for item in criteria:
        if isinstance(item, Bracket):
            depth += 1 if item.is_open else -1
            if depth < 0:
                return False
    return depth == 0


def _render_subquery(value: Any) -> Tuple[str, List[Any]]:
    """Render a subquery value: a builder, or a raw SQL string."""
    if value is None:
        return '', []
    if isinstance(value, str):
        sql = value.strip()
        return (sql + ' ' if sql else ''), []
    return value.get_query_string(), value.get_bound_parameters()


def render_criteria(
    criteria: Sequence[CriteriaItem],
    formatted: bool = False,
    indent_unit: str = '    '
) -> Tuple[str, List[Any]]:
    """
    Render a criteria list into a SQL fragment and its bound parameters.

    Every emitted unit ends with a space. In formatted mode each unit also
    ends with a newline and conditions are indented by one ``indent_unit``
    per nesting level.

    Args:
        criteria: Ordered list of Criterion and Bracket items
        formatted: Spread the fragment over several indented lines
        indent_unit: String used for one level of indentation

    Returns:
        Tuple of (sql fragment, ordered bound parameters)

    Example:
        >>> render_criteria([make_criterion('id', [3, 4], Operator.IN)])
        ('id IN (?, ?) ', [3, 4])
    """
    if not is_balanced(criteria):
        logger.warning(f"Rendering unbalanced criteria list: {list(criteria)!r}")

    def indent(level: int) -> str:
        return indent_unit * level if formatted and level > 0 else ''

    newline = '\n' if formatted else ''
    sql = ''
    params: List[Any] = []
    use_connector = False
    depth = 0

    for item in criteria:
        if isinstance(item, Bracket):
            fragment = ''
            if item.is_open:
                if use_connector:
                    fragment += indent(depth) + Connector.coerce(item.connector).value + ' ' + newline
                use_connector = False
            else:
                use_connector = True
                depth = max(depth - 1, 0)

            fragment += indent(depth) + item.bracket + ' ' + newline
            if item.is_open:
                depth += 1
            sql += fragment
            continue

        fragment = indent(depth)
        if use_connector:
            fragment += item.connector.value + ' '
        use_connector = True

        column = item.column if item.column is not None else ''
        operator = item.operator.value
        value = item.value

        if item.operator in (Operator.BETWEEN, Operator.NOT_BETWEEN):
            placeholders = '? AND ?'
            params.extend([value[0], value[1]])
        elif item.operator in (Operator.IN, Operator.NOT_IN):
            placeholders = '(' + ', '.join('?' for _ in value) + ')'
            params.extend(value)
        elif item.operator in (Operator.IS_NULL, Operator.IS_NOT_NULL):
            placeholders = ''
        elif item.operator is Operator.RAW_CRITERIA:
            column = column.strip()
            operator = ''
            placeholders = ''
            if isinstance(value, (list, tuple)):
                params.extend(value)
            elif value is not None:
                params.append(value)
        elif item.operator in _SUBQUERY_KEYWORDS:
            operator = _SUBQUERY_KEYWORDS[item.operator]
            if item.operator in (Operator.SUB_QUERY_EXISTS, Operator.SUB_QUERY_NOT_EXISTS):
                column = ''
            subquery, subquery_params = _render_subquery(value)
            params.extend(subquery_params)
            if formatted:
                placeholders = (
                    '\n' + indent(depth) + '( \n'
                    + indent(depth + 1) + subquery + '\n'
                    + indent(depth) + ')'
                )
            else:
                placeholders = '( ' + subquery + ')'
        else:
            placeholders = '?'
            params.append(value)

        for token in (column, operator, placeholders):
            if token:
                fragment += token + ' '
        sql += fragment + newline

    return sql, params
