"""
============================================
Programmatic SQL statement builder package.
============================================

Fluent builders producing parameterized SQL (``?`` placeholders) plus the
ordered list of bound values, for SELECT, INSERT/REPLACE, UPDATE and DELETE.

The package is organized by statement type:
    - criteria.py: WHERE/HAVING criteria list and renderer
    - base_builder.py: shared builder base, WHERE API, execution
    - select_builder.py, insert_builder.py, update_builder.py,
      delete_builder.py: the four statement builders
    - conditional.py: if_/elif_/else_/endif branching inside a chain
    - debug.py: literal quoting and placeholder substitution for logs
    - exceptions.py: exception hierarchy

Example:
    >>> from querybuilder import Operator, SelectQueryBuilder
    >>>
    >>> query = (SelectQueryBuilder()
    ...     .select('title')
    ...     .from_('book')
    ...     .where('score', [3, 5], Operator.BETWEEN))
    >>> query.build()
    ('SELECT title FROM book WHERE score BETWEEN ? AND ? ', [3, 5])
"""

__version__ = "1.0.0"
__all__ = [
    # Builders
    'QueryBuilder', 'WhereQueryBuilder', 'SelectQueryBuilder',
    'InsertQueryBuilder', 'UpdateQueryBuilder', 'DeleteQueryBuilder',
    # Criteria
    'Operator', 'Connector', 'Criterion', 'Bracket',
    'BRACKET_OPEN', 'BRACKET_CLOSE', 'render_criteria',
    # Select parts
    'JoinType', 'SortOrder', 'JoinSpec', 'OrderSpec', 'LimitSpec', 'SetSpec',
    # Execution
    'Connection', 'FETCH_ALL', 'FETCH_LAST_INSERT_ID',
    'TYPE_SELECT', 'TYPE_INSERT', 'TYPE_UPDATE', 'TYPE_DELETE',
    # Branching and debugging
    'InactiveBranch', 'quote_value', 'debug_query',
    # Exceptions
    'QueryBuilderError', 'InvalidCriteriaError', 'FluentStateError',
    'ConnectionAdapterError',
]

from .base_builder import (
    FETCH_ALL,
    FETCH_LAST_INSERT_ID,
    TYPE_DELETE,
    TYPE_INSERT,
    TYPE_SELECT,
    TYPE_UPDATE,
    Connection,
    QueryBuilder,
    WhereQueryBuilder,
)
from .conditional import InactiveBranch
from .criteria import (
    BRACKET_CLOSE,
    BRACKET_OPEN,
    Bracket,
    Connector,
    Criterion,
    Operator,
    render_criteria,
)
from .debug import debug_query, quote_value
from .delete_builder import DeleteQueryBuilder
from .exceptions import (
    ConnectionAdapterError,
    FluentStateError,
    InvalidCriteriaError,
    QueryBuilderError,
)
from .insert_builder import InsertQueryBuilder
from .select_builder import JoinSpec, JoinType, LimitSpec, OrderSpec, SelectQueryBuilder, SortOrder
from .update_builder import SetSpec, UpdateQueryBuilder
