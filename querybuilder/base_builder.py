"""
================================
Base classes for query builders.
================================

QueryBuilder holds everything the four statement builders share: the
optional connection, execution options, parameter aggregation, debugging,
execution and the if_/elif_/else_/endif branching. WhereQueryBuilder adds
the WHERE criteria API used by SELECT, UPDATE and DELETE.

Each concrete builder describes its statement as an ordered list of
sections. A section is rendered by a pure function returning a
``(fragment, params)`` pair; build() concatenates the fragments and the
params in clause order, so the bound parameters always line up with the
``?`` placeholders of the SQL text.

Builders are cheap, single-owner objects. They are not thread-safe and are
not reentrant: callers sharing one instance between threads must serialize
every call themselves, including render and execute calls such as count().

Example:
    >>> from querybuilder import SelectQueryBuilder
    >>>
    >>> query = SelectQueryBuilder().select('id').from_('book').where('author_id', 2)
    >>> query.get_query_string()
    'SELECT id FROM book WHERE author_id = ? '
    >>> query.get_bound_parameters()
    [2]
"""

import logging
from typing import Any, List, Optional, Protocol, Sequence, Tuple

from core.config import config
from querybuilder.conditional import ConditionalFrame, InactiveBranch
from querybuilder.criteria import (
    BRACKET_CLOSE,
    BRACKET_OPEN,
    Bracket,
    Connector,
    CriteriaItem,
    Operator,
    make_bracket,
    make_criterion,
    render_criteria,
)
from querybuilder.debug import debug_query, quote_value
from querybuilder.exceptions import FluentStateError

logger = logging.getLogger(__name__)

TYPE_SELECT = 'select'
TYPE_INSERT = 'insert'
TYPE_UPDATE = 'update'
TYPE_DELETE = 'delete'

# query() fetch modes; None returns the raw result handle
FETCH_ALL = 'all'
FETCH_LAST_INSERT_ID = 'last_insert_id'

# (section name, SQL fragment, bound parameters)
Section = Tuple[str, str, List[Any]]


class Connection(Protocol):
    """Database collaborator used for quoting and execution.

    utils.database_utils.SQLAlchemyConnection is the bundled implementation.
    """

    def quote(self, value: Any) -> str:
        ...

    def execute(self, sql: str, params: Sequence[Any]) -> Any:
        ...

    def fetch_all(self, result: Any) -> List[Any]:
        ...

    def row_count(self, result: Any) -> int:
        ...

    def last_insert_id(self) -> Any:
        ...


class QueryBuilder:
    """Abstract base class for every statement builder.

    Attributes:
        query_type: One of TYPE_SELECT, TYPE_INSERT, TYPE_UPDATE, TYPE_DELETE
    """

    query_type: Optional[str] = None

    def __init__(self, connection: Optional[Connection] = None):
        """
        Initialize an empty builder.

        Args:
            connection: Optional connection used by quote(), debug() and query()
        """
        self._connection = connection
        self._options: List[str] = []
        self._conditions: List[ConditionalFrame] = []
        self._inactive = InactiveBranch(self)
        self.indent_unit = config.builder.indent_unit()

    def __str__(self) -> str:
        return self.get_query_string()

    def get_query_type(self) -> Optional[str]:
        return self.query_type

    def set_connection(self, connection: Optional[Connection] = None) -> 'QueryBuilder':
        self._connection = connection
        return self

    def get_connection(self) -> Optional[Connection]:
        return self._connection

    def add_option(self, option: Optional[str]) -> 'QueryBuilder':
        """
        Add an execution option like DISTINCT or LOW PRIORITY.

        Args:
            option: Option keyword; None and empty strings are ignored

        Returns:
            The builder itself
        """
        if option:
            self._options.append(option)
        return self

    def get_options(self) -> List[str]:
        return list(self._options)

    def _options_prefix(self) -> str:
        return ' '.join(self._options) + ' ' if self._options else ''

    def quote(self, value: Any) -> Any:
        """Escape a value as a SQL literal, through the connection if set."""
        return quote_value(value, self._connection)

    # Rendering

    def _sections(self, formatted: bool = False) -> List[Section]:
        """Render every section of the statement in clause order."""
        raise NotImplementedError

    def _is_degenerate(self) -> bool:
        """Whether a required part is missing, making the statement empty."""
        raise NotImplementedError

    def build(self, formatted: bool = False) -> Tuple[str, List[Any]]:
        """
        Render the statement and its bound parameters in one pass.

        Args:
            formatted: Spread the SQL over several lines

        Returns:
            Tuple of (sql, params); ('', []) when a required part is missing
        """
        if self._is_degenerate():
            return '', []

        sql = ''
        params: List[Any] = []
        for _, fragment, section_params in self._sections(formatted):
            sql += fragment
            params.extend(section_params)
        return sql, params

    def get_query_string(self, formatted: bool = False) -> str:
        """
        Return the full query string with ``?`` placeholders.

        Args:
            formatted: Spread the SQL over several lines

        Returns:
            The SQL text, or an empty string for an incomplete statement
        """
        return self.build(formatted)[0]

    def get_bound_parameters(self, quoted: bool = False, section: Optional[str] = None) -> List[Any]:
        """
        Return the bound parameters in placeholder order.

        Args:
            quoted: If True escape every value with quote()
            section: Only return one section ('where', 'having', 'set',
                'values', 'select', 'from'); None returns all of them

        Returns:
            List of parameter values
        """
        if section is None:
            params = self.build()[1]
        else:
            params = []
            for name, _, section_params in self._sections():
                if name == section:
                    params = section_params
                    break

        if quoted:
            return [self.quote(value) for value in params]
        return params

    def debug(self, quoted: bool = True, formatted: bool = True) -> str:
        """
        Return the query with its parameters inlined, for logging only.

        Args:
            quoted: If True escape each parameter
            formatted: Spread the SQL over several lines

        Returns:
            Human readable SQL
        """
        sql, params = self.build(formatted)
        return debug_query(sql, params, quoted, self._connection)

    def query(self, fetch: Optional[str] = FETCH_ALL) -> Any:
        """
        Execute the query through the connection.

        Args:
            fetch: FETCH_ALL to fetch rows (SELECT) or the row count,
                FETCH_LAST_INSERT_ID to return the id generated by an
                INSERT, None to return the raw result handle

        Returns:
            Rows, a row count, an inserted id or the result handle; the
            debugged SQL string when no connection is set; None when the
            statement is incomplete

        Raises:
            Whatever the connection raises, unchanged
        """
        sql, params = self.build()
        if not sql:
            return None

        connection = self._connection
        if connection is None:
            return self.debug(True, True)

        logger.debug(f"Executing {self.query_type} query: {sql} with {len(params)} parameter(s)")
        result = connection.execute(sql, params)

        if fetch is None:
            return result

        if self.query_type == TYPE_SELECT:
            return connection.fetch_all(result)

        count = connection.row_count(result)
        if self.query_type == TYPE_INSERT and fetch == FETCH_LAST_INSERT_ID and count:
            return connection.last_insert_id()
        return count

    # Fluent conditions

    def _current(self):
        if self._conditions and not self._conditions[-1].active:
            return self._inactive
        return self

    def _top_frame(self, method: str) -> ConditionalFrame:
        if not self._conditions:
            message = f"{method}() must be called after if_()"
            logger.error(message)
            raise FluentStateError(message)
        return self._conditions[-1]

    def if_(self, cond: Any):
        """
        Open a conditional branch.

        Args:
            cond: Branch condition

        Returns:
            The builder when the branch is active, else an InactiveBranch
        """
        parent_state = self._conditions[-1].active if self._conditions else True
        self._conditions.append(ConditionalFrame(bool(cond), parent_state=parent_state))
        return self._current()

    def elif_(self, cond: Any):
        """Switch to an alternative branch taken only if none fired yet."""
        self._top_frame('elif_').elif_(cond)
        return self._current()

    def else_(self):
        """Switch to the branch taken when no previous one fired."""
        self._top_frame('else_').else_()
        return self._current()

    def endif(self):
        """Close the current branch and resume the enclosing level."""
        self._top_frame('endif')
        self._conditions.pop()
        return self._current()


class WhereQueryBuilder(QueryBuilder):
    """Base class for statements with a WHERE clause."""

    def __init__(self, connection: Optional[Connection] = None):
        super().__init__(connection)
        self._where: List[CriteriaItem] = []

    @staticmethod
    def _open(criteria: List[CriteriaItem], connector: Any) -> None:
        criteria.append(make_bracket(BRACKET_OPEN, connector))

    @staticmethod
    def _close(criteria: List[CriteriaItem]) -> None:
        criteria.append(make_bracket(BRACKET_CLOSE))

    @staticmethod
    def _add(criteria: List[CriteriaItem], column, value, operator, connector) -> None:
        criteria.append(make_criterion(column, value, operator, connector))

    def open_where(self, connector: Any = Connector.AND) -> 'WhereQueryBuilder':
        """
        Open a bracket nesting the following WHERE conditions.

        Args:
            connector: Connector joining the group to the previous condition

        Returns:
            The builder itself
        """
        self._open(self._where, connector)
        return self

    def and_open_where(self) -> 'WhereQueryBuilder':
        return self.open_where(Connector.AND)

    def or_open_where(self) -> 'WhereQueryBuilder':
        return self.open_where(Connector.OR)

    def close_where(self) -> 'WhereQueryBuilder':
        """Close the innermost WHERE bracket."""
        self._close(self._where)
        return self

    def where(
        self,
        column: Optional[str],
        value: Any,
        operator: Any = Operator.EQUALS,
        connector: Any = Connector.AND
    ) -> 'WhereQueryBuilder':
        """
        Add a WHERE condition.

        Args:
            column: Column name, or a raw condition with RAW_CRITERIA
            value: Value, list (IN, BETWEEN) or subquery (SUB_QUERY_*).
                An empty IN / NOT IN list is rendered as-is (``id IN ()``),
                which most databases reject; callers must not pass one
            operator: Comparison operator, EQUALS by default
            connector: Connector joining it to the previous condition

        Returns:
            The builder itself

        Raises:
            InvalidCriteriaError: If a BETWEEN value is not a 2-element list
        """
        self._add(self._where, column, value, operator, connector)
        return self

    def and_where(self, column: Optional[str], value: Any, operator: Any = Operator.EQUALS) -> 'WhereQueryBuilder':
        return self.where(column, value, operator, Connector.AND)

    def or_where(self, column: Optional[str], value: Any, operator: Any = Operator.EQUALS) -> 'WhereQueryBuilder':
        return self.where(column, value, operator, Connector.OR)

    def get_where_parts(self) -> List[CriteriaItem]:
        return list(self._where)

    def _where_section(self, formatted: bool = False) -> Section:
        criteria, params = render_criteria(self._where, formatted, self.indent_unit)
        return 'where', ('WHERE ' + criteria if criteria else ''), params

    def get_where_string(self, formatted: bool = False) -> str:
        return self._where_section(formatted)[1]

    @staticmethod
    def _merge_criteria(target: List[CriteriaItem], source: Sequence[CriteriaItem]) -> None:
        # bracket markers are kept verbatim so nested groups survive the merge
        for item in source:
            if isinstance(item, Bracket):
                if item.is_open:
                    WhereQueryBuilder._open(target, item.connector)
                else:
                    WhereQueryBuilder._close(target)
            else:
                WhereQueryBuilder._add(target, item.column, item.value, item.operator, item.connector)

    def merge_where(self, other: 'WhereQueryBuilder') -> 'WhereQueryBuilder':
        """
        Append the WHERE criteria of another builder to this one.

        Args:
            other: Builder whose WHERE criteria are copied

        Returns:
            The builder itself
        """
        self._merge_criteria(self._where, other.get_where_parts())
        return self
