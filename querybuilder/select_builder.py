"""
======================
SELECT query builder.
======================

Builds SELECT statements clause by clause:

- select: columns with optional aliases, SELECT * when none are given
- from_: table or derived table (a nested SelectQueryBuilder)
- join / inner_join / left_join / right_join: joins with ON shortcuts
- where / having: nested boolean criteria (see querybuilder.criteria)
- group_by / order_by: ordered column lists
- limit / offset / page / paginate: LIMIT and OFFSET
- merge_*: copy the parts of another SelectQueryBuilder into this one
- count: run the query as SELECT COUNT(*) and return the scalar

Usage:
    from querybuilder import Operator, SelectQueryBuilder

    query = (SelectQueryBuilder()
        .select('b.id')
        .select('a.last_name', 'author')
        .from_('book', 'b')
        .inner_join('author', 'a', 'a.id = b.author_id')
        .where('b.price', [5, 10], Operator.BETWEEN)
        .order_by('b.title')
        .paginate(2, 20))

    sql, params = query.build()
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from querybuilder.base_builder import (
    TYPE_SELECT,
    Connection,
    Section,
    WhereQueryBuilder,
)
from querybuilder.criteria import Connector, CriteriaItem, Operator, render_criteria

logger = logging.getLogger(__name__)


class JoinType(str, Enum):
    """JOIN types."""
    INNER = 'INNER JOIN'
    LEFT = 'LEFT JOIN'
    RIGHT = 'RIGHT JOIN'

    @classmethod
    def coerce(cls, value: Any) -> 'JoinType':
        """Return the matching join type, INNER for anything unknown."""
        try:
            return cls(value)
        except ValueError:
            return cls.INNER


class SortOrder(str, Enum):
    """ORDER BY / GROUP BY directions."""
    ASC = 'ASC'
    DESC = 'DESC'


def _sort_order(value: Any) -> Optional[SortOrder]:
    try:
        return SortOrder(value)
    except ValueError:
        return None


@dataclass
class JoinSpec:
    """One JOIN clause."""
    table: Any
    alias: Optional[str] = None
    criteria: Optional[List[str]] = None
    type: JoinType = JoinType.INNER


@dataclass
class OrderSpec:
    """One GROUP BY or ORDER BY column."""
    column: str
    order: Optional[SortOrder] = None


@dataclass
class LimitSpec:
    """LIMIT part; offset and page are mutually exclusive."""
    limit: int = 0
    offset: Optional[int] = 0
    page: Optional[int] = None


@dataclass
class FromSpec:
    """FROM table (name or derived SelectQueryBuilder) and its alias."""
    table: Any = None
    alias: Optional[str] = None


class SelectQueryBuilder(WhereQueryBuilder):
    """Builder for SELECT statements."""

    query_type = TYPE_SELECT

    def __init__(self, connection: Optional[Connection] = None):
        super().__init__(connection)
        self._select: Dict[str, Optional[str]] = {}
        self._from = FromSpec()
        self._joins: List[JoinSpec] = []
        self._group_by: List[OrderSpec] = []
        self._having: List[CriteriaItem] = []
        self._order_by: List[OrderSpec] = []
        self._limit = LimitSpec()

    # Options

    def distinct(self) -> 'SelectQueryBuilder':
        return self.add_option('DISTINCT')

    def calc_found_rows(self) -> 'SelectQueryBuilder':
        return self.add_option('SQL_CALC_FOUND_ROWS')

    # SELECT

    def select(
        self,
        column: Union[str, Sequence[str], Mapping[str, Optional[str]]],
        alias: Optional[str] = None
    ) -> 'SelectQueryBuilder':
        """
        Add a column, table or expression to the SELECT list.

        Args:
            column: Column expression, a list of expressions, or a mapping
                of expression to alias
            alias: Optional alias (single column form only)

        Returns:
            The builder itself
        """
        if isinstance(column, Mapping):
            for name, name_alias in column.items():
                self._select[name] = name_alias
        elif isinstance(column, (list, tuple)):
            for name in column:
                self._select[name] = None
        elif column is not None and column != '':
            self._select[str(column)] = alias
        return self

    def get_select_parts(self) -> Dict[str, Optional[str]]:
        return dict(self._select)

    def _select_section(self, formatted: bool = False) -> Section:
        columns = ', '.join(
            column if alias is None else f"{column} AS {alias}"
            for column, alias in self._select.items()
        )
        if not columns:
            columns = '*'
        elif self._options:
            columns = self._options_prefix() + columns

        return 'select', 'SELECT ' + columns + ' ' + ('\n' if formatted else ''), []

    def get_select_string(self, formatted: bool = False) -> str:
        return self._select_section(formatted)[1]

    # FROM

    def from_(self, table: Any, alias: Optional[str] = None) -> 'SelectQueryBuilder':
        """
        Set the FROM table.

        Args:
            table: Table name, or a SelectQueryBuilder used as derived table
            alias: Optional alias

        Returns:
            The builder itself
        """
        self._from = FromSpec(table, alias or None)
        return self

    def get_from_table(self) -> Any:
        return self._from.table

    def get_from_alias(self) -> Optional[str]:
        return self._from.alias

    def get_from_part(self) -> FromSpec:
        return self._from

    def _from_section(self, formatted: bool = False) -> Section:
        table = self._from.table
        if table is None or table == '':
            return 'from', '', []

        params: List[Any] = []
        if isinstance(table, SelectQueryBuilder):
            sub_sql, params = table.build(formatted)
            source = '(' + (' \n' if formatted else '') + sub_sql + ')'
        else:
            source = str(table)

        if self._from.alias:
            source += ' AS ' + self._from.alias

        fragment = 'FROM ' + source.strip() + ' ' + ('\n' if formatted else '')
        return 'from', fragment + self.get_join_string(formatted), params

    def get_from_string(self, formatted: bool = False) -> str:
        return self._from_section(formatted)[1]

    # JOIN

    def join(
        self,
        table: str,
        alias: Optional[str] = None,
        criteria: Optional[Union[str, Sequence[str]]] = None,
        type: Any = JoinType.INNER
    ) -> 'SelectQueryBuilder':
        """
        Add a JOIN clause.

        ON criteria without an equals sign are column names joined against
        the same column of the previous table (the previous join, or FROM).

        Args:
            table: Joined table
            alias: Optional alias
            criteria: ON condition or list of conditions joined with AND
            type: JoinType member or value; unknown types become INNER

        Returns:
            The builder itself

        Example:
            >>> SelectQueryBuilder().from_('book', 'b').join('author', 'a', 'author_id').get_join_string()
            'INNER JOIN author AS a ON b.author_id = a.author_id '
        """
        if isinstance(criteria, str):
            criteria = [criteria]
        elif criteria is not None:
            criteria = list(criteria)

        if table:
            self._joins.append(JoinSpec(table, alias, criteria, JoinType.coerce(type)))
        return self

    def inner_join(self, table: str, alias: Optional[str] = None, criteria=None) -> 'SelectQueryBuilder':
        return self.join(table, alias, criteria, JoinType.INNER)

    def left_join(self, table: str, alias: Optional[str] = None, criteria=None) -> 'SelectQueryBuilder':
        return self.join(table, alias, criteria, JoinType.LEFT)

    def right_join(self, table: str, alias: Optional[str] = None, criteria=None) -> 'SelectQueryBuilder':
        return self.join(table, alias, criteria, JoinType.RIGHT)

    def get_join_parts(self) -> List[JoinSpec]:
        return list(self._joins)

    def _join_against_previous(self, index: int, join: JoinSpec, column: str) -> str:
        if index > 0:
            previous = self._joins[index - 1]
            previous_name = previous.alias or previous.table
        else:
            previous_name = self._from.alias or self._from.table
        return f"{previous_name}.{column} = {join.alias or join.table}.{column}"

    def get_join_string(self, formatted: bool = False) -> str:
        newline = '\n' if formatted else ''
        sql = ''
        for index, join in enumerate(self._joins):
            clause = f"{join.type.value} {join.table}"
            if join.alias:
                clause += ' AS ' + join.alias
            sql += clause.strip() + ' ' + newline

            if join.criteria:
                conditions = [
                    criterion if '=' in criterion
                    else self._join_against_previous(index, join, criterion)
                    for criterion in join.criteria
                ]
                sql += 'ON ' + ''.join(
                    ('AND ' if position else '') + condition.strip() + ' ' + newline
                    for position, condition in enumerate(conditions)
                )
        return sql

    # WHERE

    def where(self, column, value, operator=Operator.EQUALS, connector=Connector.AND) -> 'SelectQueryBuilder':
        return super().where(column, value, operator, connector)

    # GROUP BY

    def group_by(self, column: str, order: Any = None) -> 'SelectQueryBuilder':
        """Add a GROUP BY column; unknown directions are dropped."""
        if column is not None and column != '':
            self._group_by.append(OrderSpec(column, _sort_order(order)))
        return self

    def get_group_by_parts(self) -> List[OrderSpec]:
        return list(self._group_by)

    def _group_by_section(self, formatted: bool = False) -> Section:
        columns = ', '.join(
            part.column + (' ' + part.order.value if part.order else '')
            for part in self._group_by
        )
        if not columns:
            return 'group_by', '', []
        return 'group_by', 'GROUP BY ' + columns + ' ' + ('\n' if formatted else ''), []

    def get_group_by_string(self, formatted: bool = False) -> str:
        return self._group_by_section(formatted)[1]

    # HAVING

    def open_having(self, connector: Any = Connector.AND) -> 'SelectQueryBuilder':
        self._open(self._having, connector)
        return self

    def and_open_having(self) -> 'SelectQueryBuilder':
        return self.open_having(Connector.AND)

    def or_open_having(self) -> 'SelectQueryBuilder':
        return self.open_having(Connector.OR)

    def close_having(self) -> 'SelectQueryBuilder':
        self._close(self._having)
        return self

    def having(
        self,
        column: Optional[str],
        value: Any,
        operator: Any = Operator.EQUALS,
        connector: Any = Connector.AND
    ) -> 'SelectQueryBuilder':
        """Add a HAVING condition; same arguments as where()."""
        self._add(self._having, column, value, operator, connector)
        return self

    def and_having(self, column: Optional[str], value: Any, operator: Any = Operator.EQUALS) -> 'SelectQueryBuilder':
        return self.having(column, value, operator, Connector.AND)

    def or_having(self, column: Optional[str], value: Any, operator: Any = Operator.EQUALS) -> 'SelectQueryBuilder':
        return self.having(column, value, operator, Connector.OR)

    def get_having_parts(self) -> List[CriteriaItem]:
        return list(self._having)

    def _having_section(self, formatted: bool = False) -> Section:
        criteria, params = render_criteria(self._having, formatted, self.indent_unit)
        return 'having', ('HAVING ' + criteria if criteria else ''), params

    def get_having_string(self, formatted: bool = False) -> str:
        return self._having_section(formatted)[1]

    # ORDER BY

    def order_by(self, column: str, order: Any = SortOrder.ASC) -> 'SelectQueryBuilder':
        """Add an ORDER BY column; unknown directions become ASC."""
        if column is not None and column != '':
            self._order_by.append(OrderSpec(column, _sort_order(order) or SortOrder.ASC))
        return self

    def get_order_by_parts(self) -> List[OrderSpec]:
        return list(self._order_by)

    def _order_by_section(self, formatted: bool = False) -> Section:
        columns = ', '.join(f"{part.column} {part.order.value}" for part in self._order_by)
        if not columns:
            return 'order_by', '', []
        return 'order_by', 'ORDER BY ' + columns + ' ' + ('\n' if formatted else ''), []

    def get_order_by_string(self, formatted: bool = False) -> str:
        return self._order_by_section(formatted)[1]

    # LIMIT / OFFSET

    def limit(self, limit: Optional[int]) -> 'SelectQueryBuilder':
        self._limit.limit = int(limit or 0)
        return self

    def offset(self, offset: Optional[int]) -> 'SelectQueryBuilder':
        """Set the OFFSET; clears any page set with page()."""
        self._limit.offset = int(offset or 0)
        self._limit.page = None
        return self

    def page(self, page: Optional[int]) -> 'SelectQueryBuilder':
        """Set the page number (1-based); clears any explicit offset."""
        self._limit.page = int(page) if page else 1
        self._limit.offset = None
        return self

    def paginate(self, page: Optional[int], max_per_page: int) -> 'SelectQueryBuilder':
        return self.limit(max_per_page).page(page)

    def get_limit(self) -> int:
        return self._limit.limit

    def get_offset(self) -> int:
        """Return the offset, derived from page and limit when a page is set."""
        if self._limit.page:
            return self._limit.limit * (self._limit.page - 1)
        return self._limit.offset or 0

    def get_page(self) -> Optional[int]:
        """Return the page, derived from offset and limit when an offset is set."""
        if self._limit.page:
            return self._limit.page
        if self._limit.offset and self._limit.limit:
            return self._limit.offset // self._limit.limit + 1
        return None

    def get_limit_part(self) -> LimitSpec:
        return LimitSpec(self._limit.limit, self._limit.offset, self._limit.page)

    def _limit_section(self, formatted: bool = False) -> Section:
        if not self._limit.limit:
            return 'limit', '', []
        newline = '\n' if formatted else ''
        fragment = f"LIMIT {self._limit.limit} {newline}OFFSET {self.get_offset()} {newline}"
        return 'limit', fragment, []

    def get_limit_string(self, formatted: bool = False) -> str:
        return self._limit_section(formatted)[1]

    # Merging

    def merge_select(self, other: 'SelectQueryBuilder') -> 'SelectQueryBuilder':
        """Copy the options and SELECT columns of another builder."""
        for option in other.get_options():
            self.add_option(option)
        return self.select(other.get_select_parts())

    def merge_join(self, other: 'SelectQueryBuilder') -> 'SelectQueryBuilder':
        for join in other.get_join_parts():
            self.join(join.table, join.alias, join.criteria, join.type)
        return self

    def merge_where(self, other: WhereQueryBuilder) -> 'SelectQueryBuilder':
        return super().merge_where(other)

    def merge_group_by(self, other: 'SelectQueryBuilder') -> 'SelectQueryBuilder':
        for part in other.get_group_by_parts():
            self.group_by(part.column, part.order)
        return self

    def merge_having(self, other: 'SelectQueryBuilder') -> 'SelectQueryBuilder':
        self._merge_criteria(self._having, other.get_having_parts())
        return self

    def merge_order_by(self, other: 'SelectQueryBuilder') -> 'SelectQueryBuilder':
        for part in other.get_order_by_parts():
            self.order_by(part.column, part.order)
        return self

    def merge_limit(self, other: 'SelectQueryBuilder') -> 'SelectQueryBuilder':
        self.limit(other.get_limit())
        return self.offset(other.get_offset())

    def merge(
        self,
        other: 'SelectQueryBuilder',
        overwrite_limit: bool = True,
        merge_order_by: bool = True
    ) -> 'SelectQueryBuilder':
        """
        Merge every part of another SelectQueryBuilder into this one.

        Args:
            other: Builder to merge
            overwrite_limit: If False, keep this builder's LIMIT/OFFSET
            merge_order_by: If False, skip the ORDER BY columns

        Returns:
            The builder itself
        """
        self.merge_select(other)
        self.merge_join(other)
        self.merge_where(other)
        self.merge_group_by(other)
        self.merge_having(other)

        if merge_order_by:
            self.merge_order_by(other)

        if overwrite_limit:
            self.merge_limit(other)

        return self

    # Query

    def _is_degenerate(self) -> bool:
        table = self._from.table
        return (table is None or table == '') and not self._select

    def _sections(self, formatted: bool = False) -> List[Section]:
        return [
            self._select_section(formatted),
            self._from_section(formatted),
            self._where_section(formatted),
            self._group_by_section(formatted),
            self._having_section(formatted),
            self._order_by_section(formatted),
            self._limit_section(formatted),
        ]

    def count(self) -> Optional[int]:
        """
        Run the query as SELECT COUNT(*) and return the count.

        The SELECT, ORDER BY and LIMIT parts are swapped out for the
        duration of the call and restored afterwards, even on error.

        Returns:
            The row count, or None without a connection or FROM table
        """
        if self._connection is None:
            return None

        saved = (self._select, self._order_by, self._limit)
        self._select = {'COUNT(*)': None}
        self._order_by = []
        self._limit = LimitSpec()
        try:
            logger.debug("Counting rows with a temporary COUNT(*) select")
            rows = self.query()
        finally:
            self._select, self._order_by, self._limit = saved

        if not rows:
            return None
        first = rows[0]
        values = list(first.values()) if isinstance(first, Mapping) else list(first)
        return values[0] if values else None
