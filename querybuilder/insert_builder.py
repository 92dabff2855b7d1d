"""
======================
INSERT query builder.
======================

Builds INSERT and REPLACE statements, either from rows of values or from a
nested SelectQueryBuilder (INSERT ... SELECT).

Usage:
    from querybuilder import InsertQueryBuilder

    query = (InsertQueryBuilder()
        .into('book', ['id', 'title'])
        .values([(7, 'Ubik'), (8, 'Valis')]))

    query.get_query_string()
    # 'INSERT INTO book (id, title) VALUES (?, ?), (?, ?) '
    query.get_bound_parameters()
    # [7, 'Ubik', 8, 'Valis']
"""

from typing import Any, List, Optional, Sequence

from querybuilder.base_builder import TYPE_INSERT, Connection, QueryBuilder, Section
from querybuilder.select_builder import SelectQueryBuilder


class InsertQueryBuilder(QueryBuilder):
    """Builder for INSERT / REPLACE statements."""

    query_type = TYPE_INSERT

    def __init__(self, connection: Optional[Connection] = None):
        super().__init__(connection)
        self._replace = False
        self._into_table: Optional[str] = None
        self._into_columns: List[str] = []
        self._values: List[List[Any]] = []
        self._select: Optional[SelectQueryBuilder] = None

    def insert(self) -> 'InsertQueryBuilder':
        """Use the INSERT keyword (default)."""
        self._replace = False
        return self

    def replace(self) -> 'InsertQueryBuilder':
        """Use the REPLACE keyword."""
        self._replace = True
        return self

    def is_replace(self) -> bool:
        return self._replace

    # INTO

    def into(self, table: str, columns: Optional[Sequence[str]] = None) -> 'InsertQueryBuilder':
        """
        Set the target table and the optional column list.

        Args:
            table: Target table
            columns: Column names, in the order of the inserted values

        Returns:
            The builder itself
        """
        self._into_table = table
        self._into_columns = list(columns or [])
        return self

    def get_into_table(self) -> Optional[str]:
        return self._into_table

    def get_into_columns(self) -> List[str]:
        return list(self._into_columns)

    def _into_section(self, formatted: bool = False) -> Section:
        table = (self._into_table or '').strip()
        if not table:
            return 'into', '', []

        keyword = 'REPLACE' if self._replace else 'INSERT'
        fragment = f"{keyword} {self._options_prefix()}INTO {table} "
        if self._into_columns:
            fragment += '(' + ', '.join(self._into_columns) + ') '
        if formatted:
            fragment += '\n'
        return 'into', fragment, []

    def get_into_string(self, formatted: bool = False) -> str:
        return self._into_section(formatted)[1]

    # VALUES

    def values(self, values: Any) -> 'InsertQueryBuilder':
        """
        Append one row, or several rows, of values.

        Args:
            values: A row (list/tuple of column values), a list of rows, or
                a single scalar for a one-column row. Empty rows are
                skipped, since ``VALUES ()`` is not valid SQL.

        Returns:
            The builder itself

        Example:
            >>> InsertQueryBuilder().into('book').values([1, 'Dune']).values([[2, 'Ubik']]).get_values()
            [[1, 'Dune'], [2, 'Ubik']]
        """
        row = list(values) if isinstance(values, (list, tuple)) else [values]

        if any(isinstance(value, (list, tuple)) for value in row):
            rows = [list(value) if isinstance(value, (list, tuple)) else [value] for value in row]
        else:
            rows = [row]

        self._values.extend(row for row in rows if row)
        return self

    def get_values(self) -> List[List[Any]]:
        return [list(row) for row in self._values]

    def _values_section(self, formatted: bool = False) -> Section:
        if not self._values:
            return 'values', '', []

        separator = ', \n' if formatted else ', '
        rows = separator.join('(' + ', '.join('?' for _ in row) + ')' for row in self._values)
        params = [value for row in self._values for value in row]

        if formatted:
            return 'values', 'VALUES \n' + rows + ' \n', params
        return 'values', 'VALUES ' + rows + ' ', params

    def get_values_string(self, formatted: bool = False) -> str:
        return self._values_section(formatted)[1]

    # INSERT ... SELECT

    def select(self, query: SelectQueryBuilder) -> 'InsertQueryBuilder':
        """Insert the rows returned by a SELECT instead of VALUES."""
        self._select = query
        return self

    def get_select(self) -> Optional[SelectQueryBuilder]:
        return self._select

    def _select_section(self, formatted: bool = False) -> Section:
        if self._select is None:
            return 'select', '', []
        sql, params = self._select.build(formatted)
        return 'select', sql, params

    def get_select_string(self, formatted: bool = False) -> str:
        return self._select_section(formatted)[1]

    # Query

    def _is_degenerate(self) -> bool:
        return not (self._into_table or '').strip()

    def _sections(self, formatted: bool = False) -> List[Section]:
        body = self._select_section(formatted) if self._select is not None else self._values_section(formatted)
        return [self._into_section(formatted), body]
