"""
======================
UPDATE query builder.
======================

Usage:
    from querybuilder import UpdateQueryBuilder

    query = (UpdateQueryBuilder()
        .table('book')
        .set('score', None, 5)
        .set('price', 'price*?', 1.1)
        .where('title', 'Dune'))

    query.get_query_string()
    # 'UPDATE book SET score = ?, price = price*? WHERE title = ? '
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from querybuilder.base_builder import TYPE_UPDATE, Connection, Section, WhereQueryBuilder
from querybuilder.select_builder import SelectQueryBuilder


@dataclass
class SetSpec:
    """One SET assignment.

    Attributes:
        column: Assigned column
        expression: None/'' for a plain ``?``, a SQL expression, or a
            SelectQueryBuilder subquery
        values: Values bound to the assignment's placeholders
    """
    column: str
    expression: Any = None
    values: Any = None


class UpdateQueryBuilder(WhereQueryBuilder):
    """Builder for UPDATE statements."""

    query_type = TYPE_UPDATE

    def __init__(self, connection: Optional[Connection] = None):
        super().__init__(connection)
        self._table: Optional[str] = None
        self._set: List[SetSpec] = []

    def table(self, table: str) -> 'UpdateQueryBuilder':
        self._table = table
        return self

    def get_table(self) -> Optional[str]:
        return self._table

    def _table_section(self, formatted: bool = False) -> Section:
        table = (self._table or '').strip()
        if not table:
            return 'table', '', []
        fragment = f"UPDATE {self._options_prefix()}{table} " + ('\n' if formatted else '')
        return 'table', fragment, []

    def get_table_string(self, formatted: bool = False) -> str:
        return self._table_section(formatted)[1]

    def set(self, column: str, expression: Any = None, values: Any = None) -> 'UpdateQueryBuilder':
        """
        Add a SET assignment.

        Args:
            column: Assigned column
            expression: None or '' to assign a bound value (``col = ?``), a
                SQL expression rendered verbatim (its ``?`` placeholders
                take ``values``), or a SelectQueryBuilder subquery
            values: Value, or list of values, bound to the assignment;
                ignored for subqueries

        Returns:
            The builder itself

        Example:
            >>> UpdateQueryBuilder().table('book').set('price', 'score*2').get_set_string()
            'SET price = score*2 '
        """
        if isinstance(expression, SelectQueryBuilder):
            values = None
        self._set.append(SetSpec(column, expression, values))
        return self

    def get_set_parts(self) -> List[SetSpec]:
        return list(self._set)

    @staticmethod
    def _bind(values: Any) -> List[Any]:
        return list(values) if isinstance(values, (list, tuple)) else [values]

    def _set_section(self, formatted: bool = False) -> Section:
        if not self._set:
            return 'set', '', []

        newline = '\n' if formatted else ''
        assignments = []
        params: List[Any] = []
        for part in self._set:
            expression = part.expression
            if isinstance(expression, SelectQueryBuilder):
                sub_sql, sub_params = expression.build(formatted)
                assignments.append(f"{part.column} = ({newline}{sub_sql})")
                params.extend(sub_params)
            elif expression is None or expression == '':
                assignments.append(f"{part.column} = ?")
                params.extend(self._bind(part.values))
            else:
                assignments.append(f"{part.column} = {expression}")
                if '?' in str(expression) and part.values is not None:
                    params.extend(self._bind(part.values))

        fragment = 'SET ' + newline + (', ' + newline).join(assignments) + ' ' + newline
        return 'set', fragment, params

    def get_set_string(self, formatted: bool = False) -> str:
        return self._set_section(formatted)[1]

    def _is_degenerate(self) -> bool:
        return not (self._table or '').strip()

    def _sections(self, formatted: bool = False) -> List[Section]:
        return [
            self._table_section(formatted),
            self._set_section(formatted),
            self._where_section(formatted),
        ]
