"""
======================
DELETE query builder.
======================

Usage:
    from querybuilder import DeleteQueryBuilder, Operator

    query = DeleteQueryBuilder().from_('book').where('score', 2, Operator.LESS_THAN)
    query.get_query_string()
    # 'DELETE FROM book WHERE score < ? '
"""

from typing import List, Optional

from querybuilder.base_builder import TYPE_DELETE, Connection, Section, WhereQueryBuilder


class DeleteQueryBuilder(WhereQueryBuilder):
    """Builder for DELETE statements."""

    query_type = TYPE_DELETE

    def __init__(self, connection: Optional[Connection] = None):
        super().__init__(connection)
        self._table: Optional[str] = None

    def from_(self, table: str) -> 'DeleteQueryBuilder':
        """Set the table rows are deleted from."""
        self._table = table
        return self

    delete_from = from_

    def get_from_table(self) -> Optional[str]:
        return self._table

    def _from_section(self, formatted: bool = False) -> Section:
        table = (self._table or '').strip()
        if not table:
            return 'from', '', []
        fragment = f"DELETE {self._options_prefix()}FROM {table} " + ('\n' if formatted else '')
        return 'from', fragment, []

    def get_from_string(self, formatted: bool = False) -> str:
        return self._from_section(formatted)[1]

    def _is_degenerate(self) -> bool:
        return not (self._table or '').strip()

    def _sections(self, formatted: bool = False) -> List[Section]:
        return [self._from_section(formatted), self._where_section(formatted)]
