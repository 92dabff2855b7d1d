"""
Shared fixtures for the query builder tests.

Key fixtures:
- author_subquery: SelectQueryBuilder used as IN / EXISTS subquery.
- old_book_select: SelectQueryBuilder over OldBook used by INSERT ... SELECT and UPDATE SET.
- nested_where_builder: SelectQueryBuilder holding a bracketed WHERE clause.
"""

import pytest

from querybuilder import Connector, Operator, SelectQueryBuilder


@pytest.fixture
def author_subquery():
    """SELECT id FROM author WHERE last_name LIKE ?, bound to 'D%'."""
    return (SelectQueryBuilder()
            .select('id')
            .from_('author')
            .where('last_name', 'D%', Operator.LIKE))


@pytest.fixture
def old_book_select():
    """SELECT AVG(price) FROM OldBook AS o, without parameters."""
    return SelectQueryBuilder().select('AVG(price)').from_('OldBook', 'o')


@pytest.fixture
def nested_where_builder():
    """
    Builder with WHERE title != 'Dune' OR ( score >= 5 AND score <= 10 ).
    """
    return (SelectQueryBuilder()
            .from_('book')
            .where('title', 'Dune', Operator.NOT_EQUALS)
            .open_where(Connector.OR)
            .where('score', 5, Operator.GREATER_THAN_OR_EQUAL)
            .where('score', 10, Operator.LESS_THAN_OR_EQUAL)
            .close_where())
