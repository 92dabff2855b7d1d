"""
==========================================================
Comprehensive pytest suite for querybuilder/select_builder.py
==========================================================

Sections:
---------
1. Unit tests - SELECT / FROM / JOIN clauses
2. Unit tests - WHERE / GROUP BY / HAVING / ORDER BY clauses
3. Unit tests - LIMIT, OFFSET and pagination
4. Unit tests - Merging builders
5. Unit tests - count() with a mocked connection
6. Smoke tests - Full queries
7. Edge case tests - Degenerate queries, unknown enum values

Available markers:
------------------
unit, smoke, edge_case

How to Execute:
---------------
All tests:          pytest tests/tests_querybuilder/test_select_builder.py -v
By category:        pytest tests/tests_querybuilder/test_select_builder.py -m unit
With coverage:      pytest tests/tests_querybuilder/test_select_builder.py --cov=querybuilder.select_builder
"""

import pytest

from querybuilder import (
    TYPE_SELECT,
    Connector,
    JoinType,
    LimitSpec,
    Operator,
    OrderSpec,
    SelectQueryBuilder,
    SortOrder,
)


# ==========================================
# 1. UNIT TESTS - SELECT / FROM / JOIN
# ==========================================

@pytest.mark.unit
def test_select_star_when_no_columns():
    """
    Test that SELECT * is rendered when no column is selected.
    """
    query = SelectQueryBuilder().from_('book')

    assert query.get_select_string() == 'SELECT * '
    assert query.get_select_string(True) == 'SELECT * \n'
    assert query.get_query_type() == TYPE_SELECT


@pytest.mark.unit
def test_select_columns_and_aliases():
    """
    Test single, list and mapping forms of select().
    """
    query = (SelectQueryBuilder()
             .select('id')
             .select('title', 't')
             .select(['price', 'score'])
             .select({'COUNT(*)': 'total'}))

    assert query.get_select_parts() == {
        'id': None, 'title': 't', 'price': None, 'score': None, 'COUNT(*)': 'total',
    }
    assert query.get_select_string() == 'SELECT id, title AS t, price, score, COUNT(*) AS total '


@pytest.mark.unit
def test_select_options_prepended():
    """
    Test that DISTINCT and SQL_CALC_FOUND_ROWS prefix the column list.
    """
    query = SelectQueryBuilder().distinct().calc_found_rows().select('id')

    assert query.get_options() == ['DISTINCT', 'SQL_CALC_FOUND_ROWS']
    assert query.get_select_string() == 'SELECT DISTINCT SQL_CALC_FOUND_ROWS id '


@pytest.mark.edge_case
def test_select_options_ignored_for_star():
    """
    Test that options are not rendered with SELECT *.
    """
    assert SelectQueryBuilder().distinct().get_select_string() == 'SELECT * '


@pytest.mark.unit
def test_from_with_alias():
    """
    Test FROM rendering with and without alias.
    """
    query = SelectQueryBuilder().from_('book')
    assert query.get_from_string() == 'FROM book '

    query.from_('book', 'b')
    assert query.get_from_table() == 'book'
    assert query.get_from_alias() == 'b'
    assert query.get_from_string() == 'FROM book AS b '
    assert query.get_from_string(True) == 'FROM book AS b \n'


@pytest.mark.unit
def test_from_derived_table():
    """
    Test that a builder used as FROM table is inlined with its parameters.
    """
    derived = SelectQueryBuilder().select('id').from_('book').where('score', 3, Operator.GREATER_THAN)
    query = SelectQueryBuilder().select('id').from_(derived, 's').where('id', 2, Operator.LESS_THAN)

    assert query.get_query_string() == (
        'SELECT id FROM (SELECT id FROM book WHERE score > ? ) AS s WHERE id < ? '
    )
    assert query.get_bound_parameters() == [3, 2]
    assert query.get_bound_parameters(section='from') == [3]
    assert query.get_bound_parameters(section='where') == [2]


@pytest.mark.unit
def test_from_derived_table_formatted():
    """
    Test the formatted layout of a derived table.
    """
    derived = SelectQueryBuilder().select('id').from_('book')
    query = SelectQueryBuilder().from_(derived, 's')

    assert query.get_from_string(True) == 'FROM ( \nSELECT id \nFROM book \n) AS s \n'


@pytest.mark.unit
def test_join_types():
    """
    Test the INNER / LEFT / RIGHT join helpers.
    """
    query = (SelectQueryBuilder()
             .from_('book', 'b')
             .inner_join('author', 'a', 'a.id = b.author_id')
             .left_join('publisher', 'p', 'p.id = b.publisher_id')
             .right_join('shop', None, 'shop.book_id = b.id'))

    assert [join.type for join in query.get_join_parts()] == [JoinType.INNER, JoinType.LEFT, JoinType.RIGHT]
    assert query.get_join_string() == (
        'INNER JOIN author AS a ON a.id = b.author_id '
        'LEFT JOIN publisher AS p ON p.id = b.publisher_id '
        'RIGHT JOIN shop ON shop.book_id = b.id '
    )


@pytest.mark.unit
def test_join_column_shortcut_uses_previous_table():
    """
    Test that a bare column joins against the previous table or alias.
    """
    query = (SelectQueryBuilder()
             .from_('book', 'b')
             .join('author', 'a', 'author_id')
             .join('country', None, ['country_id']))

    assert query.get_join_string() == (
        'INNER JOIN author AS a ON b.author_id = a.author_id '
        'INNER JOIN country ON a.country_id = country.country_id '
    )


@pytest.mark.unit
def test_join_multiple_criteria_formatted():
    """
    Test that several ON criteria are joined with AND on separate lines.
    """
    query = (SelectQueryBuilder()
             .from_('book', 'b')
             .join('author', 'a', ['a.id = b.author_id', 'a.active = 1']))

    assert query.get_join_string(True) == (
        'INNER JOIN author AS a \nON a.id = b.author_id \nAND a.active = 1 \n'
    )
    assert query.get_from_string() == (
        'FROM book AS b INNER JOIN author AS a ON a.id = b.author_id AND a.active = 1 '
    )


@pytest.mark.edge_case
def test_join_unknown_type_becomes_inner():
    """
    Test that an unknown join type is coerced to INNER JOIN.
    """
    query = SelectQueryBuilder().from_('book').join('author', None, None, 'CROSS JOIN')

    assert query.get_join_parts()[0].type is JoinType.INNER
    assert query.get_join_string() == 'INNER JOIN author '


# =====================================================
# 2. UNIT TESTS - WHERE / GROUP BY / HAVING / ORDER BY
# =====================================================

@pytest.mark.unit
def test_where_helpers_return_builder():
    """
    Test that every WHERE method chains and records its criterion.
    """
    query = SelectQueryBuilder()

    assert query.where('id', 1) is query
    assert query.and_where('score', 2, Operator.GREATER_THAN) is query
    assert query.or_where('title', 'Dune') is query
    assert [item.connector for item in query.get_where_parts()] == [Connector.AND, Connector.AND, Connector.OR]
    assert query.get_where_string() == 'WHERE id = ? AND score > ? OR title = ? '


@pytest.mark.unit
def test_where_nested_formatted(nested_where_builder):
    """
    Test the formatted WHERE string of a nested clause.
    """
    assert nested_where_builder.get_where_string(True) == (
        'WHERE title != ? \nOR \n( \n    score >= ? \n    AND score <= ? \n) \n'
    )


@pytest.mark.unit
def test_group_by():
    """
    Test GROUP BY with and without direction.
    """
    query = SelectQueryBuilder().group_by('author_id').group_by('score', 'DESC')

    assert query.get_group_by_parts() == [OrderSpec('author_id', None), OrderSpec('score', SortOrder.DESC)]
    assert query.get_group_by_string() == 'GROUP BY author_id, score DESC '
    assert query.get_group_by_string(True) == 'GROUP BY author_id, score DESC \n'


@pytest.mark.edge_case
def test_group_by_unknown_order_dropped():
    """
    Test that an unknown GROUP BY direction renders no direction.
    """
    assert SelectQueryBuilder().group_by('x', 'sideways').get_group_by_string() == 'GROUP BY x '


@pytest.mark.unit
def test_having():
    """
    Test HAVING criteria and bracket helpers.
    """
    query = (SelectQueryBuilder()
             .having('COUNT(*)', 2, Operator.GREATER_THAN)
             .open_having(Connector.OR)
             .and_having('SUM(price)', 10, Operator.LESS_THAN)
             .or_having('SUM(price)', 100, Operator.GREATER_THAN)
             .close_having())

    assert query.get_having_string() == 'HAVING COUNT(*) > ? OR ( SUM(price) < ? OR SUM(price) > ? ) '
    assert query.get_bound_parameters(section='having') == [2, 10, 100]
    assert len(query.get_having_parts()) == 5


@pytest.mark.unit
def test_having_bracket_shortcuts():
    """
    Test and_open_having() / or_open_having() as connector shortcuts.
    """
    query = (SelectQueryBuilder()
             .having('COUNT(*)', 2, Operator.GREATER_THAN)
             .or_open_having()
             .having('SUM(price)', 10, Operator.LESS_THAN)
             .close_having()
             .and_open_having()
             .having('AVG(score)', 4, Operator.GREATER_THAN)
             .close_having())

    assert query.get_having_string() == (
        'HAVING COUNT(*) > ? OR ( SUM(price) < ? ) AND ( AVG(score) > ? ) '
    )
    assert query.get_bound_parameters(section='having') == [2, 10, 4]


@pytest.mark.unit
def test_order_by():
    """
    Test ORDER BY with default, explicit and unknown direction.
    """
    query = SelectQueryBuilder().order_by('title').order_by('score', SortOrder.DESC).order_by('id', 'bogus')

    assert [part.order for part in query.get_order_by_parts()] == [SortOrder.ASC, SortOrder.DESC, SortOrder.ASC]
    assert query.get_order_by_string() == 'ORDER BY title ASC, score DESC, id ASC '
    assert query.get_order_by_string(True) == 'ORDER BY title ASC, score DESC, id ASC \n'


# ============================================
# 3. UNIT TESTS - LIMIT / OFFSET / pagination
# ============================================

@pytest.mark.unit
def test_limit_and_offset():
    """
    Test LIMIT / OFFSET rendering.
    """
    query = SelectQueryBuilder().limit(10).offset(20)

    assert query.get_limit() == 10
    assert query.get_offset() == 20
    assert query.get_page() == 3
    assert query.get_limit_string() == 'LIMIT 10 OFFSET 20 '
    assert query.get_limit_string(True) == 'LIMIT 10 \nOFFSET 20 \n'


@pytest.mark.unit
def test_no_limit_renders_nothing():
    """
    Test that a zero limit hides LIMIT and OFFSET.
    """
    query = SelectQueryBuilder().offset(20)

    assert query.get_limit_string() == ''
    assert query.get_page() is None


@pytest.mark.unit
def test_page_derives_offset():
    """
    Test that page() clears the offset and derives it from the limit.
    """
    query = SelectQueryBuilder().limit(10).offset(5).page(3)

    assert query.get_limit_part() == LimitSpec(10, None, 3)
    assert query.get_offset() == 20
    assert query.get_limit_string() == 'LIMIT 10 OFFSET 20 '


@pytest.mark.unit
def test_offset_clears_page():
    """
    Test that offset() clears a page set earlier.
    """
    query = SelectQueryBuilder().limit(10).page(3).offset(5)

    assert query.get_limit_part() == LimitSpec(10, 5, None)
    assert query.get_offset() == 5


@pytest.mark.unit
def test_paginate():
    """
    Test paginate(page, max_per_page).
    """
    query = SelectQueryBuilder().paginate(2, 25)

    assert query.get_limit() == 25
    assert query.get_page() == 2
    assert query.get_offset() == 25


@pytest.mark.edge_case
def test_empty_page_means_first_page():
    """
    Test that page(None) and page(0) select the first page.
    """
    assert SelectQueryBuilder().limit(10).page(None).get_page() == 1
    assert SelectQueryBuilder().limit(10).page(0).get_offset() == 0


# ================================
# 4. UNIT TESTS - Merging
# ================================

@pytest.mark.unit
def test_merge_where_preserves_brackets(nested_where_builder):
    """
    Test that merge_where copies the criteria list verbatim.
    """
    target = SelectQueryBuilder().from_('book')

    target.merge_where(nested_where_builder)

    assert target.get_where_parts() == nested_where_builder.get_where_parts()
    assert target.get_where_string() == nested_where_builder.get_where_string()


@pytest.mark.unit
def test_merge_all_parts():
    """
    Test merge() copies every part of the other builder.
    """
    other = (SelectQueryBuilder()
             .distinct()
             .select('a.last_name')
             .from_('author', 'a')
             .join('country', 'c', 'c.id = a.country_id')
             .where('c.code', 'FR')
             .group_by('a.last_name')
             .having('COUNT(*)', 1, Operator.GREATER_THAN)
             .order_by('a.last_name')
             .limit(5)
             .offset(10))
    query = SelectQueryBuilder().select('b.title').from_('book', 'b').limit(50)

    query.merge(other)

    assert query.get_options() == ['DISTINCT']
    assert query.get_select_parts() == {'b.title': None, 'a.last_name': None}
    assert query.get_from_table() == 'book'
    assert len(query.get_join_parts()) == 1
    assert query.get_bound_parameters() == ['FR', 1]
    assert query.get_order_by_string() == 'ORDER BY a.last_name ASC '
    assert query.get_limit() == 5
    assert query.get_offset() == 10


@pytest.mark.unit
def test_merge_keeps_limit_and_order_when_asked():
    """
    Test merge(overwrite_limit=False, merge_order_by=False).
    """
    other = SelectQueryBuilder().order_by('title').limit(5)
    query = SelectQueryBuilder().from_('book').limit(50)

    query.merge(other, overwrite_limit=False, merge_order_by=False)

    assert query.get_limit() == 50
    assert query.get_order_by_parts() == []


# ======================================
# 5. UNIT TESTS - count()
# ======================================

@pytest.mark.unit
def test_count_returns_scalar_and_restores_parts(fake_connection):
    """
    Test that count() runs a COUNT(*) query and restores the builder.
    """
    fake_connection.fetch_all.return_value = [{'COUNT(*)': 4}]
    query = (SelectQueryBuilder(fake_connection)
             .select('title')
             .from_('book')
             .where('author_id', 2)
             .order_by('title')
             .limit(2))
    before = query.get_query_string()

    assert query.count() == 4

    fake_connection.execute.assert_called_once_with('SELECT COUNT(*) FROM book WHERE author_id = ? ', [2])
    assert query.get_query_string() == before
    assert query.get_select_parts() == {'title': None}
    assert query.get_limit() == 2


@pytest.mark.unit
def test_count_restores_parts_when_execution_fails(fake_connection):
    """
    Test that the SELECT / ORDER BY / LIMIT parts survive a failing count().
    """
    fake_connection.execute.side_effect = RuntimeError('database gone')
    query = SelectQueryBuilder(fake_connection).select('title').from_('book').order_by('title').limit(2)
    before = query.get_query_string()

    with pytest.raises(RuntimeError):
        query.count()

    assert query.get_query_string() == before


@pytest.mark.edge_case
def test_count_without_connection_or_rows(fake_connection):
    """
    Test that count() returns None without a connection or without rows.
    """
    assert SelectQueryBuilder().from_('book').count() is None

    fake_connection.fetch_all.return_value = []
    assert SelectQueryBuilder(fake_connection).from_('book').count() is None


# ================================
# 6. SMOKE TESTS - Full queries
# ================================

@pytest.mark.smoke
def test_scenario_simple_select():
    """
    Test the basic SELECT ... FROM ... WHERE end-to-end scenario.
    """
    query = SelectQueryBuilder().select('id').select('title').from_('book').where('author_id', 2, Operator.EQUALS)

    assert query.get_query_string() == 'SELECT id, title FROM book WHERE author_id = ? '
    assert query.get_bound_parameters() == [2]
    assert str(query) == 'SELECT id, title FROM book WHERE author_id = ? '


@pytest.mark.smoke
def test_full_query_formatted_and_param_order():
    """
    Test every clause together; parameters follow from, where, having.
    """
    derived = SelectQueryBuilder().select('*').from_('book').where('price', 1, Operator.GREATER_THAN)
    query = (SelectQueryBuilder()
             .select('b.author_id')
             .select('COUNT(*)', 'total')
             .from_(derived, 'b')
             .join('author', 'a', 'a.id = b.author_id')
             .where('a.last_name', 'Dick')
             .group_by('b.author_id')
             .having('COUNT(*)', 2, Operator.GREATER_THAN_OR_EQUAL)
             .order_by('total', 'DESC')
             .limit(10))

    assert query.get_query_string() == (
        'SELECT b.author_id, COUNT(*) AS total '
        'FROM (SELECT * FROM book WHERE price > ? ) AS b '
        'INNER JOIN author AS a ON a.id = b.author_id '
        'WHERE a.last_name = ? '
        'GROUP BY b.author_id '
        'HAVING COUNT(*) >= ? '
        'ORDER BY total DESC '
        'LIMIT 10 OFFSET 0 '
    )
    assert query.get_bound_parameters() == [1, 'Dick', 2]
    assert query.build(True)[1] == [1, 'Dick', 2]


# ==========================================
# 7. EDGE CASE TESTS
# ==========================================

@pytest.mark.edge_case
def test_degenerate_select_is_empty():
    """
    Test that a builder without FROM nor columns renders nothing.
    """
    query = SelectQueryBuilder().where('id', 1)

    assert query.get_query_string() == ''
    assert query.get_bound_parameters() == []
    assert query.query() is None


@pytest.mark.edge_case
def test_select_without_from():
    """
    Test that a SELECT of expressions needs no FROM.
    """
    assert SelectQueryBuilder().select('1 + 1').get_query_string() == 'SELECT 1 + 1 '


@pytest.mark.edge_case
def test_rendering_has_no_side_effects(nested_where_builder):
    """
    Test that rendering repeatedly returns identical results.
    """
    first = nested_where_builder.build(True)
    nested_where_builder.get_bound_parameters(section='where')

    assert nested_where_builder.build(True) == first
