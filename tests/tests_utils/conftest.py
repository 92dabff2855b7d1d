"""
Shared fixtures for utils/ module tests.

Key fixtures:
- sqlite_connection: SQLAlchemyConnection over an in-memory SQLite database
  seeded with the author / book fixture data.
"""

import pytest

from utils.database_utils import SQLAlchemyConnection, create_sqlalchemy_engine

SCHEMA = [
    """
    CREATE TABLE author (
        id INTEGER NOT NULL PRIMARY KEY,
        first_name VARCHAR(128) NOT NULL,
        last_name VARCHAR(128) NOT NULL
    )
    """,
    """
    CREATE TABLE book (
        id INTEGER NOT NULL PRIMARY KEY,
        title VARCHAR(255) NOT NULL,
        author_id INTEGER NOT NULL,
        published_at DATETIME,
        price REAL,
        score REAL
    )
    """,
]

AUTHORS = [
    (1, 'John Ronald Reuel', 'Tolkien'),
    (2, 'Philip Kindred', 'Dick'),
    (3, 'Frank', 'Herbert'),
]

BOOKS = [
    (1, 'Dune', 3, '1965-01-01 00:00:00', 13.6, 5),
    (2, 'The Man in the High Castles', 2, '1962-01-01 00:00:00', 6, 3),
    (3, 'Do Androids Dream of Electric Sheep?', 2, '1968-01-01 00:00:00', 4.8, 4.5),
    (4, 'Flow my Tears, the Policeman Said', 2, '1974-01-01 00:00:00', 9.05, None),
    (5, 'The Hobbit', 1, '1937-09-21 00:00:00', 5.5, 4),
    (6, 'The Lord of the Rings', 1, '1954-01-01 00:00:00', 12.6, 5),
]


@pytest.fixture
def sqlite_connection():
    """
    Provide a seeded in-memory SQLite database behind SQLAlchemyConnection.
    """
    engine = create_sqlalchemy_engine('sqlite://', echo=False)

    with engine.begin() as conn:
        for statement in SCHEMA:
            conn.exec_driver_sql(statement)
        conn.exec_driver_sql(
            'INSERT INTO author (id, first_name, last_name) VALUES (?, ?, ?)', AUTHORS
        )
        conn.exec_driver_sql(
            'INSERT INTO book (id, title, author_id, published_at, price, score) VALUES (?, ?, ?, ?, ?, ?)',
            BOOKS
        )

    connection = SQLAlchemyConnection(engine)
    yield connection
    connection.dispose()
