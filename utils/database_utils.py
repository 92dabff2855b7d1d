"""
==================================================
SQLAlchemy connection adapter for query builders.
==================================================

Implements the querybuilder Connection collaborator on top of a SQLAlchemy
Engine, so that builders can quote literals and execute themselves.

The builders always render ``?`` placeholders. Before execution the adapter
rewrites them to the paramstyle of the engine's DBAPI driver (``?`` for
sqlite3, ``%s`` for psycopg2/pymysql, ``:1`` for numeric drivers), leaving
quoted literals and identifiers untouched.

Key Features:
    - Engine creation from config (in-memory SQLite shares one connection)
    - Dialect-aware literal quoting
    - Buffered results: rows, row count and last inserted id
    - Health check utility

Example:
    >>> from querybuilder import SelectQueryBuilder
    >>> from utils.database_utils import get_connection
    >>>
    >>> connection = get_connection('sqlite://')
    >>> _ = connection.execute('CREATE TABLE book (id INTEGER, title TEXT)', [])
    >>> SelectQueryBuilder(connection).from_('book').query()
    []
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import String

from core.config import DatabaseConfig, config
from querybuilder.exceptions import ConnectionAdapterError

logger = logging.getLogger(__name__)

# quoted literal, quoted identifier, placeholder, or percent sign
_TOKEN_PATTERN = re.compile(r"'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\"|\?|%")

_INSERT_PATTERN = re.compile(r'\s*(INSERT|REPLACE)\b', re.IGNORECASE)

_SUPPORTED_PARAMSTYLES = ('qmark', 'format', 'pyformat', 'numeric')


@dataclass
class QueryResult:
    """Buffered outcome of one executed statement.

    Attributes:
        rows: Fetched rows as dictionaries (empty for non-SELECT statements)
        rowcount: Rows affected, as reported by the driver
        lastrowid: Id generated by an INSERT, when the driver reports one
    """

    rows: List[Dict[str, Any]] = field(default_factory=list)
    rowcount: int = 0
    lastrowid: Optional[Any] = None


def convert_placeholders(sql: str, paramstyle: str, escape_percent: bool = True) -> str:
    """
    Rewrite ``?`` placeholders to a DBAPI paramstyle.

    Args:
        sql: SQL text with ``?`` placeholders
        paramstyle: Target DBAPI paramstyle
        escape_percent: Double literal ``%`` signs for format/pyformat drivers

    Returns:
        SQL text using the target placeholders

    Raises:
        ConnectionAdapterError: If the paramstyle is not supported

    Example:
        >>> convert_placeholders("SELECT * FROM book WHERE title LIKE '%?%' AND id = ?", 'format')
        "SELECT * FROM book WHERE title LIKE '%%?%%' AND id = %s"
    """
    if paramstyle not in _SUPPORTED_PARAMSTYLES:
        message = f"Unsupported DBAPI paramstyle: {paramstyle}"
        logger.error(message)
        raise ConnectionAdapterError(message)

    if paramstyle == 'qmark':
        return sql

    position = 0

    def replace(match: re.Match) -> str:
        nonlocal position
        token = match.group(0)
        if token == '?':
            position += 1
            return f":{position}" if paramstyle == 'numeric' else '%s'
        if token == '%':
            return '%%' if escape_percent and paramstyle != 'numeric' else '%'
        if escape_percent and paramstyle != 'numeric':
            return token.replace('%', '%%')
        return token

    return _TOKEN_PATTERN.sub(replace, sql)


class SQLAlchemyConnection:
    """Connection collaborator backed by a SQLAlchemy Engine.

    Each execute() call runs in its own transaction (``engine.begin()``) and
    buffers its result, so result handles stay valid after the connection
    is returned to the pool.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._last_insert_id: Optional[Any] = None
        self._literal = String().literal_processor(dialect=engine.dialect)

    @property
    def paramstyle(self) -> str:
        return self.engine.dialect.paramstyle

    def quote(self, value: Any) -> str:
        """Quote a value as a string literal using the engine's dialect."""
        return self._literal(str(value))

    def execute(self, sql: str, params: Sequence[Any]) -> QueryResult:
        """
        Execute a statement and buffer its result.

        Args:
            sql: SQL text with ``?`` placeholders
            params: Bound parameters in placeholder order

        Returns:
            QueryResult handle

        Raises:
            ConnectionAdapterError: If the driver paramstyle is not supported
            sqlalchemy.exc.DBAPIError: On any driver error, unchanged
        """
        params = tuple(params or ())
        statement = convert_placeholders(sql, self.paramstyle, escape_percent=bool(params))
        logger.debug(f"Executing on {self.engine.dialect.name}: {statement}")

        with self.engine.begin() as conn:
            result = conn.exec_driver_sql(statement, params if params else None)
            rowcount = result.rowcount
            if result.returns_rows:
                handle = QueryResult(rows=[dict(row) for row in result.mappings().all()], rowcount=rowcount)
            else:
                handle = QueryResult(rowcount=rowcount, lastrowid=result.lastrowid)

        if handle.lastrowid is not None and _INSERT_PATTERN.match(statement):
            self._last_insert_id = handle.lastrowid
        return handle

    def fetch_all(self, result: QueryResult) -> List[Dict[str, Any]]:
        return list(result.rows)

    def row_count(self, result: QueryResult) -> int:
        return result.rowcount

    def last_insert_id(self) -> Optional[Any]:
        return self._last_insert_id

    def dispose(self) -> None:
        """Close every pooled connection of the underlying engine."""
        self.engine.dispose()


def create_sqlalchemy_engine(url: Optional[str] = None, echo: Optional[bool] = None, **kwargs) -> Engine:
    """
    Create a SQLAlchemy engine from configuration.

    Args:
        url: Database URL (defaults to config.database_url)
        echo: Enable SQL statement logging (defaults to config.database_echo)
        **kwargs: Extra create_engine() arguments

    Returns:
        Configured SQLAlchemy Engine

    Example:
        >>> engine = create_sqlalchemy_engine('sqlite://')
        >>> with engine.connect() as conn:
        ...     result = conn.execute(text("SELECT 1"))
    """
    url = url or config.database_url
    echo = config.database_echo if echo is None else echo

    if DatabaseConfig(url).is_sqlite_memory():
        # one shared connection, otherwise every checkout sees an empty database
        kwargs.setdefault('poolclass', StaticPool)
        kwargs.setdefault('connect_args', {'check_same_thread': False})
    elif not url.startswith('sqlite'):
        kwargs.setdefault('pool_pre_ping', True)

    logger.debug(f"Creating SQLAlchemy engine for {url}")
    return create_engine(url, echo=echo, **kwargs)


def get_connection(url: Optional[str] = None, echo: Optional[bool] = None) -> SQLAlchemyConnection:
    """Create an engine and wrap it in a SQLAlchemyConnection."""
    return SQLAlchemyConnection(create_sqlalchemy_engine(url, echo))


def verify_connection(engine: Optional[Engine] = None) -> Tuple[bool, Optional[str]]:
    """
    Verify the database answers a trivial query.

    Args:
        engine: Engine to check (defaults to a new engine from config)

    Returns:
        Tuple of (success: bool, message: str)

    Example:
        >>> success, message = verify_connection()
        >>> if not success:
        ...     print(f"❌ {message}")
    """
    engine = engine or create_sqlalchemy_engine()
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning(f"⏳ Database not available: {e}")
        return False, f"Connection test failed: {str(e)}"

    return True, f"Connected to {engine.dialect.name} database at {engine.url.render_as_string(hide_password=True)}"
