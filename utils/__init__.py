"""
==========================
Utility Functions Package.
==========================

Database connectivity helpers used to execute query builders.

Modules:
    database_utils: SQLAlchemy connection adapter and health check
"""

__version__ = "1.0.0"
__all__ = [
    'QueryResult',
    'SQLAlchemyConnection',
    'convert_placeholders',
    'create_sqlalchemy_engine',
    'get_connection',
    'verify_connection'
]

from .database_utils import (
    QueryResult,
    SQLAlchemyConnection,
    convert_placeholders,
    create_sqlalchemy_engine,
    get_connection,
    verify_connection,
)
