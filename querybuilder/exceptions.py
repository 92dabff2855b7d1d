"""
=================================
Query builder exception hierarchy.
=================================

All exceptions raised by the builders derive from QueryBuilderError so that
callers can catch builder misuse in one place. Errors coming from the
database driver or SQLAlchemy are never wrapped; they propagate unchanged.
"""


class QueryBuilderError(Exception):
    """Base exception for every error raised by the query builders."""
    pass


class InvalidCriteriaError(QueryBuilderError, ValueError):
    """Raised when a WHERE/HAVING criterion cannot be built from its value.

    BETWEEN and NOT BETWEEN need a list or tuple with exactly two elements.
    """
    pass


class FluentStateError(QueryBuilderError):
    """Raised when elif_(), else_() or endif() is called without an if_()."""
    pass


class ConnectionAdapterError(QueryBuilderError):
    """Raised when the connection adapter cannot translate a statement."""
    pass
