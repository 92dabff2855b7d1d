"""
==============================================
Configuration management for the query builder.
==============================================

Loads all configuration from environment variables (.env file) and provides
a centralized Config singleton for application-wide access.

The configuration covers:
- Database connection used by the SQLAlchemy connection adapter
- Indentation used when rendering formatted SQL
- Logging defaults consumed by core.logger

Example:
    >>> from core.config import config
    >>>
    >>> # Database connection
    >>> engine_url = config.database_url
    >>>
    >>> # Formatting
    >>> print(repr(config.builder.indent_unit()))
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean flag from the environment.

    Accepts 1/0, true/false, yes/no and on/off (case-insensitive).
    """
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class DatabaseConfig:
    """Database configuration settings.

    Attributes:
        url: SQLAlchemy database URL used by utils.database_utils
        echo: If True, SQLAlchemy logs every statement it executes
    """

    url: str
    echo: bool = False

    def is_sqlite_memory(self) -> bool:
        """Check whether the URL points at an in-memory SQLite database.

        Returns:
            True for ``sqlite://`` and ``sqlite:///:memory:`` URLs
        """
        return self.url in ('sqlite://', 'sqlite:///:memory:')


@dataclass
class BuilderConfig:
    """Formatting settings shared by every statement builder.

    Attributes:
        indent_char: Character repeated to indent nested criteria
        indent_size: Number of indent characters per nesting level
    """

    indent_char: str = ' '
    indent_size: int = 4

    def indent_unit(self) -> str:
        """Get the string used for one level of indentation."""
        if self.indent_size <= 0:
            return ''
        return self.indent_char * self.indent_size


@dataclass
class LoggingConfig:
    """Logging defaults consumed by core.logger.setup_logging().

    Attributes:
        level: Logging level name (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        log_file: Optional log file name
        log_dir: Optional log directory
        use_colors: Colored console output
        auto_init: Configure the root logger when core.logger is imported
    """

    level: str = 'WARNING'
    log_file: Optional[str] = None
    log_dir: Optional[str] = None
    use_colors: bool = True
    auto_init: bool = False


class Config:
    """Centralized configuration manager.

    Provides access to all configuration settings loaded from environment
    variables (.env file).

    Attributes:
        db: DatabaseConfig instance with database connection settings
        builder: BuilderConfig instance with SQL formatting settings
        logging: LoggingConfig instance with logging defaults

    Properties:
        database_url: SQLAlchemy database URL
        database_echo: SQLAlchemy statement echo flag
        indent_char: Indentation character
        indent_size: Indentation width per nesting level
        log_level: Default log level

    Example:
        >>> config = Config()
        >>> print(f"Connecting to {config.database_url}")
    """

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.db = DatabaseConfig(
            url=os.getenv('QUERYBUILDER_DATABASE_URL', 'sqlite://'),
            echo=_env_bool('QUERYBUILDER_DATABASE_ECHO', False)
        )

        self.builder = BuilderConfig(
            indent_char=os.getenv('QUERYBUILDER_INDENT_CHAR', ' ') or ' ',
            indent_size=int(os.getenv('QUERYBUILDER_INDENT_SIZE', '4'))
        )

        self.logging = LoggingConfig(
            level=os.getenv('QUERYBUILDER_LOG_LEVEL', 'WARNING'),
            log_file=os.getenv('QUERYBUILDER_LOG_FILE') or None,
            log_dir=os.getenv('QUERYBUILDER_LOG_DIR') or None,
            use_colors=_env_bool('QUERYBUILDER_LOG_COLORS', True),
            auto_init=_env_bool('QUERYBUILDER_LOG_AUTO_INIT', False)
        )

    @property
    def database_url(self) -> str:
        """Get SQLAlchemy database URL."""
        return self.db.url

    @property
    def database_echo(self) -> bool:
        """Get SQLAlchemy echo flag."""
        return self.db.echo

    @property
    def indent_char(self) -> str:
        """Get indentation character."""
        return self.builder.indent_char

    @property
    def indent_size(self) -> int:
        """Get indentation width per nesting level."""
        return self.builder.indent_size

    @property
    def log_level(self) -> str:
        """Get default log level."""
        return self.logging.level


# Global configuration instance
config = Config()
