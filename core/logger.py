"""
=========================================================
Centralized logging configuration for the query builder.
=========================================================

Provides consistent logging setup for applications embedding the builders:
- File and console output
- Configurable log levels (defaults from core.config)
- Colored console output with emojis
- Module-specific loggers

The library modules only ever call ``logging.getLogger(__name__)``; handlers
are installed by the application through setup_logging(), or automatically
on import when ``QUERYBUILDER_LOG_AUTO_INIT`` is enabled.

Example:
    >>> from core.logger import get_logger, setup_logging
    >>>
    >>> # Setup logging at application start
    >>> setup_logging(log_level='DEBUG', log_file='querybuilder.log')
    >>>
    >>> # Get module logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Rendering query")
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from core.config import config


class ColoredFormatter(logging.Formatter):
    """Custom formatter with color support for console output.

    Adds ANSI color codes and emoji indicators to log messages for
    improved readability in terminal output.

    Attributes:
        COLORS: Dict mapping log levels to ANSI color codes
        EMOJI: Dict mapping log levels to emoji indicators
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    EMOJI = {
        'DEBUG': '🔍',
        'INFO': 'ℹ️ ',
        'WARNING': '⚠️ ',
        'ERROR': '❌',
        'CRITICAL': '🔥'
    }

    def format(self, record):
        """Format log record with colors and emojis.

        Args:
            record: LogRecord instance to format

        Returns:
            Formatted log message string with ANSI colors and emoji
        """
        levelname = record.levelname
        record.emoji = self.EMOJI.get(levelname, '')
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"

        try:
            return super().format(record)
        finally:
            # handlers further down the chain must see the plain level name
            record.levelname = levelname


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Get a logger instance for the specified module.

    Args:
        name: Logger name (typically __name__ of calling module)
        level: Optional logging level override (DEBUG/INFO/WARNING/ERROR/CRITICAL)

    Returns:
        Configured Logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> debug_logger = get_logger('querybuilder', level='DEBUG')
    """
    logger = logging.getLogger(name)

    if level:
        logger.setLevel(getattr(logging, level.upper()))

    return logger


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console_output: bool = True,
    use_colors: Optional[bool] = None
) -> None:
    """Setup centralized logging configuration.

    Configures the root logger with console and/or file handlers.
    Should be called once at application startup. Arguments left as
    None fall back to core.config.config.logging.

    Args:
        log_level: Logging level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        log_file: Optional log file name (e.g., 'querybuilder.log')
        log_dir: Optional log directory path (defaults to 'logs/')
        console_output: If True, output to console (stdout)
        use_colors: If True, use colored output for console

    Example:
        >>> setup_logging(log_level='DEBUG', log_file='querybuilder.log', log_dir='logs')
    """
    log_level = (log_level or config.logging.level).upper()
    log_file = log_file if log_file is not None else config.logging.log_file
    log_dir = log_dir if log_dir is not None else config.logging.log_dir
    use_colors = config.logging.use_colors if use_colors is None else use_colors

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level))

    # Clear existing handlers
    root_logger.handlers.clear()

    # Console handler
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, log_level))

        if use_colors:
            console_format = '%(emoji)s %(asctime)s - %(name)s - %(levelname)s - %(message)s'
            console_formatter = ColoredFormatter(
                console_format,
                datefmt='%Y-%m-%d %H:%M:%S'
            )
        else:
            console_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            console_formatter = logging.Formatter(
                console_format,
                datefmt='%Y-%m-%d %H:%M:%S'
            )

        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)

    # File handler
    if log_file:
        log_path = Path(log_dir) if log_dir else Path('logs')
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(
            log_path / log_file,
            encoding='utf-8'
        )
        file_handler.setLevel(getattr(logging, log_level))

        file_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        file_formatter = logging.Formatter(
            file_format,
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)


def _init_default_logging() -> bool:
    """Initialize default logging configuration if requested by config.

    Called on module import. Only touches the root logger when
    ``config.logging.auto_init`` is set and no handler is installed yet.

    Returns:
        True if handlers were installed, False otherwise
    """
    if config.logging.auto_init and not logging.getLogger().handlers:
        setup_logging()
        return True
    return False


_init_default_logging()
