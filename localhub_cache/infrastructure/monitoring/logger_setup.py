"""Logging configuration for the localhub-cache CLI.

Log lines go to stderr so that values printed by `get` stay clean on stdout.
Level, format and an optional rotating log file come from the `logging.*`
configuration keys (LOCALHUB_LOGGING_LEVEL etc. in the environment).
"""

import logging
import logging.handlers
import sys
from typing import Optional

from localhub_cache.infrastructure.config.settings import get_config

DEFAULT_LOG_LEVEL = logging.WARNING
# threadName separates the background sweeper's lines from the caller's
DEFAULT_LOG_FORMAT = '%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_LOG_MAX_BYTES = 1024 * 1024
DEFAULT_LOG_BACKUP_COUNT = 3

def parse_log_level(level_name: Optional[str], fallback: int = DEFAULT_LOG_LEVEL) -> int:
    """Maps a level name such as 'debug' to its logging constant."""
    if not level_name:
        return fallback
    level = logging.getLevelName(str(level_name).upper())
    return level if isinstance(level, int) else fallback

def setup_logging(
    log_level: int = DEFAULT_LOG_LEVEL,
    log_format: str = DEFAULT_LOG_FORMAT,
    log_file: Optional[str] = None,
    max_bytes: int = DEFAULT_LOG_MAX_BYTES,
    backup_count: int = DEFAULT_LOG_BACKUP_COUNT,
) -> None:
    """Replaces the root logger's handlers with a stderr handler and an optional rotating file.

    Args:
        log_level: The minimum logging level (e.g., logging.DEBUG).
        log_format: The format string for log messages.
        log_file: Path of a log file, rotated at max_bytes. None disables it.
        max_bytes: Size at which the log file is rotated.
        backup_count: Number of rotated files kept.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Each CLI invocation reconfigures from scratch
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.handlers.RotatingFileHandler(
                log_file, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8'
            )
        except OSError as e:
            logging.error(f"Failed to set up file logging to {log_file}: {e}", exc_info=True)
        else:
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            logging.info(f"Logging to file: {log_file}")

    logging.debug(f"Logging configured. Level={logging.getLevelName(log_level)}")

def configure_logging(level_override: Optional[str] = None) -> int:
    """Applies the `logging.*` configuration keys. Call after load_configuration().

    Args:
        level_override: Level name from the command line, wins over configuration.

    Returns:
        The effective log level.
    """
    level = parse_log_level(level_override or get_config('logging.level'))
    setup_logging(
        log_level=level,
        log_format=get_config('logging.format', DEFAULT_LOG_FORMAT),
        log_file=get_config('logging.file'),
        max_bytes=int(get_config('logging.max_bytes', DEFAULT_LOG_MAX_BYTES)),
        backup_count=int(get_config('logging.backup_count', DEFAULT_LOG_BACKUP_COUNT)),
    )
    return level
