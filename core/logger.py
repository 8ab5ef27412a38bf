"""
=========================================================
Centralized logging configuration for the TSV loader.
=========================================================

Every module gets its logger through get_logger(__name__). Console output
is colored and prefixed with an emoji per level; an optional log file gets
the same records without the decoration.

Example:
    >>> from core.logger import get_logger, setup_logging
    >>>
    >>> setup_logging(log_level='DEBUG', log_file='loader.log')
    >>> logger = get_logger(__name__)
    >>> logger.info("Loading started")
"""

import logging
import sys
from pathlib import Path
from typing import Optional

PLAIN_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """Console formatter adding ANSI colors and an emoji per level."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    EMOJI = {
        'DEBUG': '🔍',
        'INFO': 'ℹ️ ',
        'WARNING': '⚠️ ',
        'ERROR': '❌',
        'CRITICAL': '🔥'
    }

    def format(self, record):
        levelname = record.levelname
        record.emoji = self.EMOJI.get(levelname, '')

        # Color a copy so file handlers sharing the record stay plain
        colored = logging.makeLogRecord(record.__dict__)
        if levelname in self.COLORS:
            colored.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"

        return super().format(colored)


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Get a logger for the given module.

    Args:
        name: Logger name (typically __name__ of calling module)
        level: Optional level override (DEBUG/INFO/WARNING/ERROR/CRITICAL)

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    if level:
        logger.setLevel(getattr(logging, level.upper()))

    return logger


def setup_logging(
    log_level: str = 'INFO',
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console_output: bool = True,
    use_colors: bool = True
) -> None:
    """Configure the root logger with console and/or file handlers.

    Replaces any handlers already attached to the root logger, so it is
    safe to call again (for example from the CLI after parsing --verbose).

    Args:
        log_level: Logging level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        log_file: Optional log file name (e.g., 'loader.log')
        log_dir: Directory for the log file (defaults to 'logs/')
        console_output: If True, log to stdout
        use_colors: If True, color console output
    """
    level = getattr(logging, log_level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)

        if use_colors:
            console_handler.setFormatter(
                ColoredFormatter('%(emoji)s ' + PLAIN_FORMAT, datefmt=DATE_FORMAT)
            )
        else:
            console_handler.setFormatter(
                logging.Formatter(PLAIN_FORMAT, datefmt=DATE_FORMAT)
            )

        root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_dir) if log_dir else Path('logs')
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path / log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)


def _init_default_logging():
    """Install console logging on import unless the root logger is configured."""
    if not logging.getLogger().handlers:
        from core.config import config

        setup_logging(log_level=config.log_level)


# Auto-initialize on import
_init_default_logging()
