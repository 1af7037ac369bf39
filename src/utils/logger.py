"""
Logging Configuration Module.

All loggers of the extraction system live under the ``invoice_extractor``
namespace. Console output is coloured per level with colorama; a rotating
file log can be switched on in settings.yaml.

While a file is being processed, ``document_context`` tags every record
with the document name, so warnings from a batch run (stage failures,
inconsistent lines, low OCR confidence) point at the invoice they came from.

Usage:
    from src.utils.logger import document_context, get_logger

    logger = get_logger(__name__)
    with document_context("facture_0042.png"):
        logger.warning("Line 2 (Consulting): quantity x unit price != line total")
"""

import logging
import logging.handlers
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Iterator, Optional

import colorama
from colorama import Fore, Style

colorama.init()

LOGGER_NAMESPACE = "invoice_extractor"
DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(document)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
NO_DOCUMENT = "-"

_current_document: ContextVar[str] = ContextVar("current_document", default=NO_DOCUMENT)


class DocumentFilter(logging.Filter):
    """Sets ``record.document`` to the document being processed."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.document = _current_document.get()
        return True


class ColoredFormatter(logging.Formatter):
    """Colours the level name; warnings are what a reviewer scans for."""

    COLORS = {
        logging.DEBUG: Fore.CYAN,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.RED + Style.BRIGHT,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelno)
        if not color:
            return super().format(record)

        original = record.levelname
        record.levelname = f"{color}{original}{Style.RESET_ALL}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


@contextmanager
def document_context(document: str) -> Iterator[None]:
    """
    Tag log records emitted inside the block with ``document``.

    Example:
        >>> with document_context("scan_01.png"):
        ...     extractor.extract_document(document)
    """
    token = _current_document.set(document)
    try:
        yield
    finally:
        _current_document.reset(token)


def _console_handler(level: int, log_format: str, date_format: str, colorize: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    formatter_class = ColoredFormatter if colorize else logging.Formatter
    handler.setFormatter(formatter_class(log_format, datefmt=date_format))
    handler.setLevel(level)
    return handler


def _file_handler(
    log_file: str,
    level: int,
    log_format: str,
    date_format: str,
    max_bytes: int,
    backup_count: int
) -> logging.Handler:
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )
    handler.setFormatter(logging.Formatter(log_format, datefmt=date_format))
    handler.setLevel(level)
    return handler


def setup_logger(
    level: str = "INFO",
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    log_file: Optional[str] = None,
    max_bytes: int = 10485760,  # 10 MB
    backup_count: int = 5,
    colorize: bool = True
) -> logging.Logger:
    """
    Configure the ``invoice_extractor`` logger.

    Call once at startup; calling again replaces the handlers.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Format string. ``%(document)s`` is always available.
        date_format: Date format string.
        log_file: Rotating log file path. None disables file logging.
        max_bytes: Size at which the log file rotates.
        backup_count: Rotated files to keep.
        colorize: Colour the console level names.

    Returns:
        The configured application logger.

    Raises:
        ValueError: If ``level`` is not a logging level name.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown logging level: {level!r}")

    log_format = log_format or DEFAULT_FORMAT
    date_format = date_format or DEFAULT_DATE_FORMAT

    app_logger = logging.getLogger(LOGGER_NAMESPACE)
    app_logger.setLevel(numeric_level)
    app_logger.propagate = False

    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    handlers = [_console_handler(numeric_level, log_format, date_format, colorize)]
    if log_file:
        handlers.append(_file_handler(
            log_file, numeric_level, log_format, date_format, max_bytes, backup_count
        ))

    for handler in handlers:
        handler.addFilter(DocumentFilter())
        app_logger.addHandler(handler)

    app_logger.debug(
        "Logging initialized (level=%s, file=%s)", level.upper(), log_file or "disabled"
    )
    return app_logger


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` under the application namespace."""
    if name.startswith(LOGGER_NAMESPACE):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def setup_logger_from_config(level: Optional[str] = None) -> logging.Logger:
    """
    Initialize logging from the ``logging`` section of settings.yaml.

    Args:
        level: Overrides the configured level (--debug / --quiet).
    """
    from config import get_config

    log_file = None
    if get_config("logging.file.enabled", False):
        log_file = get_config("logging.file.path")

    return setup_logger(
        level=level or get_config("logging.level", "INFO"),
        log_format=get_config("logging.format"),
        date_format=get_config("logging.date_format"),
        log_file=log_file,
        max_bytes=get_config("logging.file.max_bytes", 10485760),
        backup_count=get_config("logging.file.backup_count", 5),
        colorize=get_config("logging.console.colorize", True)
    )
