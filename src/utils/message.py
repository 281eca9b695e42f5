"""
Application logging.

Everything logs through the Log facade (Log.info(...), Log.error(...)), which
wraps one stdlib logger with a colour console handler and, unless
TRACKSHELF_LOG_TO_FILE=0, a timestamped file under the user logs directory.
"""
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from colorama import Fore, Style, init

init(autoreset=True)

LOGGER_NAME = "TrackShelfLogger"
LOG_FILE_PREFIX = "trackshelf_"
LOG_FILES_KEPT = 10

LEVEL_NAMES = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def log_to_file_enabled() -> bool:
    return os.getenv("TRACKSHELF_LOG_TO_FILE", "1").strip().lower() not in ("0", "false", "no", "off")


class ColorFormatter(logging.Formatter):
    """Colours the level name for the console."""

    LEVEL_COLORS = {
        logging.DEBUG: Fore.BLUE,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.LIGHTRED_EX,
    }

    def format(self, record):
        # Work on a copy; the file handler shares the record
        record = logging.makeLogRecord(record.__dict__)
        color = self.LEVEL_COLORS.get(record.levelno, Fore.WHITE)
        record.levelname = f"{color}{record.levelname}{Style.RESET_ALL}"
        return super().format(record)


class NotificationHandler(logging.Handler):
    """
    Forwards records to a user-facing sink with notify(message, severity).

    severity is the record's level name; the sink maps it onto its own scale.
    """

    def __init__(self, sink, level: int = logging.WARNING):
        super().__init__(level)
        self.sink = sink

    def emit(self, record):
        if self.sink is None:
            return
        try:
            self.sink.notify(record.getMessage(), record.levelname)
        except Exception:
            self.handleError(record)


class RepetitiveMessageFilter(logging.Filter):
    """
    Drops DEBUG records that fire on every repaint or track switch
    (URL cache hits, results from superseded resources).
    """

    FILTER_PATTERNS = (
        "cachingurlresolver: cache hit",
        ": cache hit for",
        "from superseded resource",
    )

    def filter(self, record):
        if record.levelno > logging.DEBUG:
            return True
        message = record.getMessage().lower()
        return not any(pattern in message for pattern in self.FILTER_PATTERNS)


def _rotate_log_files(folder: Path, keep: int = LOG_FILES_KEPT) -> None:
    # Names embed the start timestamp, so name order is age order
    logs = sorted(folder.glob(f"{LOG_FILE_PREFIX}*.log"))
    for old in logs[:-keep] if keep > 0 else logs:
        old.unlink()


def _file_handler(folder: Optional[Path], level: int) -> logging.Handler:
    if folder is None:
        from src.utils.paths import get_logs_dir
        folder = get_logs_dir()
    folder.mkdir(parents=True, exist_ok=True)
    _rotate_log_files(folder)

    stamp = datetime.now().strftime("%Y-%m-%d_%H%M%S")
    handler = logging.FileHandler(folder / f"{LOG_FILE_PREFIX}{stamp}.log", encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    return handler


def init_logger(
    name: str = LOGGER_NAME,
    log_folder: Optional[Path] = None,
    console_logging: bool = True,
    file_logging: bool = True,
    level: int = logging.DEBUG,
) -> logging.Logger:
    """
    Configure the named logger once; later calls return it unchanged.

    Args:
        name: Logger name
        log_folder: Where log files go (default: user logs directory)
        console_logging: Attach the colour stdout handler
        file_logging: Attach a timestamped file handler
        level: Initial level for the logger and its handlers
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    if logger.handlers:
        return logger

    if file_logging:
        logger.addHandler(_file_handler(log_folder, level))
    if console_logging:
        console = logging.StreamHandler(sys.stdout)
        console.setLevel(level)
        console.setFormatter(ColorFormatter(fmt="%(asctime)s | %(levelname)s | %(message)s", datefmt="%H:%M:%S"))
        logger.addHandler(console)
    return logger


class Log:
    """Classmethod facade over the application logger."""

    _logger: logging.Logger = init_logger(file_logging=log_to_file_enabled())
    _notification_handler: Optional[NotificationHandler] = None
    _repetitive_filter: Optional[RepetitiveMessageFilter] = None

    @classmethod
    def set_level(cls, level: Union[str, int]):
        """Accepts a level name ("DEBUG", "info", ...) or a logging constant."""
        if isinstance(level, str):
            level = LEVEL_NAMES.get(level.upper(), logging.INFO)
        cls._logger.setLevel(level)
        for handler in cls._logger.handlers:
            # The notification threshold is set separately
            if handler is not cls._notification_handler:
                handler.setLevel(level)

    @classmethod
    def enable_repetitive_filter(cls, enable: bool = True):
        if cls._repetitive_filter is None:
            cls._repetitive_filter = RepetitiveMessageFilter()
        for handler in cls._logger.handlers:
            if enable:
                handler.addFilter(cls._repetitive_filter)
            else:
                handler.removeFilter(cls._repetitive_filter)

    @classmethod
    def debug(cls, text: str):
        cls._logger.debug(text)

    @classmethod
    def info(cls, text: str):
        cls._logger.info(text)

    @classmethod
    def warning(cls, text: str, exc_info: bool = False):
        cls._logger.warning(text, exc_info=exc_info)

    @classmethod
    def error(cls, text: str):
        cls._logger.error(text)

    @classmethod
    def set_notification_sink(cls, sink, level: int = logging.WARNING):
        """
        Forward records at or above level to sink.notify(message, severity).
        Calling again replaces the sink and threshold.
        """
        if cls._notification_handler is None:
            cls._notification_handler = NotificationHandler(sink, level)
            cls._logger.addHandler(cls._notification_handler)
        else:
            cls._notification_handler.sink = sink
            cls._notification_handler.setLevel(level)

    @classmethod
    def remove_notification_sink(cls):
        if cls._notification_handler is not None:
            cls._logger.removeHandler(cls._notification_handler)
            cls._notification_handler = None
