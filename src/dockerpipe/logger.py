"""
Logging setup for dockerpipe.

Every run appends to a single log file (``deploy.log`` by default) and echoes
to standard output. The file handler re-raises write failures so a broken log
aborts the operation instead of being silently dropped.
"""
import logging
import sys
import time
from typing import Optional

from .models import LogLevel

LOGGER_NAME = "dockerpipe"
FILE_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class FileFormatter(logging.Formatter):
    """UTC timestamped lines, with an optional detail line underneath."""

    converter = time.gmtime

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        detail = getattr(record, "detail", None)
        if detail:
            line = f"{line}\n{detail}"
        return line


class ConsoleFormatter(logging.Formatter):
    """Plain messages for INFO, level-prefixed messages otherwise."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.levelno != logging.INFO:
            message = f"{record.levelname}: {message}"
        detail = getattr(record, "detail", None)
        if detail:
            message = f"{message}\nError details: {detail}"
        return message


class DeployLogFileHandler(logging.FileHandler):
    """Append-only file handler that propagates write errors."""

    def __init__(self, filename: str):
        super().__init__(filename, mode="a", encoding="utf-8")

    def handleError(self, record):
        # Called from inside emit's except block
        raise


def setup_logging(log_file: str = "deploy.log",
                  level: LogLevel = LogLevel.INFO) -> logging.Logger:
    """Configure the dockerpipe logger with a file and a console handler."""
    logger = logging.getLogger(LOGGER_NAME)
    close_logging(logger)

    file_handler = DeployLogFileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(FileFormatter(FILE_FORMAT, datefmt=FILE_DATE_FORMAT))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, level.value))
    console_handler.setFormatter(ConsoleFormatter())

    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    logger.addHandler(file_handler)
    logger.addHandler(console_handler)
    return logger


def close_logging(logger: Optional[logging.Logger] = None):
    """Detach and close every handler of the dockerpipe logger."""
    logger = logger or logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def log_error(logger: logging.Logger, message: str, detail: Optional[str] = None):
    """Log an error message with an optional detail line."""
    logger.error(message, extra={"detail": detail})
