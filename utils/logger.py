# This module contains a custom formatter for logging messages with different log levels.
import logging
from typing import Optional

ROOT_LOGGER_NAME = "shippost"


class CustomFormatter(logging.Formatter):
    """
    A custom formatter for logging messages with different log levels.

    Attributes:
        grey (str): ANSI escape sequence for grey color.
        yellow (str): ANSI escape sequence for yellow color.
        red (str): ANSI escape sequence for red color.
        bold_red (str): ANSI escape sequence for bold red color.
        reset (str): ANSI escape sequence to reset color.
        format (str): The log message format.
        FORMATS (dict): A dictionary mapping log levels to their respective log message formats.

    Usage:
        handler = logging.StreamHandler()
        handler.setFormatter(CustomFormatter())
    """
    grey = "\x1b[37;20m"
    yellow = "\x1b[33;20m"
    red = "\x1b[31;20m"
    bold_red = "\x1b[31;1m"
    dark_grey = "\x1b[30;1m"
    reset = "\x1b[0m"
    format = '[%(levelname)s] %(asctime)s - %(message)s'

    FORMATS = {
        logging.DEBUG: dark_grey + format + reset,
        logging.INFO: grey + format + reset,
        logging.WARNING: yellow + format + reset,
        logging.ERROR: red + format + reset,
        logging.CRITICAL: bold_red + format + reset
    }

    def format(self, record):
        """
        Formats the log record based on its log level.

        Args:
            record (logging.LogRecord): The log record to be formatted.

        Returns:
            str: The formatted log message.
        """
        log_fmt = self.FORMATS.get(record.levelno)
        formatter = logging.Formatter(log_fmt)
        return formatter.format(record)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Return a logger under the application's root logger.

    Args:
        name: Usually the calling module's __name__.

    Returns:
        logging.Logger: The child logger.
    """
    if not name or name == ROOT_LOGGER_NAME:
        return logging.getLogger(ROOT_LOGGER_NAME)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def _reset_handlers(log: logging.Logger) -> None:
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()


def setup_console_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Attach a colored console handler to the application logger.

    Used by the non-interactive modes (quick post, setup, cleanup).

    Args:
        level: Minimum level to emit.

    Returns:
        logging.Logger: The configured root application logger.
    """
    log = logging.getLogger(ROOT_LOGGER_NAME)
    _reset_handlers(log)
    log.setLevel(level)
    log.propagate = False

    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(CustomFormatter())
    log.addHandler(ch)
    return log


def setup_file_logging(log_file: str, level: int = logging.INFO) -> logging.Logger:
    """
    Send application logs to a file only.

    The interactive UI owns the terminal, so nothing is written to the console
    while it runs.

    Args:
        log_file: Path of the log file (appended to).
        level: Minimum level to emit.

    Returns:
        logging.Logger: The configured root application logger.
    """
    log = logging.getLogger(ROOT_LOGGER_NAME)
    _reset_handlers(log)
    log.setLevel(level)
    log.propagate = False

    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(level)
    fh.setFormatter(logging.Formatter('[%(levelname)s] %(asctime)s %(name)s - %(message)s'))
    log.addHandler(fh)
    return log
