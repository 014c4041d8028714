"""
Logging configuration for hearth - comfortable, informative output.

HearthLogger provides human-readable, color-coded logging so it is easy to see
which server a connection went to and how it authenticated. Handlers live on
the top-level ``hearth`` logger; every named logger below it propagates there.
"""
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Union

import colorama

# Initialize colorama for cross-platform color support
colorama.init()

ROOT_LOGGER_NAME = "hearth"
LOG_FORMAT = "%(asctime)s  %(component)s%(message)s"
DATE_FORMAT = "%H:%M:%S"


class ColorFormatter(logging.Formatter):
    """Custom formatter with colors"""

    COLORS = {
        "INFO": colorama.Fore.BLUE,
        "WARNING": colorama.Fore.YELLOW,
        "ERROR": colorama.Fore.RED,
        "DEBUG": colorama.Fore.BLUE,
        "START": colorama.Fore.BLUE,
        "OK": colorama.Fore.GREEN,
    }

    def __init__(
        self, fmt: str = LOG_FORMAT, datefmt: str = DATE_FORMAT, use_color: bool = True
    ):
        super().__init__(fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record):
        # hearth.connections.mssql -> [mssql]
        if record.name.startswith(f"{ROOT_LOGGER_NAME}."):
            component = record.name.rsplit(".", 1)[-1]
            if self.use_color:
                white = colorama.Fore.WHITE
                reset = colorama.Style.RESET_ALL
                record.component = f"{white}[{component}]{reset} "
            else:
                record.component = f"[{component}] "
        else:
            record.component = ""

        # Work on a copy so the console and file handlers don't color twice
        record = logging.makeLogRecord(record.__dict__)

        if self.use_color and record.levelname in self.COLORS:
            color = self.COLORS[record.levelname]
            record.levelname = f"{color}{record.levelname}{colorama.Style.RESET_ALL}"

        if self.use_color and hasattr(record, "color_prefix"):
            color = self.COLORS.get(record.color_prefix, "")
            record.msg = f"{color}{record.msg}{colorama.Style.RESET_ALL}"

        return super().format(record)


def _root_logger() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        root.setLevel(logging.INFO)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(ColorFormatter())
        root.addHandler(console_handler)

        # Prevent logs from being passed to the python root logger
        root.propagate = False
    return root


def configure_logging(
    level: Union[int, str] = logging.INFO, log_file: Optional[Path] = None
) -> None:
    """
    Set the hearth log level and optionally mirror output to a file.

    Args:
        level: Logging level name or number
        log_file: Optional path for a plain-text copy of the log
    """
    root = _root_logger()
    root.setLevel(level)

    if log_file is not None:
        log_file = Path(log_file)
        # One file handler per path, however often this is called
        target = os.path.abspath(log_file)
        for handler in root.handlers:
            if isinstance(handler, logging.FileHandler):
                if handler.baseFilename == target:
                    return

        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(ColorFormatter(use_color=False))
        root.addHandler(file_handler)


class HearthLogger:
    """Central logging class for hearth"""

    def __init__(self, name: str):
        _root_logger()
        self.logger = logging.getLogger(name)

    def info(self, msg: str, color_prefix: Optional[str] = None) -> None:
        """Log info message with optional color prefix"""
        extra = {"color_prefix": color_prefix} if color_prefix else None
        self.logger.info(msg, extra=extra)

    def start(self, msg: str) -> None:
        self.info(f"START {msg}", color_prefix="START")

    def success(self, msg: str) -> None:
        self.info(f"OK {msg}", color_prefix="OK")

    def error(self, msg: str) -> None:
        self.logger.error(msg)

    def warning(self, msg: str) -> None:
        self.logger.warning(msg)

    def debug(self, msg: str) -> None:
        self.logger.debug(msg)


def get_logger(name: str) -> HearthLogger:
    """Get a configured logger instance."""
    return HearthLogger(name)
