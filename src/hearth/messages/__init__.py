"""
Message utilities for hearth.

- Logger: Human-readable output formatting with colors
"""
from hearth.messages.logger import HearthLogger, configure_logging, get_logger

__all__ = ["HearthLogger", "configure_logging", "get_logger"]
