"""
Utility functions and classes for hearth.
"""
from .exceptions import ConfigError, HearthError

__all__ = [
    "HearthError",
    "ConfigError",
]
