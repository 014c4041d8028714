"""
A cozy way to find your SQL Server: connection settings from the environment.
"""
from .connections import (
    AuthMode,
    ConnectionConfigResolver,
    ConnectionDescriptor,
    MssqlConnection,
    RawConnectionDescriptor,
    open_connection,
    resolve_connection,
)
from .utility.exceptions import ConfigError, HearthError

__version__ = "0.1.0"

__all__ = [
    "AuthMode",
    "ConfigError",
    "ConnectionConfigResolver",
    "ConnectionDescriptor",
    "HearthError",
    "MssqlConnection",
    "RawConnectionDescriptor",
    "open_connection",
    "resolve_connection",
]
