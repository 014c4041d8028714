"""
Connection management for hearth.

Resolves SQL Server connection settings from the environment and opens
connections with them.

Key components:
- ConnectionConfigResolver: Environment variables -> validated descriptor
- ConnectionDescriptor: Resolved settings, serializable to a connection string
- BaseConnection: Interface for database connection factories
- MssqlConnection: MS SQL Server connection factory (SQL and Azure AD auth)
"""
from .base import BaseConnection
from .constants import get_mssql_defaults
from .descriptor import (
    AuthMode,
    ConnectionDescriptor,
    RawConnectionDescriptor,
    ResolvedConnection,
)
from .mssql import MssqlConnection, open_connection
from .resolver import ConnectionConfigResolver, EnvironmentLookup, resolve_connection

__all__ = [
    "AuthMode",
    "BaseConnection",
    "ConnectionConfigResolver",
    "ConnectionDescriptor",
    "EnvironmentLookup",
    "MssqlConnection",
    "RawConnectionDescriptor",
    "ResolvedConnection",
    "get_mssql_defaults",
    "open_connection",
    "resolve_connection",
]
