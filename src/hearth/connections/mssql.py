"""
MS SQL Server connection factory.

Opens pyodbc connections from a freshly resolved descriptor:
- SQL authentication with explicit username and password
- Azure AD authentication via DefaultAzureCredential access tokens
- Windows integrated authentication (Trusted_Connection) on request
- A raw CONNECTION_STRING passed straight through

Connection failures from pyodbc or azure-identity are not wrapped; callers
see the driver's own exception.
"""
import asyncio
import struct
import time
from typing import Any, Dict, Optional

import pyodbc
from azure.core.credentials import AccessToken, TokenCredential
from azure.identity import DefaultAzureCredential

from hearth.messages import get_logger

from .base import BaseConnection
from .constants import (
    AZURE_SQL_SCOPE,
    MSSQL_CONNECTION_DEFAULTS,
    SQL_COPT_SS_ACCESS_TOKEN,
)
from .descriptor import AuthMode, ConnectionDescriptor, mask_server
from .resolver import ConnectionConfigResolver


class MssqlConnection(BaseConnection):
    """
    MS SQL Server connection factory.

    Features:
    - Configuration resolved from the environment on every connection
    - Azure AD token caching with 5-minute expiry buffer
    - All blocking operations wrapped in asyncio.to_thread()
    - Connection timeout passed through to the driver

    Example:
        ```python
        factory = MssqlConnection(
            options={"driver": "ODBC Driver 18 for SQL Server"}
        )
        conn = await factory.get_connection()
        try:
            ...
        finally:
            await factory.close_connection(conn)
        ```
    """

    # Token refresh buffer (seconds before expiry)
    TOKEN_EXPIRY_BUFFER = 300  # 5 minutes

    def __init__(
        self,
        resolver: Optional[ConnectionConfigResolver] = None,
        options: Optional[Dict[str, Any]] = None,
        credential: Optional[TokenCredential] = None,
    ):
        """
        Initialize MSSQL connection factory.

        Args:
            resolver: Resolver for connection settings (defaults to os.environ)
            options: Additional options:
                - driver: ODBC driver name (default: "ODBC Driver 18 for SQL Server")
                - encrypt: Enable encryption (default: "Yes")
                - use_access_token: Authenticate integrated connections with an
                  Azure AD token; False uses Trusted_Connection (default: True)
            credential: Azure credential for access tokens (default:
                DefaultAzureCredential, created on first use)
        """
        super().__init__(resolver, options)

        self._credential = credential
        self._token: Optional[AccessToken] = None

        self.driver = self.options.get("driver", MSSQL_CONNECTION_DEFAULTS.driver)
        self.encrypt = self.options.get("encrypt", MSSQL_CONNECTION_DEFAULTS.encrypt)
        self.use_access_token = self.options.get("use_access_token", True)

        self.logger = get_logger("hearth.connections.mssql")

    async def get_connection(self) -> pyodbc.Connection:
        """
        Resolve configuration and open a new connection.

        Returns:
            pyodbc.Connection: Database connection

        Raises:
            ConfigError: If the environment is not configured
            pyodbc.Error: If the driver cannot connect
        """
        descriptor = self.resolve()

        if descriptor.is_raw:
            self.logger.debug("Connecting with CONNECTION_STRING")
            return await asyncio.to_thread(
                pyodbc.connect, descriptor.to_connection_string()
            )

        conn_str, attrs_before = await self._build_connection_args(descriptor)

        target = f"{mask_server(descriptor.server)}.{descriptor.database}"
        self.logger.debug(f"Connecting to {target} ({descriptor.auth_mode.value})")
        kwargs: Dict[str, Any] = {"timeout": descriptor.connection_timeout_seconds}
        if attrs_before:
            kwargs["attrs_before"] = attrs_before

        try:
            conn = await asyncio.to_thread(pyodbc.connect, conn_str, **kwargs)
        except pyodbc.Error as e:
            self.logger.error(f"Connection to {target} failed: {e}")
            raise

        self.logger.debug(f"Connected to {target}")
        return conn

    async def close_connection(self, conn: pyodbc.Connection) -> None:
        """
        Close a database connection.

        Args:
            conn: Connection to close
        """
        try:
            if conn:
                await asyncio.to_thread(conn.close)
                self.logger.debug("Connection closed")
        except pyodbc.Error as e:
            self.logger.warning(f"Error closing connection: {str(e)}")

    async def is_connection_alive(self, conn: pyodbc.Connection) -> bool:
        """
        Check if a connection is still alive with a trivial query.
        """
        try:
            await asyncio.to_thread(lambda: conn.execute("SELECT 1").fetchone())
            return True
        except pyodbc.Error:
            return False

    async def _build_connection_args(
        self, descriptor: ConnectionDescriptor
    ) -> tuple[str, Optional[Dict[int, bytes]]]:
        """
        Build the ODBC connection string and pre-connect attributes.

        Returns:
            Tuple of (connection_string, attrs_before or None)
        """
        if descriptor.auth_mode == AuthMode.SQL_AUTH:
            conn_str = descriptor.to_odbc_connection_string(self.driver, self.encrypt)
            return conn_str, None

        if not self.use_access_token:
            conn_str = descriptor.to_odbc_connection_string(
                self.driver, self.encrypt, trusted_connection=True
            )
            return conn_str, None

        token = await self._get_token()
        conn_str = descriptor.to_odbc_connection_string(self.driver, self.encrypt)
        attrs_before = {SQL_COPT_SS_ACCESS_TOKEN: self._convert_token_to_bytes(token)}
        return conn_str, attrs_before

    async def _get_token(self) -> AccessToken:
        """
        Get Azure AD token with caching.

        Only refreshes when within TOKEN_EXPIRY_BUFFER seconds of expiration.
        """
        if self._token:
            time_remaining = self._token.expires_on - time.time()
            if time_remaining > self.TOKEN_EXPIRY_BUFFER:
                self.logger.debug(
                    f"Using cached token ({time_remaining:.0f}s remaining)"
                )
                return self._token

        if self._credential is None:
            self._credential = DefaultAzureCredential()

        self.logger.debug("Fetching new Azure AD token")
        self._token = await asyncio.to_thread(
            self._credential.get_token, AZURE_SQL_SCOPE
        )

        time_remaining = self._token.expires_on - time.time()
        self.logger.debug(f"New token acquired ({time_remaining:.0f}s until expiry)")
        return self._token

    def _convert_token_to_bytes(self, token: AccessToken) -> bytes:
        """
        Convert Azure AD token to the length-prefixed UTF-16LE byte string
        the SQL Server ODBC driver expects.
        """
        encoded_bytes = token.token.encode("utf-16-le")
        return struct.pack("<i", len(encoded_bytes)) + encoded_bytes


async def open_connection(
    resolver: Optional[ConnectionConfigResolver] = None,
    options: Optional[Dict[str, Any]] = None,
) -> pyodbc.Connection:
    """Resolve the environment and open one connection."""
    return await MssqlConnection(resolver, options).get_connection()

