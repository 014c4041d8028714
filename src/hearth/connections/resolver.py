"""
Resolve SQL Server connection settings from environment state.

Precedence:
1. CONNECTION_STRING, used verbatim when set
2. Individual variables (SERVER_NAME, DATABASE_NAME, AUTH_TYPE, ...)

The resolver reads through an injected lookup so it is a pure function of
that mapping. It keeps no state between calls.
"""
import os
from typing import Optional, Protocol

from hearth.messages import get_logger
from hearth.utility.exceptions import ConfigError

from . import constants as env
from .constants import AUTH_TYPE_AZURE_AD, AUTH_TYPE_SQL, MSSQL_CONNECTION_DEFAULTS
from .descriptor import (
    AuthMode,
    ConnectionDescriptor,
    RawConnectionDescriptor,
    ResolvedConnection,
    mask_server,
)

NOT_CONFIGURED_MESSAGE = (
    "Database connection not configured. Either set CONNECTION_STRING or "
    "provide SERVER_NAME and DATABASE_NAME environment variables.\n\n"
    "Option 1: Set CONNECTION_STRING environment variable\n"
    "Example: CONNECTION_STRING=Server=.;Database=test;Trusted_Connection=True;"
    "TrustServerCertificate=True\n\n"
    "Option 2: Set individual environment variables\n"
    "- AUTH_TYPE=sql (or azure-ad)\n"
    "- SERVER_NAME=localhost\n"
    "- SERVER_PORT=1433 (optional)\n"
    "- DATABASE_NAME=test\n"
    "- TRUST_SERVER_CERTIFICATE=true (optional, default false)\n"
    "- CONNECTION_TIMEOUT=30 (optional, seconds)\n"
    "- SQL_USERNAME=sa (for AUTH_TYPE=sql)\n"
    "- SQL_PASSWORD=yourPassword (for AUTH_TYPE=sql)"
)

MISSING_CREDENTIALS_MESSAGE = (
    "SQL_USERNAME and SQL_PASSWORD must be set when using AUTH_TYPE=sql"
)


class EnvironmentLookup(Protocol):
    """Anything with a dict-style get(); os.environ and plain dicts qualify."""

    def get(self, name: str) -> Optional[str]:
        ...


class ConnectionConfigResolver:
    """
    Build a connection descriptor from environment variables.

    Any AUTH_TYPE other than "sql" selects integrated/Azure AD authentication.
    Unrecognized values are accepted with a warning, or rejected when the
    resolver is created with ``strict=True``.

    Example:
        ```python
        resolver = ConnectionConfigResolver(
            {"SERVER_NAME": "localhost", "DATABASE_NAME": "test"}
        )
        resolver.resolve().to_connection_string()
        # 'Server=localhost;Database=test;Integrated Security=True;'
        # 'TrustServerCertificate=False;Connection Timeout=30;'
        ```
    """

    def __init__(
        self, environ: Optional[EnvironmentLookup] = None, strict: bool = False
    ):
        """
        Args:
            environ: Variable lookup; defaults to os.environ, read on each resolve
            strict: Reject AUTH_TYPE values other than "sql" and "azure-ad"
        """
        self._environ = environ
        self.strict = strict
        self.logger = get_logger("hearth.connections.resolver")

    @classmethod
    def from_environ(cls, strict: bool = False) -> "ConnectionConfigResolver":
        return cls(os.environ, strict=strict)

    def _get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        environ = self._environ if self._environ is not None else os.environ
        value = environ.get(name)
        # Empty counts as unset
        return value if value else default

    def resolve(self) -> ResolvedConnection:
        """
        Resolve the current environment into a connection descriptor.

        Returns:
            RawConnectionDescriptor when CONNECTION_STRING is set,
            otherwise a validated ConnectionDescriptor

        Raises:
            ConfigError: If SERVER_NAME/DATABASE_NAME are missing, SQL
                credentials are missing for AUTH_TYPE=sql, or a value
                cannot be interpreted
        """
        connection_string = self._get(env.CONNECTION_STRING)
        if connection_string:
            self.logger.debug("Using CONNECTION_STRING as provided")
            return RawConnectionDescriptor(connection_string=connection_string)

        auth_type = self._get(env.AUTH_TYPE, MSSQL_CONNECTION_DEFAULTS.auth_type)
        server_name = self._get(env.SERVER_NAME)
        server_port = self._get(env.SERVER_PORT, MSSQL_CONNECTION_DEFAULTS.port)
        database_name = self._get(env.DATABASE_NAME)
        trust_server_certificate = (
            (self._get(env.TRUST_SERVER_CERTIFICATE) or "").lower() == "true"
        )

        if not server_name or not database_name:
            raise ConfigError(
                NOT_CONFIGURED_MESSAGE,
                missing=[
                    name
                    for name, value in (
                        (env.SERVER_NAME, server_name),
                        (env.DATABASE_NAME, database_name),
                    )
                    if not value
                ],
            )

        timeout = self._parse_timeout(
            self._get(env.CONNECTION_TIMEOUT, str(MSSQL_CONNECTION_DEFAULTS.timeout))
        )

        if server_port != MSSQL_CONNECTION_DEFAULTS.port:
            server = f"{server_name},{server_port}"
        else:
            server = server_name

        if auth_type.lower() == AUTH_TYPE_SQL:
            username = self._get(env.SQL_USERNAME)
            password = self._get(env.SQL_PASSWORD)
            if not username or not password:
                raise ConfigError(MISSING_CREDENTIALS_MESSAGE)

            self.logger.debug(
                "Resolved SQL authentication for "
                f"{mask_server(server)}/{database_name}"
            )
            return ConnectionDescriptor(
                server=server,
                database=database_name,
                auth_mode=AuthMode.SQL_AUTH,
                username=username,
                password=password,
                trust_server_certificate=trust_server_certificate,
                connection_timeout_seconds=timeout,
            )

        self._check_integrated_auth_type(auth_type)
        self.logger.debug(
            "Resolved integrated/Azure AD authentication for "
            f"{mask_server(server)}/{database_name}"
        )
        return ConnectionDescriptor(
            server=server,
            database=database_name,
            auth_mode=AuthMode.INTEGRATED_OR_AZURE_AD,
            trust_server_certificate=trust_server_certificate,
            connection_timeout_seconds=timeout,
        )

    def _parse_timeout(self, value: str) -> int:
        try:
            timeout = int(value.strip())
        except ValueError:
            timeout = -1
        if timeout < 0:
            raise ConfigError(
                f"CONNECTION_TIMEOUT must be a whole number of seconds, "
                f"got {value!r}.\n\n{NOT_CONFIGURED_MESSAGE}",
                value=value,
            )
        return timeout

    def _check_integrated_auth_type(self, auth_type: str) -> None:
        if auth_type.lower() == AUTH_TYPE_AZURE_AD:
            return
        if self.strict:
            raise ConfigError(
                f"Unrecognized AUTH_TYPE {auth_type!r}. Use 'sql' or 'azure-ad'.\n\n"
                f"{NOT_CONFIGURED_MESSAGE}",
                value=auth_type,
            )
        self.logger.warning(
            f"Unrecognized AUTH_TYPE {auth_type!r}, "
            f"using integrated/Azure AD authentication"
        )


def resolve_connection(
    environ: Optional[EnvironmentLookup] = None, strict: bool = False
) -> ResolvedConnection:
    """Resolve a connection descriptor in one call."""
    return ConnectionConfigResolver(environ, strict=strict).resolve()
