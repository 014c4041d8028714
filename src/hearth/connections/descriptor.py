"""
Connection descriptors - the resolved, validated output of configuration.

A descriptor is built fresh for every connection request and handed straight
to the database client. It holds no resources and is never mutated.

Two shapes exist:
- ConnectionDescriptor: assembled from individual settings, serialized on demand
- RawConnectionDescriptor: a complete connection string supplied by the user,
  passed through verbatim
"""
import re
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .constants import AUTH_TYPE_AZURE_AD, AUTH_TYPE_SQL, MSSQL_CONNECTION_DEFAULTS

MASK = "***"

# Values may be {braced}, "double" or 'single' quoted with doubled escapes
_PASSWORD_PATTERN = re.compile(
    r"(?i)\b(password|pwd)\s*=\s*"
    r"(\{(?:[^}]|\}\})*\}|\"(?:[^\"]|\"\")*\"|'(?:[^']|'')*'|[^;]*)"
)


class AuthMode(str, Enum):
    """How the connection proves who it is."""

    SQL_AUTH = AUTH_TYPE_SQL
    INTEGRATED_OR_AZURE_AD = AUTH_TYPE_AZURE_AD


def mask_server(server: str) -> str:
    """Mask server name for logging (show only first part, keep any port)."""
    host, sep, port = server.partition(",")
    if "." in host:
        host = host.split(".")[0]
    return f"{host}{sep}{port}"


def _odbc_value(value: str) -> str:
    """Brace-quote an ODBC attribute value when it contains delimiters."""
    if any(ch in value for ch in ";{}") or value != value.strip():
        return "{" + value.replace("}", "}}") + "}"
    return value


class ConnectionDescriptor(BaseModel):
    """
    Validated connection parameters for a single SQL Server connection.

    Example:
        ```python
        descriptor = ConnectionDescriptor(
            server="localhost,5000",
            database="test",
            auth_mode=AuthMode.SQL_AUTH,
            username="sa",
            password="pw",
        )
        descriptor.to_connection_string()
        # 'Server=localhost,5000;Database=test;User Id=sa;Password=pw;'
        # 'TrustServerCertificate=False;Connection Timeout=30;'
        ```
    """

    model_config = ConfigDict(frozen=True)

    server: str = Field(..., description="Host, or host,port for a non-default port")
    database: str = Field(..., description="Database name")
    auth_mode: AuthMode = Field(default=AuthMode.INTEGRATED_OR_AZURE_AD)
    username: Optional[str] = Field(default=None)
    password: Optional[str] = Field(default=None, repr=False)
    trust_server_certificate: bool = Field(default=False)
    connection_timeout_seconds: int = Field(
        default=MSSQL_CONNECTION_DEFAULTS.timeout, ge=0
    )

    @model_validator(mode="after")
    def validate_descriptor(self):
        if not self.server or not self.database:
            raise ValueError("server and database must both be non-empty")
        if self.auth_mode == AuthMode.SQL_AUTH:
            if not self.username or not self.password:
                raise ValueError(
                    "username and password are required for SQL authentication"
                )
        elif self.username is not None or self.password is not None:
            raise ValueError(
                "Integrated/Azure AD authentication does not take credentials"
            )
        return self

    @property
    def is_raw(self) -> bool:
        return False

    def to_connection_string(self) -> str:
        """Serialize to the semicolon-delimited key=value form."""
        if self.auth_mode == AuthMode.SQL_AUTH:
            auth = f"User Id={self.username};Password={self.password};"
        else:
            auth = "Integrated Security=True;"

        return (
            f"Server={self.server};Database={self.database};{auth}"
            f"TrustServerCertificate={self.trust_server_certificate};"
            f"Connection Timeout={self.connection_timeout_seconds};"
        )

    def to_odbc_connection_string(
        self,
        driver: str = MSSQL_CONNECTION_DEFAULTS.driver,
        encrypt: str = MSSQL_CONNECTION_DEFAULTS.encrypt,
        trusted_connection: bool = False,
    ) -> str:
        """
        Serialize to the ODBC form pyodbc understands.

        The timeout is not part of the string; pyodbc takes it as a
        keyword argument to connect().

        Args:
            driver: ODBC driver name
            encrypt: Value for the Encrypt attribute
            trusted_connection: Request Windows integrated auth instead of
                leaving authentication to pre-connect attributes (access token)
        """
        conn_str = (
            f"DRIVER={driver};"
            f"SERVER={_odbc_value(self.server)};"
            f"DATABASE={_odbc_value(self.database)};"
        )
        if self.auth_mode == AuthMode.SQL_AUTH:
            conn_str += (
                f"UID={_odbc_value(self.username)};PWD={_odbc_value(self.password)};"
            )
        elif trusted_connection:
            conn_str += "Trusted_Connection=yes;"

        trust = "yes" if self.trust_server_certificate else "no"
        conn_str += f"Encrypt={encrypt};TrustServerCertificate={trust}"
        return conn_str

    def masked(self) -> "ConnectionDescriptor":
        """Copy of this descriptor with the password hidden."""
        if self.password is None:
            return self
        return self.model_copy(update={"password": MASK})

    def masked_connection_string(self) -> str:
        return self.masked().to_connection_string()


class RawConnectionDescriptor(BaseModel):
    """A complete connection string used exactly as given."""

    model_config = ConfigDict(frozen=True)

    connection_string: str = Field(..., min_length=1, repr=False)

    @property
    def is_raw(self) -> bool:
        return True

    def to_connection_string(self) -> str:
        return self.connection_string

    def masked_connection_string(self) -> str:
        return _PASSWORD_PATTERN.sub(
            lambda m: f"{m.group(1)}={MASK}", self.connection_string
        )


ResolvedConnection = Union[ConnectionDescriptor, RawConnectionDescriptor]
