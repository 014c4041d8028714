"""
Environment variable names and default connection settings.

The variable names are part of hearth's public surface: existing deployments
set them, so they never change.
"""

from pydantic import BaseModel, Field

# Environment variables read by ConnectionConfigResolver
CONNECTION_STRING = "CONNECTION_STRING"
AUTH_TYPE = "AUTH_TYPE"
SERVER_NAME = "SERVER_NAME"
SERVER_PORT = "SERVER_PORT"
DATABASE_NAME = "DATABASE_NAME"
TRUST_SERVER_CERTIFICATE = "TRUST_SERVER_CERTIFICATE"
CONNECTION_TIMEOUT = "CONNECTION_TIMEOUT"
SQL_USERNAME = "SQL_USERNAME"
SQL_PASSWORD = "SQL_PASSWORD"

RECOGNIZED_VARIABLES = (
    CONNECTION_STRING,
    AUTH_TYPE,
    SERVER_NAME,
    SERVER_PORT,
    DATABASE_NAME,
    TRUST_SERVER_CERTIFICATE,
    CONNECTION_TIMEOUT,
    SQL_USERNAME,
    SQL_PASSWORD,
)

# AUTH_TYPE values hearth knows by name
AUTH_TYPE_SQL = "sql"
AUTH_TYPE_AZURE_AD = "azure-ad"

# pyodbc pre-connect attribute carrying an Azure AD access token
SQL_COPT_SS_ACCESS_TOKEN = 1256

AZURE_SQL_SCOPE = "https://database.windows.net/.default"


class MssqlConnectionDefaults(BaseModel):
    """Default MSSQL connection configuration."""

    auth_type: str = Field(
        default=AUTH_TYPE_AZURE_AD,
        description="Authentication mode used when AUTH_TYPE is not set",
    )
    port: str = Field(
        default="1433",
        description="SQL Server port; omitted from the server address when used",
    )
    timeout: int = Field(default=30, ge=1, description="Connection timeout in seconds")
    driver: str = Field(
        default="ODBC Driver 18 for SQL Server",
        description="ODBC driver name for SQL Server connections",
    )
    encrypt: str = Field(
        default="Yes", description="Enable encryption for SQL Server connections"
    )


MSSQL_CONNECTION_DEFAULTS = MssqlConnectionDefaults()


def get_mssql_defaults() -> dict:
    """
    Get default MSSQL connection options.

    Returns:
        Dictionary with default MSSQL connection options
    """
    return MSSQL_CONNECTION_DEFAULTS.model_dump()
