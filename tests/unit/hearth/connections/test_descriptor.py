"""
Unit tests for connection descriptors and their serialization.
"""
import pytest
from pydantic import ValidationError

from hearth.connections import AuthMode, ConnectionDescriptor, RawConnectionDescriptor


@pytest.fixture
def sql_descriptor():
    return ConnectionDescriptor(
        server="localhost,5000",
        database="test",
        auth_mode=AuthMode.SQL_AUTH,
        username="sa",
        password="pw",
    )


@pytest.fixture
def integrated_descriptor():
    return ConnectionDescriptor(server="localhost", database="test")


class TestConnectionString:
    """The semicolon-delimited form must match existing deployments exactly."""

    def test_sql_auth_format(self, sql_descriptor):
        assert sql_descriptor.to_connection_string() == (
            "Server=localhost,5000;Database=test;User Id=sa;Password=pw;"
            "TrustServerCertificate=False;Connection Timeout=30;"
        )

    def test_integrated_format(self, integrated_descriptor):
        assert integrated_descriptor.to_connection_string() == (
            "Server=localhost;Database=test;Integrated Security=True;"
            "TrustServerCertificate=False;Connection Timeout=30;"
        )

    def test_trust_and_timeout_rendering(self):
        descriptor = ConnectionDescriptor(
            server="db",
            database="test",
            trust_server_certificate=True,
            connection_timeout_seconds=15,
        )

        conn_str = descriptor.to_connection_string()

        assert "TrustServerCertificate=True;" in conn_str
        assert conn_str.endswith("Connection Timeout=15;")


class TestOdbcConnectionString:
    """pyodbc needs the ODBC keyword set."""

    def test_sql_auth(self, sql_descriptor):
        conn_str = sql_descriptor.to_odbc_connection_string()

        assert conn_str == (
            "DRIVER=ODBC Driver 18 for SQL Server;SERVER=localhost,5000;"
            "DATABASE=test;UID=sa;PWD=pw;Encrypt=Yes;TrustServerCertificate=no"
        )

    def test_integrated_leaves_auth_to_token(self, integrated_descriptor):
        conn_str = integrated_descriptor.to_odbc_connection_string(
            driver="ODBC Driver 17 for SQL Server", encrypt="No"
        )

        assert "UID=" not in conn_str
        assert "Trusted_Connection" not in conn_str
        assert conn_str.startswith("DRIVER=ODBC Driver 17 for SQL Server;")
        assert "Encrypt=No" in conn_str

    def test_integrated_trusted_connection(self, integrated_descriptor):
        conn_str = integrated_descriptor.to_odbc_connection_string(
            trusted_connection=True
        )
        assert "Trusted_Connection=yes;" in conn_str

    def test_password_with_delimiters_is_braced(self):
        descriptor = ConnectionDescriptor(
            server="db",
            database="test",
            auth_mode=AuthMode.SQL_AUTH,
            username="sa",
            password="p;w}d",
        )

        assert "PWD={p;w}}d};" in descriptor.to_odbc_connection_string()


class TestValidation:
    """Direct construction enforces the same invariants as the resolver."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"server": "", "database": "test"},
            {"server": "db", "database": ""},
            {"server": "db", "database": "test", "auth_mode": AuthMode.SQL_AUTH},
            {
                "server": "db",
                "database": "test",
                "auth_mode": AuthMode.SQL_AUTH,
                "username": "sa",
            },
            {"server": "db", "database": "test", "username": "sa", "password": "pw"},
            {"server": "db", "database": "test", "connection_timeout_seconds": -1},
        ],
    )
    def test_invalid_descriptors_rejected(self, kwargs):
        with pytest.raises(ValidationError):
            ConnectionDescriptor(**kwargs)

    def test_descriptor_is_immutable(self, integrated_descriptor):
        with pytest.raises(ValidationError):
            integrated_descriptor.server = "elsewhere"

    def test_auth_mode_from_string(self):
        descriptor = ConnectionDescriptor(
            server="db",
            database="test",
            auth_mode="sql",
            username="sa",
            password="pw",
        )
        assert descriptor.auth_mode == AuthMode.SQL_AUTH

    def test_raw_descriptor_requires_content(self):
        with pytest.raises(ValidationError):
            RawConnectionDescriptor(connection_string="")


class TestMasking:
    """Passwords never show up in masked output or repr."""

    def test_masked_connection_string(self, sql_descriptor):
        masked = sql_descriptor.masked_connection_string()

        assert "Password=***;" in masked
        assert "pw" not in masked.replace("Password", "")

    def test_masked_does_not_change_original(self, sql_descriptor):
        sql_descriptor.masked()
        assert sql_descriptor.password == "pw"

    def test_masked_integrated_is_unchanged(self, integrated_descriptor):
        assert integrated_descriptor.masked() is integrated_descriptor

    def test_repr_hides_password(self, sql_descriptor):
        assert "pw" not in repr(sql_descriptor).replace("Password", "")

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (
                "Server=db;User Id=sa;Password=secret;Encrypt=True",
                "Server=db;User Id=sa;Password=***;Encrypt=True",
            ),
            ("DRIVER=x;UID=sa;PWD={se;cret}", "DRIVER=x;UID=sa;PWD=***"),
            (
                'Server=db;User Id=sa;Password="ab;cd";',
                "Server=db;User Id=sa;Password=***;",
            ),
            (
                'Server=db;Password="a""b;c";Encrypt=True',
                "Server=db;Password=***;Encrypt=True",
            ),
            (
                "Server=db;Password='a;''b';Encrypt=True",
                "Server=db;Password=***;Encrypt=True",
            ),
            ("DSN=prod", "DSN=prod"),
        ],
    )
    def test_raw_masked_connection_string(self, raw, expected):
        descriptor = RawConnectionDescriptor(connection_string=raw)

        assert descriptor.masked_connection_string() == expected
        assert descriptor.to_connection_string() == raw
