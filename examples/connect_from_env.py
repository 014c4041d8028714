#!/usr/bin/env python3
"""
Connect from environment variables

Resolves SERVER_NAME / DATABASE_NAME / AUTH_TYPE (or CONNECTION_STRING),
opens a connection and runs a trivial query.

    SERVER_NAME=localhost DATABASE_NAME=master AUTH_TYPE=sql \
    SQL_USERNAME=sa SQL_PASSWORD=yourPassword TRUST_SERVER_CERTIFICATE=true \
    python examples/connect_from_env.py
"""

import asyncio
import sys
from pathlib import Path

# Add src to path so we can import hearth
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hearth import ConfigError, ConnectionConfigResolver, MssqlConnection  # noqa: E402


async def main() -> int:
    resolver = ConnectionConfigResolver.from_environ()

    try:
        descriptor = resolver.resolve()
    except ConfigError as e:
        print(e)
        return 1

    print(f"Resolved: {descriptor.masked_connection_string()}")

    factory = MssqlConnection(resolver)
    conn = await factory.get_connection()
    try:
        row = await asyncio.to_thread(
            lambda: conn.execute("SELECT @@SERVERNAME, DB_NAME()").fetchone()
        )
        print(f"Connected to {row[0]} / {row[1]}")
    finally:
        await factory.close_connection(conn)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
