#!/usr/bin/env python3
"""
hearth CLI - check how the current environment resolves to a SQL Server
connection.

This module provides the `hearth` command-line interface.
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click
import pyodbc
from azure.core.exceptions import AzureError

from hearth.connections import ConnectionConfigResolver, MssqlConnection
from hearth.messages import configure_logging, get_logger
from hearth.utility.exceptions import ConfigError

logger = get_logger("hearth.cli")


@click.group()
@click.version_option(package_name="hearth")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Show debug logging",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write log output to this file",
)
def hearth(verbose: bool, log_file: Optional[Path]):
    """
    hearth - SQL Server connection settings from the environment
    """
    configure_logging("DEBUG" if verbose else "INFO", log_file)


@hearth.command()
@click.option(
    "--connect",
    is_flag=True,
    help="Open (and close) a connection after resolving the settings",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Reject AUTH_TYPE values other than 'sql' and 'azure-ad'",
)
@click.option(
    "--driver",
    default=None,
    help="ODBC driver name used with --connect",
)
@click.option(
    "--windows-auth",
    is_flag=True,
    help="Use Trusted_Connection instead of an Azure AD token with --connect",
)
def check(connect: bool, strict: bool, driver: Optional[str], windows_auth: bool):
    """Resolve the environment and show the resulting connection string.

    The password is always masked.
    """
    resolver = ConnectionConfigResolver.from_environ(strict=strict)

    try:
        descriptor = resolver.resolve()
    except ConfigError as e:
        click.echo(f"Configuration error: {e}")
        sys.exit(1)

    if descriptor.is_raw:
        click.echo("Source: CONNECTION_STRING")
    else:
        click.echo("Source: individual environment variables")
        click.echo(f"Authentication: {descriptor.auth_mode.value}")
    click.echo(f"Connection string: {descriptor.masked_connection_string()}")

    if not connect:
        return

    options = {"use_access_token": not windows_auth}
    if driver:
        options["driver"] = driver

    try:
        asyncio.run(_test_connection(MssqlConnection(resolver, options)))
    except ConfigError as e:
        click.echo(f"Configuration error: {e}")
        sys.exit(1)
    except pyodbc.Error as e:
        click.echo(f"Connection failed: {e}")
        sys.exit(1)
    except AzureError as e:
        click.echo(f"Azure AD authentication failed: {e}")
        sys.exit(1)


async def _test_connection(factory: MssqlConnection) -> None:
    """Open a connection, run SELECT 1 and close it again."""
    click.echo("Testing connection...")
    logger.start("Testing connection")
    connection = await factory.get_connection()
    try:
        alive = await factory.is_connection_alive(connection)
    finally:
        await factory.close_connection(connection)

    if alive:
        logger.success("Connection test passed")
        click.echo("Connection successful!")
    else:
        logger.warning("Connected, but SELECT 1 failed")
        click.echo("Connected, but the test query failed")


if __name__ == "__main__":
    hearth()
