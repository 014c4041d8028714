"""
Base connection interface for database connections.

Defines the contract every connection factory implements: resolve the
configuration, open a live connection, close it again.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from .descriptor import ResolvedConnection
from .resolver import ConnectionConfigResolver


class BaseConnection(ABC):
    """
    Abstract base class for database connection factories.

    A factory owns a resolver, not a descriptor: configuration is resolved
    again for every connection so changes to the environment are picked up
    without rebuilding the factory.

    Example:
        ```python
        class MssqlConnection(BaseConnection):
            async def get_connection(self) -> Any:
                descriptor = self.resolve()
                ...

            async def close_connection(self, conn: Any) -> None:
                ...
        ```
    """

    def __init__(
        self,
        resolver: Optional[ConnectionConfigResolver] = None,
        options: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize base connection.

        Args:
            resolver: Resolver for connection settings (defaults to one
                reading os.environ)
            options: Additional database-specific options
        """
        self.resolver = resolver or ConnectionConfigResolver()
        self.options = options or {}

    def resolve(self) -> ResolvedConnection:
        """Resolve a fresh descriptor for the next connection."""
        return self.resolver.resolve()

    @abstractmethod
    async def get_connection(self) -> Any:
        """
        Create and return a new database connection.

        Should wrap all blocking I/O operations in asyncio.to_thread()
        to prevent blocking the event loop.

        Returns:
            Database connection object (type varies by database)
        """
        pass

    @abstractmethod
    async def close_connection(self, conn: Any) -> None:
        """
        Close a database connection.

        Args:
            conn: Database connection to close
        """
        pass

    async def is_connection_alive(self, conn: Any) -> bool:
        """
        Check if a connection is still alive and usable.

        Default implementation returns True. Override in subclasses
        to provide database-specific health checks.
        """
        return True
