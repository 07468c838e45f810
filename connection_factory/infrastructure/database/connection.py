"""Database connection management."""

import logging

from connection_factory.domain.exceptions import DatabaseConnectionError
from connection_factory.domain.models import ConnectionConfig
from connection_factory.infrastructure.database import client
from connection_factory.infrastructure.database.client import Connection

logger = logging.getLogger(__name__)


class ConnectionFactory:
    """Factory for opening MySQL connections from a ConnectionConfig."""

    @staticmethod
    def create(config: ConnectionConfig) -> Connection:
        """Create a new database connection.

        Args:
            config: Connection parameters and driver options.

        Returns:
            Open connection handle, owned by the caller.

        Raises:
            DatabaseConnectionError: If connection fails.
        """
        dsn = config.build_connection_string()
        logger.debug(f"Connecting to {dsn} as {config.user}")
        return client.connect(dsn, config.user, config.password, config.options)

    @staticmethod
    def test_connection(config: ConnectionConfig) -> bool:
        """Check whether a connection can be opened with ``config``.

        The connection opened by the check is closed immediately.

        Returns:
            True if the server accepted the connection, False otherwise.
        """
        try:
            connection = ConnectionFactory.create(config)
        except DatabaseConnectionError as e:
            logger.warning(f"Connection test failed for {config.build_connection_string()}: {e}")
            return False

        connection.close()
        return True


def get_db_connection(config: ConnectionConfig | None = None) -> Connection:
    """Create a new database connection.

    Args:
        config: Connection parameters. Read from ``DB_*`` environment
            variables when omitted.

    Returns:
        Open connection handle.

    Raises:
        InvalidConfigurationError: If the environment lacks DB_NAME or DB_USER.
        DatabaseConnectionError: If connection fails.
    """
    return ConnectionFactory.create(config or ConnectionConfig.from_env())
