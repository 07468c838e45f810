"""Custom domain exceptions."""


class ConfigurationError(Exception):
    """Base exception for configuration-related errors."""

    pass


class InvalidConfigurationError(ConfigurationError, ValueError):
    """Raised when connection parameters fail validation."""

    pass


class DatabaseConnectionError(ConnectionError):
    """Raised when the database client cannot open a connection."""

    pass
