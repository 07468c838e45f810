"""Adapter around mysql.connector that speaks DSNs and driver options."""

from collections import namedtuple
from collections.abc import Iterator, Mapping
from typing import Any

import mysql.connector
from mysql.connector.abstracts import MySQLConnectionAbstract, MySQLCursorAbstract

from connection_factory.domain.exceptions import DatabaseConnectionError, InvalidConfigurationError
from connection_factory.domain.models import DSN_SCHEME
from connection_factory.domain.options import (
    DriverOption,
    ErrorMode,
    FetchMode,
    OptionValue,
    coerce_option_value,
    normalize_options,
)

# Behavior of mysql.connector when an option is not configured
CLIENT_DEFAULTS: dict[DriverOption, OptionValue] = {
    DriverOption.ERROR_MODE: ErrorMode.SILENT,
    DriverOption.DEFAULT_FETCH_MODE: FetchMode.NUM,
    DriverOption.EMULATE_PREPARES: True,
}

# DSN key -> mysql.connector keyword argument
DSN_KEYS = {
    "host": "host",
    "port": "port",
    "dbname": "database",
    "charset": "charset",
}


def parse_dsn(dsn: str) -> dict[str, Any]:
    """Parse a ``mysql:key=value;...`` DSN into connector keyword arguments.

    Args:
        dsn: DSN as produced by ``ConnectionConfig.build_connection_string``.

    Returns:
        Keyword arguments for ``mysql.connector.connect``.

    Raises:
        DatabaseConnectionError: If the DSN is malformed.
    """
    scheme, sep, body = dsn.partition(":")
    if not sep or scheme != DSN_SCHEME:
        raise DatabaseConnectionError(f"Unsupported DSN scheme in '{dsn}'")

    params: dict[str, Any] = {}
    for pair in body.split(";"):
        if not pair:
            continue
        key, sep, value = pair.partition("=")
        if not sep or key not in DSN_KEYS:
            raise DatabaseConnectionError(f"Invalid DSN component '{pair}'")
        params[DSN_KEYS[key]] = value

    if "port" in params:
        try:
            params["port"] = int(params["port"])
        except ValueError as e:
            raise DatabaseConnectionError(f"Invalid port in DSN: {params['port']}") from e

    return params


def _error_mode_kwargs(mode: ErrorMode) -> dict[str, bool]:
    # Errors always raise in mysql.connector; warnings are collected, never raised
    return {
        "get_warnings": mode is not ErrorMode.SILENT,
        "raise_on_warnings": False,
    }


def _driver_option(option: DriverOption | str) -> DriverOption:
    try:
        return DriverOption(option)
    except ValueError as e:
        raise InvalidConfigurationError(f"Unknown driver option: {option!r}") from e


class NamedTupleCursor:
    """Cursor wrapper that returns rows as named tuples.

    Attributes not defined here are delegated to the wrapped cursor.
    """

    def __init__(self, cursor: MySQLCursorAbstract):
        self._cursor = cursor

    def __getattr__(self, name: str) -> Any:
        return getattr(self._cursor, name)

    def _make_row(self, row: Any) -> Any:
        row_type = namedtuple("Row", self._cursor.column_names, rename=True)
        return row_type._make(row)

    def fetchone(self) -> Any:
        row = self._cursor.fetchone()
        return None if row is None else self._make_row(row)

    def fetchmany(self, size: int | None = None) -> list[Any]:
        return [self._make_row(row) for row in self._cursor.fetchmany(size=size)]

    def fetchall(self) -> list[Any]:
        return [self._make_row(row) for row in self._cursor.fetchall()]

    def __iter__(self) -> Iterator[Any]:
        return iter(self.fetchone, None)

    def __enter__(self) -> "NamedTupleCursor":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._cursor.close()


class Connection:
    """Live connection handle returned by :func:`connect`.

    The handle owns the native connection; callers close it with
    :meth:`close` or by using it as a context manager.
    """

    def __init__(
        self,
        native: MySQLConnectionAbstract,
        options: Mapping[DriverOption, OptionValue],
    ):
        self._native = native
        self._attributes: dict[DriverOption, OptionValue] = {**CLIENT_DEFAULTS, **options}

    @property
    def native(self) -> MySQLConnectionAbstract:
        """Underlying mysql.connector connection."""
        return self._native

    def get_attribute(self, option: DriverOption | str) -> OptionValue:
        """Return the current value of a driver option.

        Raises:
            InvalidConfigurationError: If the option is not recognized.
        """
        return self._attributes[_driver_option(option)]

    def set_attribute(self, option: DriverOption | str, value: Any) -> None:
        """Change a driver option on the open connection.

        Raises:
            InvalidConfigurationError: If the option or value is not recognized.
        """
        option = _driver_option(option)
        typed = coerce_option_value(option, value)
        if option is DriverOption.ERROR_MODE:
            for name, flag in _error_mode_kwargs(typed).items():
                setattr(self._native, name, flag)
        self._attributes[option] = typed

    def cursor(self) -> MySQLCursorAbstract | NamedTupleCursor:
        """Open a cursor honoring the fetch mode and statement emulation options."""
        fetch_mode = self._attributes[DriverOption.DEFAULT_FETCH_MODE]
        cursor = self._native.cursor(
            dictionary=fetch_mode is FetchMode.ASSOC,
            prepared=not self._attributes[DriverOption.EMULATE_PREPARES],
        )
        if fetch_mode is FetchMode.NAMED:
            return NamedTupleCursor(cursor)
        return cursor

    def is_connected(self) -> bool:
        return self._native.is_connected()

    def close(self) -> None:
        self._native.close()

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def connect(
    dsn: str,
    user: str,
    password: str,
    options: Mapping[DriverOption | str, Any],
) -> Connection:
    """Open a MySQL connection.

    Args:
        dsn: Connection string with host, port, database and charset.
        user: Account name.
        password: Account password.
        options: Driver options applied to the new connection.

    Returns:
        Connection handle.

    Raises:
        DatabaseConnectionError: If the DSN or options are malformed or the
            server rejects the connection.
    """
    params = parse_dsn(dsn)
    try:
        typed_options = normalize_options(options)
    except InvalidConfigurationError as e:
        raise DatabaseConnectionError(f"Invalid driver options: {e}") from e

    error_mode = typed_options.get(
        DriverOption.ERROR_MODE, CLIENT_DEFAULTS[DriverOption.ERROR_MODE]
    )
    try:
        native = mysql.connector.connect(
            user=user,
            password=password,
            **params,
            **_error_mode_kwargs(error_mode),
        )
    except mysql.connector.Error as e:
        raise DatabaseConnectionError(f"Failed to connect to database: {e}") from e

    return Connection(native, typed_options)
