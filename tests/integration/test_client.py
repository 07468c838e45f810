"""Integration tests for the mysql.connector adapter."""

from unittest.mock import MagicMock, create_autospec, patch

import pytest
from mysql.connector.connection import MySQLConnection
from mysql.connector.cursor import MySQLCursor

from connection_factory.domain.exceptions import DatabaseConnectionError, InvalidConfigurationError
from connection_factory.domain.options import DEFAULT_OPTIONS, DriverOption, ErrorMode, FetchMode
from connection_factory.infrastructure.database.client import (
    Connection,
    NamedTupleCursor,
    connect,
    parse_dsn,
)


def native_connection() -> MagicMock:
    """Mock checked against the real MySQLConnection signatures."""
    return create_autospec(MySQLConnection, instance=True)


def native_cursor(column_names: tuple[str, ...]) -> MagicMock:
    cursor = create_autospec(MySQLCursor, instance=True)
    cursor.column_names = column_names
    return cursor


class TestParseDsn:
    """Test cases for parse_dsn."""

    def test_parse_full_dsn(self) -> None:
        """Test parsing the DSN produced by ConnectionConfig."""
        result = parse_dsn("mysql:host=127.0.0.1;port=3307;dbname=demo;charset=latin1")

        assert result == {
            "host": "127.0.0.1",
            "port": 3307,
            "database": "demo",
            "charset": "latin1",
        }

    def test_parse_ignores_trailing_separator(self) -> None:
        """Test that empty components are skipped."""
        assert parse_dsn("mysql:host=db;") == {"host": "db"}

    @pytest.mark.parametrize(
        "dsn",
        [
            "pgsql:host=db;dbname=app",
            "host=db;dbname=app",
            "mysql:host=db;dbname",
            "mysql:host=db;sslmode=require",
            "mysql:unix_socket=/tmp/mysql.sock;dbname=app",
            "mysql:host=db;port=abc",
        ],
    )
    def test_parse_malformed(self, dsn: str) -> None:
        """Test that malformed DSNs are connection errors."""
        with pytest.raises(DatabaseConnectionError):
            parse_dsn(dsn)


class TestConnect:
    """Test cases for connect."""

    @patch("mysql.connector.connect")
    def test_connect_exception_mode_does_not_raise_warnings(
        self, mock_connect: MagicMock
    ) -> None:
        """Test that the exception mode collects warnings without raising them."""
        mock_connect.return_value = native_connection()

        connect("mysql:host=db;dbname=app", "root", "", {"error_mode": "exception"})

        kwargs = mock_connect.call_args.kwargs
        assert kwargs["get_warnings"] is True
        assert kwargs["raise_on_warnings"] is False

    @patch("mysql.connector.connect")
    def test_connect_silent_mode(self, mock_connect: MagicMock) -> None:
        """Test the connector flags for the silent error mode."""
        mock_connect.return_value = native_connection()

        connect("mysql:host=db;dbname=app", "root", "", {"error_mode": "silent"})

        kwargs = mock_connect.call_args.kwargs
        assert kwargs["get_warnings"] is False
        assert kwargs["raise_on_warnings"] is False

    @patch("mysql.connector.connect")
    def test_connect_invalid_options(self, mock_connect: MagicMock) -> None:
        """Test that malformed options fail before reaching the client."""
        with pytest.raises(DatabaseConnectionError):
            connect("mysql:host=db;dbname=app", "root", "", {"error_mode": "loud"})

        mock_connect.assert_not_called()

    @patch("mysql.connector.connect")
    def test_unset_options_use_client_behavior(self, mock_connect: MagicMock) -> None:
        """Test the attributes reported when no options are configured."""
        mock_connect.return_value = native_connection()

        connection = connect("mysql:host=db;dbname=app", "root", "", {})

        assert connection.get_attribute(DriverOption.ERROR_MODE) is ErrorMode.SILENT
        assert connection.get_attribute(DriverOption.DEFAULT_FETCH_MODE) is FetchMode.NUM
        assert connection.get_attribute(DriverOption.EMULATE_PREPARES) is True


class TestConnectionHandle:
    """Test cases for the Connection handle."""

    def test_cursor_with_default_options(self) -> None:
        """Test that the default options open a valid dictionary cursor."""
        native = native_connection()
        connection = Connection(native, dict(DEFAULT_OPTIONS))

        cursor = connection.cursor()

        native.cursor.assert_called_once_with(dictionary=True, prepared=True)
        assert cursor is native.cursor.return_value

    def test_cursor_with_client_defaults(self) -> None:
        """Test the cursor flags for tuple rows with emulation enabled."""
        native = native_connection()
        connection = Connection(native, {})

        connection.cursor()

        native.cursor.assert_called_once_with(dictionary=False, prepared=False)

    def test_named_fetch_mode_wraps_cursor(self) -> None:
        """Test that named rows come from a wrapped plain cursor."""
        native = native_connection()
        native.cursor.return_value = native_cursor(("id", "name"))
        connection = Connection(native, {})

        connection.set_attribute(DriverOption.DEFAULT_FETCH_MODE, FetchMode.NAMED)
        cursor = connection.cursor()

        assert connection.get_attribute(DriverOption.DEFAULT_FETCH_MODE) is FetchMode.NAMED
        assert isinstance(cursor, NamedTupleCursor)
        native.cursor.assert_called_once_with(dictionary=False, prepared=False)

    def test_set_error_mode_updates_native_connection(self) -> None:
        """Test that the error mode is pushed to the native connection."""
        native = native_connection()
        connection = Connection(native, {})

        connection.set_attribute("error_mode", "exception")

        assert native.get_warnings is True
        assert native.raise_on_warnings is False
        assert connection.get_attribute(DriverOption.ERROR_MODE) is ErrorMode.EXCEPTION

    def test_set_unknown_attribute(self) -> None:
        """Test that unknown options are rejected on write."""
        connection = Connection(native_connection(), {})

        with pytest.raises(InvalidConfigurationError):
            connection.set_attribute("autocommit", True)

    def test_get_unknown_attribute(self) -> None:
        """Test that unknown options are rejected on read."""
        connection = Connection(native_connection(), {})

        with pytest.raises(InvalidConfigurationError):
            connection.get_attribute("autocommit")

    def test_context_manager_closes(self) -> None:
        """Test that leaving the context closes the native connection."""
        native = native_connection()
        native.is_connected.return_value = True

        with Connection(native, {}) as connection:
            assert connection.is_connected() is True

        native.close.assert_called_once()


class TestNamedTupleCursor:
    """Test cases for NamedTupleCursor."""

    def test_fetchone(self) -> None:
        """Test a single row as a named tuple."""
        cursor = native_cursor(("id", "name"))
        cursor.fetchone.return_value = (1, "alice")

        row = NamedTupleCursor(cursor).fetchone()

        assert row.id == 1
        assert row.name == "alice"

    def test_fetchone_without_rows(self) -> None:
        """Test that an exhausted result set yields None."""
        cursor = native_cursor(("id",))
        cursor.fetchone.return_value = None

        assert NamedTupleCursor(cursor).fetchone() is None

    def test_fetchall_renames_invalid_columns(self) -> None:
        """Test rows whose column names are not identifiers."""
        cursor = native_cursor(("1", "name"))
        cursor.fetchall.return_value = [(1, "alice"), (1, "bob")]

        rows = NamedTupleCursor(cursor).fetchall()

        assert [row.name for row in rows] == ["alice", "bob"]
        assert rows[0] == (1, "alice")

    def test_iteration(self) -> None:
        """Test iterating rows until the result set is exhausted."""
        cursor = native_cursor(("id",))
        cursor.fetchone.side_effect = [(1,), (2,), None]

        assert [row.id for row in NamedTupleCursor(cursor)] == [1, 2]

    def test_delegates_execute(self) -> None:
        """Test that other cursor methods reach the wrapped cursor."""
        cursor = native_cursor(("id",))

        NamedTupleCursor(cursor).execute("SELECT 1 AS id")

        cursor.execute.assert_called_once_with("SELECT 1 AS id")
