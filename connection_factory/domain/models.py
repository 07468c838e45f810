"""Domain models (dataclasses)."""

import json
import os
from types import MappingProxyType
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from connection_factory.domain.exceptions import InvalidConfigurationError
from connection_factory.domain.options import (
    DEFAULT_OPTIONS,
    DriverOption,
    OptionValue,
    normalize_options,
    serialize_options,
)

DSN_SCHEME = "mysql"
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 3306
DEFAULT_CHARSET = "utf8"
PASSWORD_MASK = "***"


class EnvironmentInput(BaseModel):
    """Connection parameters as read from ``DB_*`` environment variables."""

    model_config = ConfigDict(extra="ignore")

    host: str = Field(DEFAULT_HOST, alias="DB_HOST")
    port: int = Field(DEFAULT_PORT, alias="DB_PORT")
    database: str = Field("", alias="DB_NAME")
    user: str = Field("", alias="DB_USER")
    password: str = Field("", alias="DB_PASS")
    charset: str = Field(DEFAULT_CHARSET, alias="DB_CHARSET")

    @field_validator("port", mode="before")
    @classmethod
    def _numeric_port_or_default(cls, value: Any) -> int:
        # Non-numeric values fall back to the default port
        if isinstance(value, int):
            return value
        text = str(value).strip()
        return int(text) if text.isascii() and text.isdigit() else DEFAULT_PORT


class MappingInput(BaseModel):
    """Connection parameters as accepted by :meth:`ConnectionConfig.from_mapping`."""

    model_config = ConfigDict(extra="ignore")

    db_host: str = DEFAULT_HOST
    db_port: int = DEFAULT_PORT
    db_name: str = ""
    db_user: str = ""
    db_pass: str = ""
    db_charset: str = DEFAULT_CHARSET
    options: dict[Any, Any] | None = None


@dataclass(frozen=True)
class ConnectionConfig:
    """Validated, immutable parameters for a MySQL connection.

    Attributes:
        host: Database server address.
        port: TCP port of the server.
        database: Schema to select; must not be empty.
        user: Account used to authenticate; must not be empty.
        password: Account password. Hidden from ``repr`` and masked by
            :meth:`to_dict` / :meth:`to_json` unless explicitly requested.
        charset: Connection character set.
        options: Driver options, read-only. When given, they replace the
            defaults entirely; nothing is merged.
    """

    host: str
    port: int
    database: str
    user: str
    password: str = field(repr=False)
    charset: str = DEFAULT_CHARSET
    options: Mapping[DriverOption, OptionValue] = field(
        default_factory=lambda: dict(DEFAULT_OPTIONS)
    )

    def __post_init__(self) -> None:
        if not self.database:
            raise InvalidConfigurationError("Database name cannot be empty.")
        if not self.user:
            raise InvalidConfigurationError("Database user cannot be empty.")
        object.__setattr__(self, "options", MappingProxyType(normalize_options(self.options)))

    def build_connection_string(self) -> str:
        """Build the DSN for this configuration.

        Fields are interpolated verbatim. Values containing ``;`` produce an
        ambiguous DSN, so callers must not pass such values.
        """
        return (
            f"{DSN_SCHEME}:host={self.host};port={self.port};"
            f"dbname={self.database};charset={self.charset}"
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ConnectionConfig":
        """Create a configuration from ``DB_*`` variables.

        Args:
            environ: Variables to read. Defaults to the process environment.

        Returns:
            New ConnectionConfig with default driver options.

        Raises:
            InvalidConfigurationError: If ``DB_NAME`` or ``DB_USER`` is missing
                or empty.
        """
        if environ is None:
            environ = os.environ

        try:
            data = EnvironmentInput.model_validate(dict(environ))
        except ValidationError as e:
            raise InvalidConfigurationError(f"Invalid environment configuration: {e}") from e

        return cls(
            host=data.host,
            port=data.port,
            database=data.database,
            user=data.user,
            password=data.password,
            charset=data.charset,
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ConnectionConfig":
        """Create a configuration from a ``db_*`` keyed mapping.

        Recognized keys are ``db_host``, ``db_port``, ``db_name``, ``db_user``,
        ``db_pass``, ``db_charset`` and ``options``; the output of
        :meth:`to_dict` is accepted as input.

        Raises:
            InvalidConfigurationError: If a value has the wrong type or the
                resulting configuration is invalid.
        """
        # Missing and None values both fall back to the defaults
        present = {key: value for key, value in data.items() if value is not None}
        try:
            parsed = MappingInput.model_validate(present)
        except ValidationError as e:
            raise InvalidConfigurationError(f"Invalid configuration mapping: {e}") from e

        kwargs: dict[str, Any] = {}
        if parsed.options is not None:
            kwargs["options"] = parsed.options

        return cls(
            host=parsed.db_host,
            port=parsed.db_port,
            database=parsed.db_name,
            user=parsed.db_user,
            password=parsed.db_pass,
            charset=parsed.db_charset,
            **kwargs,
        )

    def to_dict(self, include_sensitive: bool = False) -> dict[str, Any]:
        """Convert to dictionary, masking the password by default."""
        return {
            "db_host": self.host,
            "db_port": self.port,
            "db_name": self.database,
            "db_user": self.user,
            "db_pass": self.password if include_sensitive else PASSWORD_MASK,
            "db_charset": self.charset,
            "options": serialize_options(self.options),
        }

    def to_json(self, include_sensitive: bool = False) -> str:
        """Convert to a pretty-printed JSON string."""
        return json.dumps(self.to_dict(include_sensitive), indent=4, ensure_ascii=False)
