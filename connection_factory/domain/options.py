"""Driver options recognized when a connection is established."""

from collections.abc import Mapping
from enum import Enum
from typing import Any

from connection_factory.domain.exceptions import InvalidConfigurationError


class DriverOption(str, Enum):
    """Client behaviors that can be configured per connection."""

    ERROR_MODE = "error_mode"
    DEFAULT_FETCH_MODE = "default_fetch_mode"
    EMULATE_PREPARES = "emulate_prepares"


class ErrorMode(str, Enum):
    """How the connection reports server warnings."""

    SILENT = "silent"
    WARNING = "warning"
    EXCEPTION = "exception"


class FetchMode(str, Enum):
    """Shape of the rows returned by cursors."""

    ASSOC = "assoc"  # dict keyed by column name
    NUM = "num"  # positional tuple
    NAMED = "named"  # named tuple


OptionValue = ErrorMode | FetchMode | bool

DEFAULT_OPTIONS: dict[DriverOption, OptionValue] = {
    DriverOption.ERROR_MODE: ErrorMode.EXCEPTION,
    DriverOption.DEFAULT_FETCH_MODE: FetchMode.ASSOC,
    DriverOption.EMULATE_PREPARES: False,
}


def coerce_option_value(option: DriverOption, value: Any) -> OptionValue:
    """Convert a raw value to the type expected by ``option``.

    Args:
        option: Option the value belongs to.
        value: Enum member, enum value string or bool.

    Returns:
        Typed option value.

    Raises:
        InvalidConfigurationError: If the value is not valid for the option.
    """
    if option is DriverOption.EMULATE_PREPARES:
        if isinstance(value, bool):
            return value
        raise InvalidConfigurationError(
            f"Option '{option.value}' expects a boolean, got {value!r}"
        )

    enum_cls = ErrorMode if option is DriverOption.ERROR_MODE else FetchMode
    try:
        return enum_cls(value)
    except ValueError as e:
        raise InvalidConfigurationError(
            f"Invalid value {value!r} for option '{option.value}'"
        ) from e


def normalize_options(options: Mapping[Any, Any]) -> dict[DriverOption, OptionValue]:
    """Return ``options`` keyed by :class:`DriverOption` with typed values.

    Keys may be ``DriverOption`` members or their string values, so that
    options read from JSON or a plain dict are accepted.

    Raises:
        InvalidConfigurationError: On unknown keys or invalid values.
    """
    normalized: dict[DriverOption, OptionValue] = {}
    for key, value in options.items():
        try:
            option = DriverOption(key)
        except ValueError as e:
            raise InvalidConfigurationError(f"Unknown driver option: {key!r}") from e
        normalized[option] = coerce_option_value(option, value)
    return normalized


def serialize_options(options: Mapping[DriverOption, OptionValue]) -> dict[str, str | bool]:
    """Convert options to a JSON-safe dictionary."""
    return {
        option.value: value if isinstance(value, bool) else value.value
        for option, value in options.items()
    }
