"""Error types raised by stores and backends."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Iterator


class KeyvError(Exception):
    """Base class for every error raised by keyv."""


class ConfigurationError(KeyvError, ValueError):
    """Invalid store or backend construction input."""


class SerializationError(KeyvError, ValueError):
    """A value could not be encoded, or stored text could not be decoded."""


class BackendError(KeyvError):
    """The backend failed or rejected an operation.

    Parameters
    ----------
    message
        Human readable description.
    operation
        Name of the backend operation that failed, e.g. ``"get"``.
    key
        Backend key involved, when the operation targets a single key.
    """

    def __init__(self, message: str, *, operation: str | None = None, key: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.key = key


class StoreConnectionError(BackendError, ConnectionError):
    """The backend could not be reached or did not answer in time."""


_CONNECTION_ERROR_NAMES = frozenset(
    {
        "ConnectionError",
        "TimeoutError",
        "OSError",
        # asyncpg
        "ConnectionDoesNotExistError",
        "ConnectionFailureError",
        "CannotConnectNowError",
        "TooManyConnectionsError",
        # redis
        "BusyLoadingError",
        # pymongo
        "ConnectionFailure",
        "AutoReconnect",
        "NetworkTimeout",
        "ServerSelectionTimeoutError",
        "ExecutionTimeout",
    }
)


def error_type_names(error: BaseException) -> set[str]:
    """Return class names along the MRO of ``error``."""
    return {cls.__name__ for cls in type(error).__mro__}


def is_connection_error(error: BaseException) -> bool:
    return not error_type_names(error).isdisjoint(_CONNECTION_ERROR_NAMES)


def _describe(operation: str, key: str | None) -> str:
    if key is None:
        return f"backend operation '{operation}' failed"
    return f"backend operation '{operation}' failed for key {key!r}"


@contextmanager
def translate_errors(operation: str, key: str | None = None) -> Iterator[None]:
    """Re-raise client failures as :class:`BackendError` subclasses.

    Errors already belonging to keyv pass through unchanged; cancellation is never caught.
    """
    try:
        yield
    except KeyvError:
        raise
    except Exception as error:
        message = f"{_describe(operation, key)}: {error}"
        if is_connection_error(error):
            raise StoreConnectionError(message, operation=operation, key=key) from error
        raise BackendError(message, operation=operation, key=key) from error
