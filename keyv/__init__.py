"""keyv - async key-value storage over interchangeable backends"""

import logging

from ._version import version as __version__
from .backends import (
    Backend,
    InMemoryBackend,
    MongoBackend,
    MysqlBackend,
    PostgresBackend,
    RedisBackend,
    SqliteBackend,
)
from .codec import Codec, JsonCodec
from .config import BackendKind, StoreConfig, create_backend, create_store
from .entry import Entry
from .errors import BackendError, ConfigurationError, KeyvError, SerializationError, StoreConnectionError
from .expiration import is_expired, utc_now
from .namespace import Namespace
from .store import Store
from .sweeper import ExpirySweeper


logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Backend",
    "BackendError",
    "BackendKind",
    "Codec",
    "ConfigurationError",
    "Entry",
    "ExpirySweeper",
    "InMemoryBackend",
    "JsonCodec",
    "KeyvError",
    "MongoBackend",
    "MysqlBackend",
    "Namespace",
    "PostgresBackend",
    "RedisBackend",
    "SerializationError",
    "SqliteBackend",
    "Store",
    "StoreConfig",
    "StoreConnectionError",
    "__version__",
    "create_backend",
    "create_store",
    "is_expired",
    "utc_now",
]
