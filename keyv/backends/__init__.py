"""Backend contracts and implementations."""

from .in_memory import InMemoryBackend
from .mongo import MongoBackend
from .mysql import MysqlBackend
from .postgres import PostgresBackend
from .protocol import Backend
from .redis import RedisBackend
from .sqlite import SqliteBackend


__all__ = [
    "Backend",
    "InMemoryBackend",
    "MongoBackend",
    "MysqlBackend",
    "PostgresBackend",
    "RedisBackend",
    "SqliteBackend",
]
