"""Store configuration and backend selection."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum
from typing import Any
from urllib.parse import urlsplit

from .backends import (
    Backend,
    InMemoryBackend,
    MongoBackend,
    MysqlBackend,
    PostgresBackend,
    RedisBackend,
    SqliteBackend,
)
from .backends.mongo import DEFAULT_COLLECTION, DEFAULT_DATABASE
from .backends.relational import DEFAULT_TABLE
from .backends.sqlite import sqlite_path_from_url
from .errors import ConfigurationError
from .expiration import Clock
from .store import Store


class BackendKind(StrEnum):
    """Closed set of supported backends."""

    MEMORY = "memory"
    POSTGRES = "postgres"
    MYSQL = "mysql"
    SQLITE = "sqlite"
    REDIS = "redis"
    MONGODB = "mongodb"


_SCHEMES: dict[str, BackendKind] = {
    "memory": BackendKind.MEMORY,
    "postgres": BackendKind.POSTGRES,
    "postgresql": BackendKind.POSTGRES,
    "mysql": BackendKind.MYSQL,
    "sqlite": BackendKind.SQLITE,
    "redis": BackendKind.REDIS,
    "rediss": BackendKind.REDIS,
    "unix": BackendKind.REDIS,
    "mongodb": BackendKind.MONGODB,
    "mongodb+srv": BackendKind.MONGODB,
}


@dataclass(frozen=True, slots=True)
class StoreConfig:
    """Everything needed to build a :class:`~keyv.store.Store`.

    Backend specific fields are ignored by the other backends.
    """

    backend: BackendKind = BackendKind.MEMORY
    url: str | None = None
    namespace: str = ""
    sep: str = ":"
    default_ttl: timedelta | None = None
    sweep_interval: timedelta | None = None
    # postgres, mysql, sqlite
    table: str = DEFAULT_TABLE
    # postgres
    schema: str | None = None
    # postgres, mysql
    create_table: bool = False
    # mongodb
    database: str = DEFAULT_DATABASE
    collection: str = DEFAULT_COLLECTION
    ttl_index: bool = True

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "backend", BackendKind(self.backend))
        except ValueError as error:
            choices = ", ".join(kind.value for kind in BackendKind)
            msg = f"unknown backend {self.backend!r}; expected one of: {choices}"
            raise ConfigurationError(msg) from error
        if self.backend is not BackendKind.MEMORY and not self.url:
            msg = f"backend {self.backend.value!r} requires a url"
            raise ConfigurationError(msg)

    @classmethod
    def from_url(cls, url: str, **options: Any) -> StoreConfig:
        """Build a config whose backend is inferred from the URL scheme."""
        return cls(backend=backend_kind_for_url(url), url=url, **options)


def backend_kind_for_url(url: str) -> BackendKind:
    scheme = urlsplit(url).scheme.lower()
    try:
        return _SCHEMES[scheme]
    except KeyError:
        msg = f"unsupported url scheme {scheme!r} in {url!r}"
        raise ConfigurationError(msg) from None


def _memory(_config: StoreConfig, clock: Clock | None) -> Backend:
    return InMemoryBackend(clock=clock)


def _postgres(config: StoreConfig, clock: Clock | None) -> Backend:
    return PostgresBackend(
        dsn=config.url or "",
        table=config.table,
        schema=config.schema,
        create_table=config.create_table,
        clock=clock,
    )


def _mysql(config: StoreConfig, clock: Clock | None) -> Backend:
    return MysqlBackend(url=config.url or "", table=config.table, create_table=config.create_table, clock=clock)


def _sqlite(config: StoreConfig, clock: Clock | None) -> Backend:
    return SqliteBackend(path=sqlite_path_from_url(config.url or ""), table=config.table, clock=clock)


def _redis(config: StoreConfig, clock: Clock | None) -> Backend:
    return RedisBackend(url=config.url or "", clock=clock)


def _mongodb(config: StoreConfig, clock: Clock | None) -> Backend:
    return MongoBackend(
        url=config.url or "",
        database=config.database,
        collection=config.collection,
        ttl_index=config.ttl_index,
        clock=clock,
    )


_BUILDERS: dict[BackendKind, Callable[[StoreConfig, Clock | None], Backend]] = {
    BackendKind.MEMORY: _memory,
    BackendKind.POSTGRES: _postgres,
    BackendKind.MYSQL: _mysql,
    BackendKind.SQLITE: _sqlite,
    BackendKind.REDIS: _redis,
    BackendKind.MONGODB: _mongodb,
}


def create_backend(config: StoreConfig, *, clock: Clock | None = None) -> Backend:
    """Instantiate the backend selected by ``config``."""
    return _BUILDERS[config.backend](config, clock)


def create_store(config: StoreConfig, *, backend: Backend | None = None, clock: Clock | None = None) -> Store:
    """Build a store from ``config``, optionally over an existing backend."""
    return Store(
        backend if backend is not None else create_backend(config, clock=clock),
        namespace=config.namespace,
        sep=config.sep,
        default_ttl=config.default_ttl,
        clock=clock,
        sweep_interval=config.sweep_interval,
    )
