from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg_pool import ConnectionPool

from intake.config.settings import Settings

_pool: ConnectionPool | None = None


class PoolNotInitializedError(RuntimeError):
    """Raised when a connection is requested before init_pool()."""


def build_conninfo(settings: Settings) -> str:
    return make_conninfo(
        host=settings.db_host,
        port=str(settings.db_port),
        dbname=settings.db_database,
        user=settings.db_username,
        password=settings.db_password,
    )


def init_pool(settings: Settings, max_size: int = 10) -> None:
    """Initialize the process-wide connection pool from settings."""
    global _pool  # noqa: PLW0603
    if _pool is not None:
        return
    _pool = ConnectionPool(build_conninfo(settings), min_size=1, max_size=max_size, open=True)


def close_pool() -> None:
    global _pool  # noqa: PLW0603
    if _pool is not None:
        _pool.close()
        _pool = None


@contextmanager
def get_connection() -> Generator[psycopg.Connection[Any], None, None]:
    """Yield a pooled connection. Caller manages commit/rollback."""
    if _pool is None:
        raise PoolNotInitializedError("Connection pool not initialized. Call init_pool() first.")
    with _pool.connection() as conn:
        yield conn
