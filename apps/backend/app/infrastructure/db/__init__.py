"""PostgreSQL: pool del proceso, errores de ciclo de vida y DDL (schema.sql)."""

from .errors import (
    DatabasePoolError,
    PoolAlreadyInitializedError,
    PoolNotInitializedError,
)
from .pool import close_pool, get_pool, init_pool, reset_pool
from .schema import SCHEMA_PATH, apply_schema, load_schema_sql

__all__ = [
    "SCHEMA_PATH",
    "DatabasePoolError",
    "PoolAlreadyInitializedError",
    "PoolNotInitializedError",
    "apply_schema",
    "close_pool",
    "get_pool",
    "init_pool",
    "load_schema_sql",
    "reset_pool",
]
