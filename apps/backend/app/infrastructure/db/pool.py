"""
===============================================================================
TARJETA CRC — infrastructure/db/pool.py (Pool PostgreSQL del proceso)
===============================================================================

Responsabilidades:
  - Crear el único ConnectionPool del proceso (init_pool) y cerrarlo
    en el shutdown (close_pool).
  - Entregarlo a los repositorios (get_pool), fallando claro si no existe.
  - Preparar cada conexión nueva: statement_timeout + application_name.

Colaboradores:
  - psycopg_pool.ConnectionPool
  - api.main.lifespan / scripts/create_admin.py: init y cierre
  - repositories.postgres.user: consumidor
===============================================================================
"""

from __future__ import annotations

import threading

from psycopg import Connection
from psycopg_pool import ConnectionPool

from ...crosscutting.config import get_settings
from ...crosscutting.logger import logger
from .errors import PoolAlreadyInitializedError, PoolNotInitializedError

APPLICATION_NAME = "users-api"

_lock = threading.Lock()
_pool: ConnectionPool | None = None


def _configure_connection(conn: Connection) -> None:
    timeout_ms = get_settings().db_statement_timeout_ms
    if timeout_ms <= 0:
        return
    # R: set_config(..., false) deja el valor fijo para toda la sesión.
    conn.execute(
        "SELECT set_config('statement_timeout', %s, false)", (f"{timeout_ms}ms",)
    )
    conn.commit()


def init_pool(database_url: str, min_size: int, max_size: int) -> ConnectionPool:
    global _pool

    with _lock:
        if _pool is not None:
            raise PoolAlreadyInitializedError("init_pool() ya fue llamado en este proceso.")
        _pool = ConnectionPool(
            conninfo=database_url,
            min_size=min_size,
            max_size=max_size,
            kwargs={"application_name": APPLICATION_NAME},
            configure=_configure_connection,
            name=APPLICATION_NAME,
            open=True,
        )

    logger.info("pool DB abierto", extra={"min_size": min_size, "max_size": max_size})
    return _pool


def get_pool() -> ConnectionPool:
    if _pool is None:
        raise PoolNotInitializedError("Pool DB no inicializado (falta init_pool()).")
    return _pool


def _detach() -> ConnectionPool | None:
    global _pool

    with _lock:
        pool, _pool = _pool, None
    return pool


def close_pool() -> None:
    """Cierra el pool si existe. Llamarlo dos veces es inocuo."""
    pool = _detach()
    if pool is not None:
        pool.close()
        logger.info("pool DB cerrado")


def reset_pool() -> None:
    """Para tests: descarta el pool aunque su close() falle."""
    pool = _detach()
    if pool is None:
        return
    try:
        pool.close()
    except Exception as exc:
        logger.warning("reset_pool: close() falló", extra={"error": str(exc)})
