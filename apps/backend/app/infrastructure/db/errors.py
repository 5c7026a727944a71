"""
===============================================================================
TARJETA CRC — infrastructure/db/errors.py
===============================================================================

Errores de ciclo de vida del pool. Son errores de programación (orden de
arranque), no de datos: no heredan de AppError y no llegan al cliente como 4xx.
===============================================================================
"""


class DatabasePoolError(Exception):
    pass


class PoolAlreadyInitializedError(DatabasePoolError):
    """init_pool() llamado dos veces en el mismo proceso."""


class PoolNotInitializedError(DatabasePoolError):
    """Un repositorio Postgres pidió el pool antes de init_pool()."""
