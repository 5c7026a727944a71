"""
===============================================================================
CRC CARD — infrastructure/db/schema.py
===============================================================================

Componente:
  Aplicación del esquema SQL (sin migraciones versionadas)

Responsabilidades:
  - Ubicar y leer schema.sql (empaquetado junto al módulo).
  - Ejecutarlo en una única transacción contra una conexión psycopg.

Colaboradores:
  - psycopg (conexión directa, no el pool)
  - scripts/init_db.py
===============================================================================
"""

from __future__ import annotations

from pathlib import Path

import psycopg

from ...crosscutting.logger import logger

SCHEMA_PATH = Path(__file__).with_name("schema.sql")


def load_schema_sql(path: Path = SCHEMA_PATH) -> str:
    return path.read_text(encoding="utf-8")


def apply_schema(database_url: str, *, path: Path = SCHEMA_PATH) -> None:
    """Aplica el DDL (idempotente: CREATE ... IF NOT EXISTS)."""
    sql = load_schema_sql(path)
    logger.info("Aplicando schema", extra={"schema_path": str(path)})
    with psycopg.connect(database_url) as conn:
        conn.execute(sql)
        conn.commit()
    logger.info("Schema aplicado")
