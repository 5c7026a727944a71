"""
============================================================
TARJETA CRC — infrastructure/__init__.py
============================================================
Module: infrastructure (Adapters)

Responsibilities:
  - Agrupar adaptadores concretos: db (pool + schema), repositories
    (Postgres / InMemory) y storage (avatares en disco).

Policy:
  - Sin side effects: importar el paquete no abre conexiones ni crea carpetas.
  - Importar desde subpaquetes (p. ej. `app.infrastructure.repositories`).
============================================================
"""
