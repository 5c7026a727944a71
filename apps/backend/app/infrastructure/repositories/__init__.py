# ---------------------------
# In-memory implementations
# Usados para tests unitarios rápidos o entornos sin DB.
# No persisten datos tras reiniciar la app.
# ---------------------------
from .in_memory import InMemoryUserRepository

# ---------------------------
# Postgres implementations
# Implementación de producción con persistencia real.
# ---------------------------
from .postgres import PostgresUserRepository

__all__ = [
    "PostgresUserRepository",
    "InMemoryUserRepository",
]
