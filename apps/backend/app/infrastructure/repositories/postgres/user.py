"""
===============================================================================
TARJETA CRC — repositories/postgres/user.py (UserRepository sobre psycopg)
===============================================================================

Responsabilidades:
  - Leer (por email, por id, página de listado) y escribir (alta, update
    parcial, baja) la tabla `users` definida en db/schema.sql.
  - Convertir filas en `User`; un role desconocido en la DB es DatabaseError.
  - uq_users_email violado -> ConflictError; cualquier otro fallo de psycopg
    -> DatabaseError, logueado con la operación.

Colaboradores:
  - psycopg_pool.ConnectionPool (explícito o el global de db.pool)
  - identity.users.User / UserRole
  - crosscutting.exceptions.ConflictError / DatabaseError

Reglas:
  - Sin políticas de negocio: roles y ownership se deciden en los use cases.
  - "No existe" es None, nunca una excepción.
  - Toda entrada viaja como parámetro (%s); nada de f-strings con datos.
  - Listado estable: created_at DESC, id DESC.
===============================================================================
"""

from __future__ import annotations

from typing import Iterable, Optional

from psycopg import errors as pg_errors
from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import ConflictError, DatabaseError
from ....crosscutting.logger import logger
from ....identity.users import User, UserRole
from ...db.pool import get_pool

# R: Lista explícita de columnas; el orden es el que espera _row_to_user.
_USER_COLUMNS = "id, email, name, password_hash, role, avatar, created_at, updated_at"

_USER_ORDER_BY = "created_at DESC, id DESC"

EMAIL_TAKEN_MESSAGE = "El email ya está registrado."


def _row_to_user(row: tuple) -> User:
    """
    Convierte una fila de `users` a `User`.

    Role casting estricto: si el valor no matchea el enum -> DatabaseError.
    """
    try:
        role = UserRole(row[4])
    except ValueError as exc:
        raise DatabaseError(f"Invalid user role in database: {row[4]}") from exc

    return User(
        id=int(row[0]),
        email=row[1],
        name=row[2],
        password_hash=row[3],
        role=role,
        avatar=row[5],
        created_at=row[6],
        updated_at=row[7],
    )


class PostgresUserRepository:
    """Implementación PostgreSQL de UserRepository."""

    def __init__(self, pool: ConnectionPool | None = None) -> None:
        # None: se resuelve get_pool() en cada operación.
        self._pool = pool

    # -- helpers internos ----------------------------------------------------------

    def _get_pool(self) -> ConnectionPool:
        if self._pool is not None:
            return self._pool
        return get_pool()

    def _execute(
        self,
        *,
        query: str,
        params: Iterable[object] = (),
        fetch: str,
        log_msg: str,
        log_extra: dict[str, object],
    ):
        """
        Ejecuta una query con manejo consistente de errores.

        fetch: "one" | "all" | "rowcount"
        """
        try:
            with self._get_pool().connection() as conn:
                cur = conn.execute(query, tuple(params))
                if fetch == "one":
                    return cur.fetchone()
                if fetch == "all":
                    return cur.fetchall()
                return cur.rowcount
        except pg_errors.UniqueViolation as exc:
            logger.warning(log_msg, extra={**log_extra, "error": "unique_violation"})
            raise ConflictError(EMAIL_TAKEN_MESSAGE, original_error=exc) from exc
        except Exception as exc:
            logger.exception(log_msg, extra={**log_extra, "error": str(exc)})
            raise DatabaseError(f"{log_msg}: {exc}", original_error=exc) from exc

    # -- lectura ----------------------------------------------------------

    def get_user_by_email(self, email: str) -> Optional[User]:
        # R: Sin normalizar (lower/trim): el email es case-sensitive.
        row = self._execute(
            query=f"SELECT {_USER_COLUMNS} FROM users WHERE email = %s",
            params=(email,),
            fetch="one",
            log_msg="postgres users.get_user_by_email falló",
            log_extra={},
        )
        return _row_to_user(row) if row else None

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        row = self._execute(
            query=f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s",
            params=(user_id,),
            fetch="one",
            log_msg="postgres users.get_user_by_id falló",
            log_extra={"user_id": user_id},
        )
        return _row_to_user(row) if row else None

    def list_users(self, *, limit: int = 200, offset: int = 0) -> list[User]:
        """
        Guard rails:
        - limit <= 0 => []
        - offset < 0 => 0
        """
        if limit <= 0:
            return []
        if offset < 0:
            offset = 0

        rows = self._execute(
            query=f"""
                SELECT {_USER_COLUMNS}
                FROM users
                ORDER BY {_USER_ORDER_BY}
                LIMIT %s OFFSET %s
            """,
            params=(limit, offset),
            fetch="all",
            log_msg="postgres users.list_users falló",
            log_extra={"limit": limit, "offset": offset},
        )
        return [_row_to_user(r) for r in rows]

    def ping(self) -> bool:
        row = self._execute(
            query="SELECT 1",
            fetch="one",
            log_msg="postgres users.ping falló",
            log_extra={},
        )
        return bool(row)

    # -- escritura ----------------------------------------------------------

    def create_user(
        self,
        *,
        email: str,
        name: str,
        password_hash: str,
        role: UserRole,
        avatar: str | None = None,
    ) -> User:
        row = self._execute(
            query=f"""
                INSERT INTO users (email, name, password_hash, role, avatar)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING {_USER_COLUMNS}
            """,
            params=(email, name, password_hash, role.value, avatar),
            fetch="one",
            log_msg="postgres users.create_user falló",
            log_extra={"role": role.value},
        )
        if not row:
            raise DatabaseError(
                "postgres users.create_user: sin fila devuelta"
            )
        return _row_to_user(row)

    def update_user(
        self,
        user_id: int,
        *,
        name: str | None = None,
        email: str | None = None,
        avatar: str | None = None,
        role: UserRole | None = None,
        password_hash: str | None = None,
    ) -> Optional[User]:
        """
        Update dinámico.

        - Construye SET con los campos presentes.
        - Siempre toca updated_at.
        - Si no hay cambios => retorna el usuario actual (si existe).
        """
        updates: list[str] = []
        params: list[object] = []

        if name is not None:
            updates.append("name = %s")
            params.append(name)
        if email is not None:
            updates.append("email = %s")
            params.append(email)
        if avatar is not None:
            updates.append("avatar = %s")
            params.append(avatar)
        if role is not None:
            updates.append("role = %s")
            params.append(role.value)
        if password_hash is not None:
            updates.append("password_hash = %s")
            params.append(password_hash)

        if not updates:
            return self.get_user_by_id(user_id)

        updates.append("updated_at = now()")
        params.append(user_id)

        # updates es controlado por código (no input usuario), el f-string es seguro.
        row = self._execute(
            query=f"""
                UPDATE users
                SET {", ".join(updates)}
                WHERE id = %s
                RETURNING {_USER_COLUMNS}
            """,
            params=params,
            fetch="one",
            log_msg="postgres users.update_user falló",
            log_extra={"user_id": user_id, "fields": len(updates) - 1},
        )
        return _row_to_user(row) if row else None

    def delete_user(self, user_id: int) -> bool:
        deleted = self._execute(
            query="DELETE FROM users WHERE id = %s",
            params=(user_id,),
            fetch="rowcount",
            log_msg="postgres users.delete_user falló",
            log_extra={"user_id": user_id},
        )
        return bool(deleted)
