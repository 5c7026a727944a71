"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/user.py
============================================================
Class: InMemoryUserRepository

Responsibilities:
  - Almacenar registros de usuario en memoria (tests / local dev sin DB).
  - Replicar la semántica de Postgres: ids incrementales, unicidad de email
    (ConflictError), updated_at en cada mutación, ordering
    created_at DESC, id DESC.

Collaborators:
  - identity.users.User / UserRole
  - domain.repositories.UserRepository (contrato a implementar)
  - crosscutting.exceptions.ConflictError

Constraints / Notes:
  - Thread-safe: check + insert bajo el mismo Lock (equivale al constraint).
  - User es inmutable: los updates reemplazan la instancia (dataclasses.replace).
============================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from itertools import count
from threading import Lock
from typing import Dict, List, Optional

from ....crosscutting.exceptions import ConflictError
from ....domain.repositories import UserRepository
from ....identity.users import User, UserRole
from ..postgres.user import EMAIL_TAKEN_MESSAGE


class InMemoryUserRepository(UserRepository):
    """
    Repositorio in-memory, thread-safe, para credenciales.

    Modelo mental:
    - _users es la "tabla" (id -> User).
    - _ids emula BIGSERIAL (empieza en 1, nunca reutiliza).
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._users: Dict[int, User] = {}
        self._ids = count(1)

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def _email_taken(self, email: str, *, exclude_id: int | None = None) -> bool:
        return any(
            u.email == email and u.id != exclude_id for u in self._users.values()
        )

    # =========================================================
    # Lectura
    # =========================================================
    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return user
        return None

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def list_users(self, *, limit: int = 200, offset: int = 0) -> List[User]:
        if limit <= 0:
            return []
        offset = max(offset, 0)
        with self._lock:
            ordered = sorted(
                self._users.values(),
                key=lambda u: (u.created_at, u.id),
                reverse=True,
            )
        return ordered[offset : offset + limit]

    def ping(self) -> bool:
        return True

    # =========================================================
    # Escritura
    # =========================================================
    def create_user(
        self,
        *,
        email: str,
        name: str,
        password_hash: str,
        role: UserRole,
        avatar: str | None = None,
    ) -> User:
        with self._lock:
            if self._email_taken(email):
                raise ConflictError(EMAIL_TAKEN_MESSAGE)
            now = self._now()
            user = User(
                id=next(self._ids),
                email=email,
                name=name,
                password_hash=password_hash,
                role=role,
                avatar=avatar,
                created_at=now,
                updated_at=now,
            )
            self._users[user.id] = user
            return user

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
        changes = {
            key: value
            for key, value in (
                ("name", name),
                ("email", email),
                ("avatar", avatar),
                ("role", role),
                ("password_hash", password_hash),
            )
            if value is not None
        }
        with self._lock:
            current = self._users.get(user_id)
            if current is None:
                return None
            if not changes:
                return current
            if email is not None and self._email_taken(email, exclude_id=user_id):
                raise ConflictError(EMAIL_TAKEN_MESSAGE)
            updated = replace(current, updated_at=self._now(), **changes)
            self._users[user_id] = updated
            return updated

    def delete_user(self, user_id: int) -> bool:
        with self._lock:
            return self._users.pop(user_id, None) is not None
