"""
===============================================================================
USE CASE: Update User
===============================================================================

Business Goal:
    Update parcial de un perfil (name, email, avatar, role).

Reglas:
    - owner-or-admin sobre el registro objetivo (403 si no).
    - Cambiar `role` requiere ADMIN, aunque el actor sea el dueño.
    - Cambio de email: re-chequeo de unicidad (409). El constraint de la DB
      sigue siendo la red de seguridad ante carreras.
    - Registro inexistente => 404 (después de autorizar: un USER no puede
      sondear qué ids existen).

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    UpdateUserUseCase

Collaborators:
    - UserRepository: get_user_by_id, get_user_by_email, update_user
    - identity.access_control: authorize_owner_or_admin, authorize_role_change
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass

from ....crosscutting.exceptions import ConflictError, NotFoundError
from ....crosscutting.logger import logger
from ....domain.repositories import UserRepository
from ....identity.access_control import (
    authorize_owner_or_admin,
    authorize_role_change,
)
from ....identity.users import Identity, User, UserRole
from .register_user import EMAIL_TAKEN
from .user_rules import validate_profile_changes


@dataclass(frozen=True)
class UpdateUserInput:
    """Campos en None = sin cambios."""

    name: str | None = None
    email: str | None = None
    avatar: str | None = None
    role: UserRole | None = None


class UpdateUserUseCase:
    def __init__(self, repository: UserRepository) -> None:
        self._users = repository

    def execute(
        self, actor: Identity, user_id: int, changes: UpdateUserInput
    ) -> User:
        authorize_owner_or_admin(actor, user_id)
        authorize_role_change(actor, changes.role)

        name = changes.name.strip() if changes.name is not None else None
        email = changes.email.strip() if changes.email is not None else None
        validate_profile_changes(email=email, name=name)

        current = self._users.get_user_by_id(user_id)
        if current is None:
            raise NotFoundError("Usuario", user_id)

        if email is not None and email != current.email:
            other = self._users.get_user_by_email(email)
            if other is not None and other.id != user_id:
                raise ConflictError(EMAIL_TAKEN)

        updated = self._users.update_user(
            user_id,
            name=name,
            email=email,
            avatar=changes.avatar,
            role=changes.role,
        )
        if updated is None:
            raise NotFoundError("Usuario", user_id)

        logger.info(
            "Usuario actualizado",
            extra={
                "user_id": user_id,
                "fields": sorted(
                    k
                    for k, v in (
                        ("name", name),
                        ("email", email),
                        ("avatar", changes.avatar),
                        ("role", changes.role),
                    )
                    if v is not None
                ),
            },
        )
        return updated
