"""
===============================================================================
USE CASE: Register User / Create User (admin)
===============================================================================

Business Goal:
    Dar de alta un registro de credenciales garantizando:
      - input válido (email, password + confirmación, nombre)
      - email único (ConflictError)
      - password solo como hash Argon2 (nunca texto plano)
      - rol controlado por el camino de alta

Política de roles:
    - Registro self-service: SIEMPRE USER, ignore lo que venga en el payload.
    - Creación administrativa: el rol pedido se respeta (default USER); el
      caller ya pasó por require_admin.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    RegisterUserUseCase / CreateUserUseCase

Responsibilities:
    - Validar reglas de alta (user_rules).
    - Rechazar temprano emails ya registrados (mensaje claro).
    - Hashear y persistir; el constraint de la DB es la red de seguridad real.

Collaborators:
    - UserRepository: get_user_by_email, create_user
    - password_hasher: Callable[[str], str] (identity.auth_users.hash_password)
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ....crosscutting.exceptions import ConflictError
from ....crosscutting.logger import logger
from ....domain.repositories import UserRepository
from ....identity.users import User, UserRole
from .user_rules import validate_new_account

EMAIL_TAKEN = "Ya existe un usuario con ese email."


@dataclass(frozen=True)
class NewAccountInput:
    """DTO de entrada del alta. `role` solo lo honra CreateUserUseCase."""

    email: str
    password: str
    confirm_password: str
    name: str
    role: UserRole | None = None
    avatar: str | None = None


class _CreateAccount:
    def __init__(
        self,
        repository: UserRepository,
        password_hasher: Callable[[str], str],
    ) -> None:
        self._users = repository
        self._hash = password_hasher

    def _create(self, input_data: NewAccountInput, role: UserRole) -> User:
        email = input_data.email.strip()
        name = input_data.name.strip()
        validate_new_account(
            email=email,
            password=input_data.password,
            confirm_password=input_data.confirm_password,
            name=name,
        )

        if self._users.get_user_by_email(email) is not None:
            raise ConflictError(EMAIL_TAKEN)

        user = self._users.create_user(
            email=email,
            name=name,
            password_hash=self._hash(input_data.password),
            role=role,
            avatar=input_data.avatar,
        )
        logger.info(
            "Usuario creado", extra={"user_id": user.id, "role": user.role.value}
        )
        return user


class RegisterUserUseCase(_CreateAccount):
    """Alta pública: el rol siempre es USER."""

    def execute(self, input_data: NewAccountInput) -> User:
        if input_data.role is not None and input_data.role != UserRole.USER:
            logger.warning(
                "Registro: rol solicitado ignorado",
                extra={"requested_role": input_data.role.value},
            )
        return self._create(input_data, UserRole.USER)


class CreateUserUseCase(_CreateAccount):
    """Alta administrativa: el rol pedido se respeta."""

    def execute(self, input_data: NewAccountInput) -> User:
        return self._create(input_data, input_data.role or UserRole.USER)
