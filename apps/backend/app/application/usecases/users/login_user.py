"""
===============================================================================
USE CASE: Login
===============================================================================

Business Goal:
    Validar credenciales y emitir un token de acceso firmado.

Contrato anti-enumeración:
    - Email inexistente y password incorrecto fallan con el MISMO
      UnauthorizedError (ver identity.auth_users.authenticate_user).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass

from ....domain.repositories import UserRepository
from ....identity.auth_users import authenticate_user, create_access_token
from ....identity.users import User


@dataclass(frozen=True)
class LoginInput:
    email: str
    password: str


@dataclass(frozen=True)
class AuthResult:
    token: str
    expires_in: int
    user: User


def issue_auth_result(user: User) -> AuthResult:
    """Token + registro (usado también por el registro)."""
    issued = create_access_token(user)
    return AuthResult(token=issued.token, expires_in=issued.expires_in, user=user)


class LoginUseCase:
    def __init__(self, repository: UserRepository) -> None:
        self._users = repository

    def execute(self, input_data: LoginInput) -> AuthResult:
        user = authenticate_user(
            self._users, input_data.email.strip(), input_data.password
        )
        return issue_auth_result(user)
