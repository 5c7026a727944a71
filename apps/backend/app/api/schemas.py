"""
===============================================================================
TARJETA CRC — app/api/schemas.py (DTOs HTTP)
===============================================================================

Responsabilidades:
  - Definir los modelos de request/response (pydantic v2) de /api.
  - Validar forma y reglas por campo (los mensajes salen de user_rules, así
    pydantic y los casos de uso dicen lo mismo).
  - Serializar registros SIN password_hash y con claves camelCase
    (createdAt, updatedAt, confirmPassword, avatarUrl).

Colaboradores:
  - application.usecases.users.user_rules
  - identity.users.User / UserRole
===============================================================================
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..application.usecases.users.user_rules import (
    MAX_EMAIL_LENGTH,
    email_error,
    name_error,
    password_error,
)
from ..identity.users import User, UserRole


def _check(error: str | None, value):
    if error:
        raise ValueError(error)
    return value


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------


class LoginRequest(_CamelModel):
    email: str = Field(..., min_length=3, max_length=MAX_EMAIL_LENGTH)
    password: str = Field(..., min_length=1, max_length=512)

    @field_validator("email")
    @classmethod
    def email_valido(cls, v: str) -> str:
        v = v.strip()
        return _check(email_error(v), v)


class RegisterRequest(_CamelModel):
    """Alta pública. `role` se acepta por compatibilidad y se ignora."""

    name: str = Field(..., max_length=120)
    email: str = Field(..., max_length=MAX_EMAIL_LENGTH)
    password: str = Field(..., max_length=512)
    confirm_password: str = Field(..., alias="confirmPassword", max_length=512)
    avatar: str | None = Field(default=None, max_length=2048)
    role: UserRole | None = None

    @field_validator("email")
    @classmethod
    def email_valido(cls, v: str) -> str:
        v = v.strip()
        return _check(email_error(v), v)

    @field_validator("password")
    @classmethod
    def password_valido(cls, v: str) -> str:
        return _check(password_error(v), v)

    @field_validator("name")
    @classmethod
    def name_valido(cls, v: str) -> str:
        v = v.strip()
        return _check(name_error(v), v)


class CreateUserRequest(RegisterRequest):
    """Alta administrativa: acá `role` sí se respeta."""


class UpdateUserRequest(_CamelModel):
    name: str | None = Field(default=None, max_length=120)
    email: str | None = Field(default=None, max_length=MAX_EMAIL_LENGTH)
    avatar: str | None = Field(default=None, max_length=2048)
    role: UserRole | None = None

    @field_validator("email")
    @classmethod
    def email_valido(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return _check(email_error(v), v)

    @field_validator("name")
    @classmethod
    def name_valido(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return _check(name_error(v), v)


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------


class UserResponse(_CamelModel):
    id: int
    name: str
    email: str
    avatar: str | None = None
    role: UserRole
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            avatar=user.avatar,
            role=user.role,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class AuthResponse(_CamelModel):
    token: str
    expires_in: int = Field(..., alias="expiresIn")
    user: UserResponse


class AvatarResponse(_CamelModel):
    success: bool = True
    avatar_url: str = Field(..., alias="avatarUrl")
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
