"""
===============================================================================
TARJETA CRC — identity/users.py
===============================================================================

Módulo:
    Modelos de Usuario (registro de credenciales + identidad por request)

Responsabilidades:
    - Definir el enum de roles (USER / ADMIN) para autenticación/autorización.
    - Definir User: registro durable (incluye password_hash, nunca expuesto).
    - Definir Identity: claims del llamante, construida por request desde el token.

Colaboradores:
    - identity/auth_users.py: emite/valida JWT a partir de User / Identity.
    - identity/access_control.py: políticas admin-only y owner-or-admin.
    - infrastructure/repositories/*/user.py: mapean filas -> User.

Notas (Clean Code / Sustentabilidad):
    - Este módulo NO contiene lógica de negocio: solo "shapes" de datos.
    - Identity es inmutable y nunca se persiste.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class UserRole(str, Enum):
    """Roles soportados (valor = formato en el wire y en la DB)."""

    USER = "USER"
    ADMIN = "ADMIN"


@dataclass(frozen=True, slots=True)
class User:
    """Registro de credenciales (cuenta registrada)."""

    id: int
    email: str
    name: str
    password_hash: str
    role: UserRole
    avatar: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_identity(self) -> "Identity":
        return Identity(
            id=self.id,
            email=self.email,
            name=self.name,
            role=self.role,
            avatar=self.avatar,
        )


@dataclass(frozen=True, slots=True)
class Identity:
    """Llamante autenticado durante un request."""

    id: int
    email: str
    name: str
    role: UserRole
    avatar: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
