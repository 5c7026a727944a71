"""
===============================================================================
TARJETA CRC — identity/access_control.py
===============================================================================

Módulo:
    Políticas de autorización (Policy Helper)

Responsabilidades:
    - admin-only: el rol de la identidad debe ser ADMIN.
    - owner-or-admin: el id de la identidad coincide con el dueño del recurso,
      o la identidad es ADMIN.
    - Cambios de rol: solo un ADMIN puede asignar/modificar roles.

Colaboradores:
    - identity.users.Identity / UserRole
    - crosscutting.exceptions.ForbiddenError

Notas:
    - Este módulo NO depende de FastAPI ni hace I/O: funciones puras.
    - Nunca recibe una identidad ausente: el 401 lo resuelve antes
      identity.auth_users (VerifyToken). Acá solo existe el 403.
===============================================================================
"""

from __future__ import annotations

from ..crosscutting.exceptions import ForbiddenError
from .users import Identity, UserRole


def is_admin(identity: Identity) -> bool:
    return identity.role == UserRole.ADMIN


def is_owner_or_admin(identity: Identity, owner_id: int) -> bool:
    return identity.id == owner_id or is_admin(identity)


def authorize_admin(identity: Identity) -> Identity:
    """Política admin-only. Devuelve la identidad para encadenar."""
    if not is_admin(identity):
        raise ForbiddenError("Se requiere rol de administrador.")
    return identity


def authorize_owner_or_admin(
    identity: Identity,
    owner_id: int,
    *,
    message: str = "Solo podés operar sobre tu propio perfil.",
) -> Identity:
    """Política owner-or-admin sobre el recurso de `owner_id`."""
    if not is_owner_or_admin(identity, owner_id):
        raise ForbiddenError(message)
    return identity


def authorize_role_change(identity: Identity, requested_role: UserRole | None) -> None:
    """Solo un ADMIN puede fijar el rol de una cuenta."""
    if requested_role is not None and not is_admin(identity):
        raise ForbiddenError("Solo un administrador puede cambiar roles.")
