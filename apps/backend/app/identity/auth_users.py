"""
===============================================================================
TARJETA CRC — identity/auth_users.py (Credenciales y tokens)
===============================================================================

Responsabilidades:
  - Passwords: hash Argon2id y verificación que nunca lanza (False si no coincide).
  - Login: mismo error y mismo costo para "email inexistente" y "password mal".
  - Tokens: emitir JWT HS256 con exp siempre presente; verificar firma, exp,
    typ y forma de los claims, devolviendo una Identity sin ir a la DB.
  - FastAPI: dependencias require_identity() / require_admin().

Colaboradores:
  - crosscutting.config.get_settings: JWT_SECRET / JWT_ACCESS_TTL_MINUTES
  - domain.repositories.UserRepository: búsqueda por email
  - identity.users: User / Identity / UserRole
  - identity.access_control.authorize_admin
  - app/context.set_user_context: user_id en los logs

Reglas:
  - Todo rechazo de token es el mismo 401 (INVALID_TOKEN_MESSAGE).
  - Ni passwords ni tokens pasan por el logger.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Awaitable, Callable

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from fastapi import Header, Request
from starlette.concurrency import run_in_threadpool

from ..context import set_user_context
from ..crosscutting.config import get_settings
from ..crosscutting.exceptions import UnauthorizedError
from ..crosscutting.logger import logger
from ..domain.repositories import UserRepository
from .access_control import authorize_admin
from .users import Identity, User, UserRole

JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"
_REQUIRED_CLAIMS = ("sub", "email", "name", "role", "exp")

INVALID_CREDENTIALS_MESSAGE = "Credenciales inválidas."
INVALID_TOKEN_MESSAGE = "Token inválido o expirado."
MISSING_TOKEN_MESSAGE = "Falta token Bearer."

_hasher = PasswordHasher()


@dataclass(frozen=True, slots=True)
class AuthSettings:
    jwt_secret: str
    jwt_access_ttl_minutes: int

    @property
    def ttl_seconds(self) -> int:
        return int(self.jwt_access_ttl_minutes * 60)

    @classmethod
    def current(cls) -> "AuthSettings":
        settings = get_settings()
        return cls(settings.jwt_secret, settings.jwt_access_ttl_minutes)


@dataclass(frozen=True, slots=True)
class IssuedToken:
    token: str
    expires_in: int


# -- passwords ---------------------------------------------------------------


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    # VerifyMismatchError es subclase de VerificationError.
    try:
        return _hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


@lru_cache(maxsize=1)
def _decoy_hash() -> str:
    return hash_password("decoy-password-never-issued")


def authenticate_user(users: UserRepository, email: str, password: str) -> User:
    """Devuelve el registro si email+password coinciden; si no, 401 genérico.

    Con email desconocido igual se verifica contra un hash señuelo, así el
    tiempo de respuesta no revela qué emails existen.
    """
    user = users.get_user_by_email(email) if email else None
    stored_hash = user.password_hash if user is not None else _decoy_hash()

    if verify_password(password, stored_hash) and user is not None:
        return user

    logger.info("login rechazado", extra={"known_email": user is not None})
    raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)


# -- tokens ------------------------------------------------------------------


def create_access_token(
    identity: Identity | User, settings: AuthSettings | None = None
) -> IssuedToken:
    auth = settings or AuthSettings.current()
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": str(identity.id),
        "email": identity.email,
        "name": identity.name,
        "role": identity.role.value,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=auth.ttl_seconds),
        "typ": ACCESS_TOKEN_TYPE,
    }
    return IssuedToken(
        token=jwt.encode(claims, auth.jwt_secret, algorithm=JWT_ALGORITHM),
        expires_in=auth.ttl_seconds,
    )


def _identity_from_claims(claims: dict[str, Any]) -> Identity:
    if claims.get("typ", ACCESS_TOKEN_TYPE) != ACCESS_TOKEN_TYPE:
        raise ValueError("typ")
    email, name = claims["email"], claims["name"]
    if not (isinstance(email, str) and email and isinstance(name, str)):
        raise ValueError("email/name")
    return Identity(
        id=int(str(claims["sub"])),
        email=email,
        name=name,
        role=UserRole(str(claims["role"])),
    )


def decode_access_token(token: str, settings: AuthSettings | None = None) -> Identity:
    """JWT -> Identity. Firma, algoritmo, exp y claims inválidos dan el mismo 401."""
    auth = settings or AuthSettings.current()
    try:
        claims = jwt.decode(
            token,
            auth.jwt_secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": list(_REQUIRED_CLAIMS)},
        )
        return _identity_from_claims(claims)
    except (jwt.InvalidTokenError, ValueError) as exc:
        logger.info("token rechazado", extra={"reason": type(exc).__name__})
        raise UnauthorizedError(INVALID_TOKEN_MESSAGE) from exc


def extract_bearer_token(authorization: str | None) -> str | None:
    scheme, _, credentials = (authorization or "").strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return credentials.strip() or None


async def verify_request_token(authorization: str | None) -> Identity:
    token = extract_bearer_token(authorization)
    if token is None:
        raise UnauthorizedError(MISSING_TOKEN_MESSAGE)
    return await run_in_threadpool(decode_access_token, token)


# -- dependencias FastAPI ------------------------------------------------------


def _identity_dependency(admin_only: bool) -> Callable[..., Awaitable[Identity]]:
    async def dependency(
        request: Request,
        authorization: str | None = Header(None, alias="Authorization"),
    ) -> Identity:
        identity = await verify_request_token(authorization)
        request.state.identity = identity
        set_user_context(identity.id)
        return authorize_admin(identity) if admin_only else identity

    return dependency


def require_identity() -> Callable[..., Awaitable[Identity]]:
    """Cualquier token válido (401 si falta o no verifica)."""
    return _identity_dependency(admin_only=False)


def require_admin() -> Callable[..., Awaitable[Identity]]:
    """Token válido con rol ADMIN (401 / 403)."""
    return _identity_dependency(admin_only=True)
