"""
===============================================================================
TARJETA CRC — application/dev_seed_admin.py (Admin de desarrollo)
===============================================================================

Responsabilidades:
  - Con DEV_SEED_ADMIN=true y APP_ENV=local, garantizar que exista una cuenta
    ADMIN con DEV_SEED_ADMIN_EMAIL / DEV_SEED_ADMIN_PASSWORD al arrancar.
  - DEV_SEED_ADMIN_FORCE_RESET=true vuelve a fijar password y rol ADMIN
    sobre una cuenta existente.
  - Ser idempotente: correrlo N veces deja una sola cuenta.

Colaboradores:
  - domain.repositories.UserRepository
  - identity.auth_users.hash_password (inyectado como password_hasher)
  - crosscutting.config.Settings

Guardas:
  - Habilitado fuera de APP_ENV=local -> RuntimeError (el proceso no arranca).
  - Production ya lo rechaza en Settings.
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Callable

from ..crosscutting.config import Settings
from ..crosscutting.logger import logger
from ..domain.repositories import UserRepository
from ..identity.users import UserRole

SEED_ENVIRONMENT = "local"
DEFAULT_SEED_NAME = "Admin"


class SeedOutcome(str, Enum):
    DISABLED = "disabled"
    CREATED = "created"
    RESET = "reset"
    ALREADY_PRESENT = "already_present"


def ensure_dev_admin(
    settings: Settings,
    *,
    user_repo: UserRepository,
    password_hasher: Callable[[str], str],
) -> SeedOutcome:
    if not settings.dev_seed_admin:
        return SeedOutcome.DISABLED

    env = (settings.app_env or "").strip().lower()
    if env != SEED_ENVIRONMENT:
        raise RuntimeError(
            f"DEV_SEED_ADMIN=true requires APP_ENV '{SEED_ENVIRONMENT}' (got '{env}')"
        )

    email = (settings.dev_seed_admin_email or "").strip()
    password = settings.dev_seed_admin_password or ""
    if not email or not password:
        raise ValueError("DEV_SEED_ADMIN needs a non-empty email and password")
    name = (settings.dev_seed_admin_name or "").strip() or DEFAULT_SEED_NAME

    existing = user_repo.get_user_by_email(email)
    if existing is None:
        created = user_repo.create_user(
            email=email,
            name=name,
            password_hash=password_hasher(password),
            role=UserRole.ADMIN,
        )
        outcome, user_id = SeedOutcome.CREATED, created.id
    elif settings.dev_seed_admin_force_reset:
        user_repo.update_user(
            existing.id,
            password_hash=password_hasher(password),
            role=UserRole.ADMIN,
        )
        outcome, user_id = SeedOutcome.RESET, existing.id
    else:
        outcome, user_id = SeedOutcome.ALREADY_PRESENT, existing.id

    logger.info("dev seed admin", extra={"outcome": outcome.value, "user_id": user_id})
    return outcome
