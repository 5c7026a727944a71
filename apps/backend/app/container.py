"""
===============================================================================
TARJETA CRC — container.py (cableado de dependencias)
===============================================================================

Responsabilidades:
  - Elegir la implementación de UserRepository según USER_REPOSITORY.
  - Construir LocalAvatarStorage con UPLOAD_DIR / MAX_UPLOAD_BYTES.
  - Armar los casos de uso por request para los routers (Depends).

Colaboradores:
  - crosscutting.config.get_settings
  - infrastructure.repositories / infrastructure.storage
  - application.usecases.users

Notas:
  - Repositorio y storage viven una vez por proceso (lru_cache);
    reset_container() los descarta.
  - Los tests sustituyen factories con app.dependency_overrides.
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache

from .application.usecases.users import (
    CreateUserUseCase,
    DeleteUserUseCase,
    GetUserUseCase,
    ListUsersUseCase,
    LoginUseCase,
    RegisterUserUseCase,
    RegisterWithAvatarUseCase,
    UpdateUserUseCase,
    UploadAvatarUseCase,
)
from .crosscutting.config import get_settings
from .domain.repositories import UserRepository
from .identity.auth_users import hash_password
from .infrastructure.repositories import (
    InMemoryUserRepository,
    PostgresUserRepository,
)
from .infrastructure.storage import LocalAvatarStorage

# =============================================================================
# Recursos con estado
# =============================================================================


@lru_cache(maxsize=1)
def get_user_repository() -> UserRepository:
    """Repositorio según USER_REPOSITORY (postgres usa el pool global)."""
    if get_settings().user_repository == "memory":
        return InMemoryUserRepository()
    return PostgresUserRepository()


@lru_cache(maxsize=1)
def get_avatar_storage() -> LocalAvatarStorage:
    settings = get_settings()
    return LocalAvatarStorage(
        settings.upload_dir,
        public_prefix=settings.upload_public_prefix,
        max_bytes=settings.max_upload_bytes,
    )


# =============================================================================
# Casos de uso (uno nuevo por request)
# =============================================================================


def get_register_user_use_case() -> RegisterUserUseCase:
    return RegisterUserUseCase(get_user_repository(), hash_password)


def get_create_user_use_case() -> CreateUserUseCase:
    return CreateUserUseCase(get_user_repository(), hash_password)


def get_login_use_case() -> LoginUseCase:
    return LoginUseCase(get_user_repository())


def get_get_user_use_case() -> GetUserUseCase:
    return GetUserUseCase(get_user_repository())


def get_list_users_use_case() -> ListUsersUseCase:
    return ListUsersUseCase(get_user_repository())


def get_update_user_use_case() -> UpdateUserUseCase:
    return UpdateUserUseCase(get_user_repository())


def get_delete_user_use_case() -> DeleteUserUseCase:
    return DeleteUserUseCase(get_user_repository())


def get_upload_avatar_use_case() -> UploadAvatarUseCase:
    return UploadAvatarUseCase(get_user_repository(), get_avatar_storage())


def get_register_with_avatar_use_case() -> RegisterWithAvatarUseCase:
    return RegisterWithAvatarUseCase(
        get_register_user_use_case(),
        get_upload_avatar_use_case(),
        get_user_repository(),
    )


def reset_container() -> None:
    """Limpia singletons (tests / cambio de settings)."""
    get_user_repository.cache_clear()
    get_avatar_storage.cache_clear()
