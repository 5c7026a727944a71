"""
Shared pytest setup for the users API.

The environment is pinned before any app import: app.api.main builds the
FastAPI app at import time, and Settings must see USER_REPOSITORY=memory and
a test JWT secret instead of whatever .env holds. Cached settings and
container singletons are dropped around every test.
"""

import os
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("APP_ENV", "test")
os.environ["USER_REPOSITORY"] = "memory"
os.environ["JWT_SECRET"] = "test-secret-for-unit-tests-0123456789"
os.environ.setdefault("LOG_JSON", "false")

from app.crosscutting import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None

from app.container import reset_container  # noqa: E402
from app.identity.auth_users import hash_password  # noqa: E402
from app.identity.users import Identity, User, UserRole  # noqa: E402
from app.infrastructure.repositories import InMemoryUserRepository  # noqa: E402
from app.infrastructure.storage import LocalAvatarStorage  # noqa: E402


def pytest_configure(config) -> None:
    config.addinivalue_line("markers", "unit: in-process tests, no PostgreSQL needed")


@pytest.fixture(autouse=True)
def _fresh_singletons():
    """R: Cada test arranca con settings y container limpios."""
    app_config.get_settings.cache_clear()
    reset_container()
    yield
    app_config.get_settings.cache_clear()
    reset_container()


# ============================================================================
# Infra fixtures
# ============================================================================


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def avatar_storage(tmp_path) -> LocalAvatarStorage:
    return LocalAvatarStorage(
        tmp_path / "avatars", public_prefix="/avatars", max_bytes=1024
    )


# ============================================================================
# Domain fixtures
# ============================================================================


@pytest.fixture(scope="session")
def known_password() -> str:
    return "secret123"


@pytest.fixture(scope="session")
def known_password_hash(known_password) -> str:
    # R: Argon2 es lento a propósito; un hash por sesión alcanza.
    return hash_password(known_password)


@pytest.fixture
def make_user(user_repo, known_password_hash):
    """Factory: crea usuarios en el repo in-memory con el password conocido."""

    def _make(
        *,
        email: str = "jane@example.com",
        name: str = "Jane",
        role: UserRole = UserRole.USER,
        avatar: str | None = None,
    ) -> User:
        return user_repo.create_user(
            email=email,
            name=name,
            password_hash=known_password_hash,
            role=role,
            avatar=avatar,
        )

    return _make


@pytest.fixture
def admin_identity() -> Identity:
    return Identity(id=999, email="admin@example.com", name="Admin", role=UserRole.ADMIN)


