"""
Name: API Test Fixtures

Responsibilities:
  - Build a full app (create_app) over the in-memory repository
  - Point uploads at tmp_path and use small limits
  - Provide helpers to obtain tokens for users and admins
"""

import pytest
from app.api.main import create_app
from app.container import get_user_repository
from app.crosscutting import config as app_config
from app.identity.auth_users import create_access_token
from app.identity.users import UserRole
from fastapi.testclient import TestClient

MAX_UPLOAD_BYTES = 1024
MAX_BODY_BYTES = 4096


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "avatars"


@pytest.fixture
def client(monkeypatch, upload_dir):
    monkeypatch.setenv("UPLOAD_DIR", str(upload_dir))
    monkeypatch.setenv("MAX_UPLOAD_BYTES", str(MAX_UPLOAD_BYTES))
    monkeypatch.setenv("MAX_BODY_BYTES", str(MAX_BODY_BYTES))
    app_config.get_settings.cache_clear()

    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def create_account(known_password_hash):
    """Crea un usuario directo en el repo del container y devuelve (user, headers)."""

    def _create(
        email: str = "jane@x.com",
        *,
        name: str = "Jane",
        role: UserRole = UserRole.USER,
        avatar: str | None = None,
    ):
        user = get_user_repository().create_user(
            email=email,
            name=name,
            password_hash=known_password_hash,
            role=role,
            avatar=avatar,
        )
        token = create_access_token(user).token
        return user, {"Authorization": f"Bearer {token}"}

    return _create


@pytest.fixture
def admin_headers(create_account):
    _, headers = create_account("root@x.com", name="Root", role=UserRole.ADMIN)
    return headers
