"""
Name: Admin Script Tests

Responsibilities:
  - scripts.create_admin.create_user: idempotent bootstrap, validation output
  - scripts.init_db.main: fails without a database URL, applies the schema file
"""

import pytest
from app.identity.auth_users import verify_password
from app.identity.users import UserRole
from scripts import init_db
from scripts.create_admin import create_user

pytestmark = pytest.mark.unit


def _create(repo, **overrides) -> int:
    values = dict(
        email="root@x.com",
        name="Root",
        password="secret123",
        confirm_password="secret123",
        role=UserRole.ADMIN,
    )
    values.update(overrides)
    return create_user(repo, **values)


def test_creates_admin(user_repo, capsys):
    assert _create(user_repo) == 0

    user = user_repo.get_user_by_email("root@x.com")
    assert user.role is UserRole.ADMIN
    assert verify_password("secret123", user.password_hash)
    assert "Created user" in capsys.readouterr().out


def test_second_run_is_idempotent(user_repo, capsys):
    _create(user_repo)

    assert _create(user_repo, password="another1", confirm_password="another1") == 0

    assert len(user_repo.list_users()) == 1
    assert "already exists" in capsys.readouterr().out


def test_validation_errors_go_to_stderr(user_repo, capsys):
    assert _create(user_repo, email="nope", confirm_password="different") == 1

    err = capsys.readouterr().err
    assert "email:" in err
    assert "confirmPassword:" in err
    assert user_repo.list_users() == []


def test_init_db_requires_database_url(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)

    assert init_db.main([]) == 1


def test_init_db_applies_schema(monkeypatch, tmp_path):
    schema = tmp_path / "schema.sql"
    schema.write_text("SELECT 1;", encoding="utf-8")
    calls = []
    monkeypatch.setattr(
        init_db, "apply_schema", lambda url, path: calls.append((url, path))
    )

    code = init_db.main(["--database-url", "postgresql://u:p@db/users", "--schema", str(schema)])

    assert code == 0
    assert calls == [("postgresql://u:p@db/users", schema)]
