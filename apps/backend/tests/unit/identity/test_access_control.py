"""
Name: Access Control Policy Tests

Responsibilities:
  - Admin-only and owner-or-admin decisions
  - Role changes restricted to admins
  - require_identity / require_admin dependencies over a tiny app
"""

import pytest
from app.api.exception_handlers import register_exception_handlers
from app.crosscutting.exceptions import ForbiddenError
from app.identity.access_control import (
    authorize_admin,
    authorize_owner_or_admin,
    authorize_role_change,
    is_owner_or_admin,
)
from app.identity.auth_users import create_access_token, require_admin, require_identity
from app.identity.users import Identity, UserRole
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

pytestmark = pytest.mark.unit

ALICE = Identity(id=1, email="alice@example.com", name="Alice", role=UserRole.USER)
BOB = Identity(id=2, email="bob@example.com", name="Bob", role=UserRole.USER)
ROOT = Identity(id=3, email="root@example.com", name="Root", role=UserRole.ADMIN)


class TestPolicies:
    def test_admin_only(self):
        assert authorize_admin(ROOT) is ROOT
        with pytest.raises(ForbiddenError):
            authorize_admin(ALICE)

    @pytest.mark.parametrize(
        "actor, owner_id, allowed",
        [
            (ALICE, 1, True),
            (BOB, 1, False),
            (ROOT, 1, True),
            (ROOT, 12345, True),
        ],
    )
    def test_owner_or_admin(self, actor, owner_id, allowed):
        assert is_owner_or_admin(actor, owner_id) is allowed
        if allowed:
            assert authorize_owner_or_admin(actor, owner_id) is actor
        else:
            with pytest.raises(ForbiddenError):
                authorize_owner_or_admin(actor, owner_id)

    def test_role_change_requires_admin(self):
        authorize_role_change(ALICE, None)
        authorize_role_change(ROOT, UserRole.ADMIN)
        with pytest.raises(ForbiddenError):
            authorize_role_change(ALICE, UserRole.USER)


def _build_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/me")
    def me(request: Request, identity: Identity = Depends(require_identity())):
        assert request.state.identity == identity
        return {"id": identity.id, "role": identity.role.value}

    @app.get("/admin")
    def admin(identity: Identity = Depends(require_admin())):
        return {"id": identity.id}

    return app


class TestDependencies:
    def test_missing_token_is_401_with_challenge(self):
        client = TestClient(_build_app())

        res = client.get("/me")

        assert res.status_code == 401
        assert res.headers["WWW-Authenticate"].lower().startswith("bearer")
        assert "errors" not in res.json()

    def test_valid_token_resolves_identity(self):
        token = create_access_token(ALICE).token
        client = TestClient(_build_app())

        res = client.get("/me", headers={"Authorization": f"Bearer {token}"})

        assert res.status_code == 200
        assert res.json() == {"id": 1, "role": "USER"}

    def test_admin_dependency_forbids_user(self):
        token = create_access_token(ALICE).token
        client = TestClient(_build_app())

        res = client.get("/admin", headers={"Authorization": f"Bearer {token}"})

        assert res.status_code == 403
        assert "errors" not in res.json()

    def test_admin_dependency_allows_admin(self):
        token = create_access_token(ROOT).token
        client = TestClient(_build_app())

        res = client.get("/admin", headers={"Authorization": f"Bearer {token}"})

        assert res.status_code == 200
        assert res.json() == {"id": 3}
