"""
Name: User Management Endpoint Tests

Responsibilities:
  - Admin-only listing, lookup, creation and deletion
  - Owner-or-admin profile updates and avatar uploads
  - Profile of the authenticated caller
"""

import pytest
from app.application.usecases.users import USER_DELETED_MESSAGE
from app.identity.users import UserRole
from app.crosscutting import config

pytestmark = pytest.mark.unit

NEW_USER = {
    "name": "Bob",
    "email": "bob@x.com",
    "password": "secret1",
    "confirmPassword": "secret1",
}


def _png(content: bytes = b"\x89PNG fake", name: str = "me.png"):
    return {"avatar": (name, content, "image/png")}


def _chunked_multipart(payload: bytes, *, boundary: str = "avatar-boundary", chunk_size: int = 512):
    """Body multipart sin Content-Length (Transfer-Encoding: chunked)."""
    body = (
        f"--{boundary}\r\n"
        'Content-Disposition: form-data; name="avatar"; filename="big.png"\r\n'
        "Content-Type: image/png\r\n\r\n"
    ).encode() + payload + f"\r\n--{boundary}--\r\n".encode()

    def _iter():
        for start in range(0, len(body), chunk_size):
            yield body[start : start + chunk_size]

    return _iter(), {"Content-Type": f"multipart/form-data; boundary={boundary}"}


class TestAccessBoundaries:
    @pytest.mark.parametrize(
        "method, path",
        [
            ("get", "/api/users"),
            ("get", "/api/users/profile"),
            ("get", "/api/users/1"),
            ("put", "/api/users/1"),
            ("delete", "/api/users/1"),
        ],
    )
    def test_requires_token(self, client, method, path):
        kwargs = {"json": {}} if method == "put" else {}

        res = getattr(client, method)(path, **kwargs)

        assert res.status_code == 401

    def test_garbage_token_is_401(self, client):
        res = client.get("/api/users/profile", headers={"Authorization": "Bearer x.y.z"})

        assert res.status_code == 401

    @pytest.mark.parametrize(
        "method, path",
        [
            ("get", "/api/users"),
            ("get", "/api/users/1"),
            ("delete", "/api/users/1"),
        ],
    )
    def test_admin_only_routes_forbid_users(self, client, create_account, method, path):
        _, headers = create_account()

        res = getattr(client, method)(path, headers=headers)

        assert res.status_code == 403

    def test_create_user_forbidden_for_users(self, client, create_account):
        _, headers = create_account()

        res = client.post("/api/users", json=NEW_USER, headers=headers)

        assert res.status_code == 403


class TestAdminRoutes:
    def test_list_users(self, client, create_account, admin_headers):
        create_account("jane@x.com")

        res = client.get("/api/users", headers=admin_headers)

        assert res.status_code == 200
        emails = {u["email"] for u in res.json()}
        assert emails == {"jane@x.com", "root@x.com"}

    def test_list_users_pagination_bounds(self, client, admin_headers):
        assert client.get("/api/users?limit=0", headers=admin_headers).status_code == 400
        assert client.get("/api/users?limit=1", headers=admin_headers).status_code == 200

    def test_get_user_by_id(self, client, create_account, admin_headers):
        jane, _ = create_account()

        res = client.get(f"/api/users/{jane.id}", headers=admin_headers)

        assert res.status_code == 200
        assert res.json()["email"] == "jane@x.com"

    def test_get_missing_user_is_404(self, client, admin_headers):
        res = client.get("/api/users/9999", headers=admin_headers)

        assert res.status_code == 404
        assert res.headers["content-type"].startswith("application/problem+json")

    def test_admin_creates_admin(self, client, admin_headers):
        res = client.post(
            "/api/users", json={**NEW_USER, "role": "ADMIN"}, headers=admin_headers
        )

        assert res.status_code == 201
        assert res.json()["role"] == "ADMIN"

        login = client.post(
            "/api/auth/login", json={"email": "bob@x.com", "password": "secret1"}
        )
        assert login.status_code == 200

    def test_admin_create_validates_confirmation(self, client, admin_headers):
        res = client.post(
            "/api/users",
            json={**NEW_USER, "confirmPassword": "other1"},
            headers=admin_headers,
        )

        assert res.status_code == 400

    def test_delete_user_and_uploaded_avatar(
        self, client, create_account, admin_headers, upload_dir
    ):
        jane, jane_headers = create_account()
        uploaded = client.post(
            f"/api/users/{jane.id}/avatar", files=_png(), headers=jane_headers
        )
        assert uploaded.status_code == 200
        assert len(list(upload_dir.iterdir())) == 1

        res = client.delete(f"/api/users/{jane.id}", headers=admin_headers)

        assert res.status_code == 200
        assert res.json() == {"message": USER_DELETED_MESSAGE}
        assert list(upload_dir.iterdir()) == []
        assert client.delete(f"/api/users/{jane.id}", headers=admin_headers).status_code == 404


class TestProfile:
    def test_profile_returns_fresh_record(self, client, create_account):
        jane, headers = create_account(avatar="https://cdn.example.com/j.png")

        res = client.get("/api/users/profile", headers=headers)

        assert res.status_code == 200
        body = res.json()
        assert body["id"] == jane.id
        assert body["avatar"] == "https://cdn.example.com/j.png"
        assert "updatedAt" in body

    def test_profile_of_deleted_user_is_404(self, client, create_account, admin_headers):
        jane, headers = create_account()
        client.delete(f"/api/users/{jane.id}", headers=admin_headers)

        res = client.get("/api/users/profile", headers=headers)

        assert res.status_code == 404


class TestUpdate:
    def test_owner_updates_name(self, client, create_account):
        jane, headers = create_account()

        res = client.put(f"/api/users/{jane.id}", json={"name": "Janet"}, headers=headers)

        assert res.status_code == 200
        assert res.json()["name"] == "Janet"
        assert res.json()["email"] == "jane@x.com"

    def test_other_user_is_forbidden(self, client, create_account):
        jane, _ = create_account("jane@x.com")
        _, bob_headers = create_account("bob@x.com", name="Bob")

        res = client.put(f"/api/users/{jane.id}", json={"name": "Hacked"}, headers=bob_headers)

        assert res.status_code == 403

    def test_user_cannot_self_promote(self, client, create_account):
        jane, headers = create_account()

        res = client.put(f"/api/users/{jane.id}", json={"role": "ADMIN"}, headers=headers)

        assert res.status_code == 403

    def test_admin_changes_role(self, client, create_account, admin_headers):
        jane, _ = create_account()

        res = client.put(
            f"/api/users/{jane.id}", json={"role": "ADMIN"}, headers=admin_headers
        )

        assert res.status_code == 200
        assert res.json()["role"] == UserRole.ADMIN.value

    def test_email_taken_is_409(self, client, create_account):
        create_account("bob@x.com", name="Bob")
        jane, headers = create_account("jane@x.com")

        res = client.put(
            f"/api/users/{jane.id}", json={"email": "bob@x.com"}, headers=headers
        )

        assert res.status_code == 409

    def test_invalid_email_is_400(self, client, create_account):
        jane, headers = create_account()

        res = client.put(f"/api/users/{jane.id}", json={"email": "nope"}, headers=headers)

        assert res.status_code == 400
        assert res.json()["errors"][0]["field"] == "email"


class TestAvatarUpload:
    def test_owner_uploads_avatar(self, client, create_account, upload_dir):
        jane, headers = create_account()

        res = client.post(f"/api/users/{jane.id}/avatar", files=_png(), headers=headers)

        assert res.status_code == 200
        body = res.json()
        assert body["success"] is True
        assert body["avatarUrl"].startswith(f"/avatars/user_{jane.id}_")
        assert body["user"]["avatar"] == body["avatarUrl"]
        assert (upload_dir / body["avatarUrl"].rsplit("/", 1)[1]).exists()

    def test_uploaded_avatar_is_served(self, client, create_account):
        jane, headers = create_account()
        url = client.post(
            f"/api/users/{jane.id}/avatar", files=_png(b"PNGDATA"), headers=headers
        ).json()["avatarUrl"]

        res = client.get(url)

        assert res.status_code == 200
        assert res.content == b"PNGDATA"

    def test_other_user_cannot_upload(self, client, create_account, upload_dir):
        jane, _ = create_account("jane@x.com")
        _, bob_headers = create_account("bob@x.com", name="Bob")

        res = client.post(f"/api/users/{jane.id}/avatar", files=_png(), headers=bob_headers)

        assert res.status_code == 403
        assert list(upload_dir.iterdir()) == []

    def test_non_image_is_400(self, client, create_account):
        jane, headers = create_account()

        res = client.post(
            f"/api/users/{jane.id}/avatar",
            files={"avatar": ("notes.txt", b"hello", "text/plain")},
            headers=headers,
        )

        assert res.status_code == 400
        assert res.json()["errors"][0]["field"] == "avatar"

    def test_disallowed_extension_is_400(self, client, create_account):
        jane, headers = create_account()

        res = client.post(
            f"/api/users/{jane.id}/avatar",
            files={"avatar": ("logo.svg", b"<svg/>", "image/svg+xml")},
            headers=headers,
        )

        assert res.status_code == 400

    def test_oversized_is_413_and_leaves_no_file(self, client, create_account, upload_dir):
        jane, headers = create_account()

        res = client.post(
            f"/api/users/{jane.id}/avatar", files=_png(b"x" * 1025), headers=headers
        )

        assert res.status_code == 413
        assert list(upload_dir.iterdir()) == []

    def test_chunked_body_over_global_limit_is_413(self, client, create_account, upload_dir):
        jane, headers = create_account()
        content, multipart_headers = _chunked_multipart(
            b"x" * (config.get_settings().max_body_bytes * 2)
        )

        res = client.post(
            f"/api/users/{jane.id}/avatar",
            content=content,
            headers={**headers, **multipart_headers},
        )

        assert res.status_code == 413
        assert res.headers["content-type"].startswith("application/problem+json")
        assert res.json()["code"] == "PAYLOAD_TOO_LARGE"
        assert list(upload_dir.iterdir()) == []

    def test_missing_file_part_is_400(self, client, create_account):
        jane, headers = create_account()

        res = client.post(
            f"/api/users/{jane.id}/avatar", data={"other": "x"}, headers=headers
        )

        assert res.status_code == 400
