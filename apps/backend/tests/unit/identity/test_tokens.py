"""
Name: Token and Password Tests

Responsibilities:
  - Round-trip IssueToken -> VerifyToken
  - Reject tampered, expired, foreign-secret, unsigned and malformed tokens
  - Argon2 hashing behaviour
  - Bearer header extraction and request verification
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from app.crosscutting.exceptions import UnauthorizedError
from app.identity.auth_users import (
    INVALID_TOKEN_MESSAGE,
    JWT_ALGORITHM,
    MISSING_TOKEN_MESSAGE,
    AuthSettings,
    create_access_token,
    decode_access_token,
    extract_bearer_token,
    hash_password,
    verify_password,
    verify_request_token,
)
from app.identity.users import Identity, UserRole

pytestmark = pytest.mark.unit

SECRET = "unit-test-secret-with-enough-entropy-0001"
SETTINGS = AuthSettings(jwt_secret=SECRET, jwt_access_ttl_minutes=30)


def _identity(**overrides) -> Identity:
    data = dict(id=7, email="jane@example.com", name="Jane", role=UserRole.USER)
    data.update(overrides)
    return Identity(**data)


def _encode(payload: dict, secret: str = SECRET, algorithm: str = JWT_ALGORITHM) -> str:
    return jwt.encode(payload, secret, algorithm=algorithm)


def _claims(**overrides) -> dict:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": "7",
        "email": "jane@example.com",
        "name": "Jane",
        "role": "USER",
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=5)).timestamp()),
        "typ": "access",
    }
    claims.update(overrides)
    return claims


class TestIssueAndVerify:
    def test_round_trip_preserves_claims(self):
        issued = create_access_token(_identity(role=UserRole.ADMIN), SETTINGS)

        identity = decode_access_token(issued.token, SETTINGS)

        assert identity == _identity(role=UserRole.ADMIN)
        assert identity.is_admin is True
        assert issued.expires_in == 30 * 60

    def test_token_embeds_expiry_and_string_subject(self):
        issued = create_access_token(_identity(), SETTINGS)
        payload = jwt.decode(issued.token, SECRET, algorithms=[JWT_ALGORITHM])

        assert payload["sub"] == "7"
        assert payload["typ"] == "access"
        assert payload["exp"] - payload["iat"] == 30 * 60

    def test_tampered_signature_rejected(self):
        token = create_access_token(_identity(), SETTINGS).token
        head, body, sig = token.split(".")
        tampered = ".".join([head, body, ("A" if sig[0] != "A" else "B") + sig[1:]])

        with pytest.raises(UnauthorizedError) as exc:
            decode_access_token(tampered, SETTINGS)
        assert exc.value.message == INVALID_TOKEN_MESSAGE

    def test_trailing_character_altered_rejected(self):
        alphabet = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
        token = create_access_token(_identity(), SETTINGS).token
        # R: +4 en el alfabeto cambia bits significativos del último byte.
        last = alphabet[(alphabet.index(token[-1]) + 4) % 64]

        with pytest.raises(UnauthorizedError):
            decode_access_token(token[:-1] + last, SETTINGS)

    def test_forged_role_claim_rejected(self):
        token = create_access_token(_identity(), SETTINGS).token
        forged = _encode(_claims(role="ADMIN"), secret="attacker-secret")
        # R: Cuerpo del forjado + firma del legítimo.
        mixed = ".".join(forged.split(".")[:2] + token.split(".")[2:])

        with pytest.raises(UnauthorizedError):
            decode_access_token(mixed, SETTINGS)

    def test_other_secret_rejected(self):
        token = _encode(_claims(), secret="some-other-secret-value-xxxxxxxxxx")

        with pytest.raises(UnauthorizedError):
            decode_access_token(token, SETTINGS)

    def test_expired_token_rejected(self):
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        token = _encode(_claims(iat=int(past.timestamp()), exp=int(past.timestamp()) + 60))

        with pytest.raises(UnauthorizedError) as exc:
            decode_access_token(token, SETTINGS)
        assert exc.value.message == INVALID_TOKEN_MESSAGE

    def test_token_without_exp_rejected(self):
        claims = _claims()
        claims.pop("exp")

        with pytest.raises(UnauthorizedError):
            decode_access_token(_encode(claims), SETTINGS)

    def test_unsigned_token_rejected(self):
        token = jwt.encode(_claims(), key=None, algorithm="none")

        with pytest.raises(UnauthorizedError):
            decode_access_token(token, SETTINGS)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"typ": "refresh"},
            {"role": "SUPERUSER"},
            {"sub": "not-a-number"},
            {"email": ""},
        ],
    )
    def test_invalid_claims_rejected(self, overrides):
        with pytest.raises(UnauthorizedError):
            decode_access_token(_encode(_claims(**overrides)), SETTINGS)

    def test_missing_required_claim_rejected(self):
        claims = _claims()
        claims.pop("name")

        with pytest.raises(UnauthorizedError):
            decode_access_token(_encode(claims), SETTINGS)

    @pytest.mark.parametrize("garbage", ["", "abc", "a.b.c", "Bearer x.y.z"])
    def test_malformed_token_rejected(self, garbage):
        with pytest.raises(UnauthorizedError):
            decode_access_token(garbage, SETTINGS)


class TestPasswords:
    def test_hash_is_salted_and_verifiable(self):
        first = hash_password("secret123")
        second = hash_password("secret123")

        assert first != second
        assert first.startswith("$argon2")
        assert verify_password("secret123", first) is True
        assert verify_password("secret124", first) is False

    def test_verify_against_garbage_hash_is_false(self):
        assert verify_password("secret123", "not-a-hash") is False


class TestBearerExtraction:
    @pytest.mark.parametrize(
        "header, expected",
        [
            ("Bearer abc", "abc"),
            ("bearer abc", "abc"),
            ("  Bearer   abc  ", "abc"),
            ("Basic abc", None),
            ("Bearer", None),
            ("Bearer ", None),
            ("", None),
            (None, None),
        ],
    )
    def test_extract_bearer_token(self, header, expected):
        assert extract_bearer_token(header) == expected

    async def test_verify_request_token_missing_header(self):
        with pytest.raises(UnauthorizedError) as exc:
            await verify_request_token(None)
        assert exc.value.message == MISSING_TOKEN_MESSAGE

    async def test_verify_request_token_uses_configured_secret(self):
        # R: Sin settings explícitos usa JWT_SECRET del entorno de tests.
        token = create_access_token(_identity()).token

        identity = await verify_request_token(f"Bearer {token}")

        assert identity.id == 7
        assert identity.role is UserRole.USER
