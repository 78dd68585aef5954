"""
Auth tests: registration, login, bearer parsing and route guards.
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from showcase.core.exceptions import AuthError, ConflictError, ValidationError
from showcase.services.jwt_service import decode_access_token, generate_access_token
from showcase.services.user_service import authenticate_user, create_admin, register_user
from showcase.utils.crypto import hash_password, verify_password


# ═════════════════════════════════════════════════════════════════════════════
# Services
# ═════════════════════════════════════════════════════════════════════════════


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("s3cret-pass", rounds=4)
        assert hashed.startswith("$2")
        assert verify_password("s3cret-pass", hashed)
        assert not verify_password("wrong-pass", hashed)

    def test_non_bcrypt_hash_never_verifies(self):
        assert not verify_password("s3cret-pass", "pbkdf2:sha256:abc$def")
        assert not verify_password("s3cret-pass", "")


class TestUserService:
    def test_register_normalizes_and_hashes(self):
        user = register_user("Someone@Example.ORG", "s3cret-pass", firm_name="Firm")
        assert user.email == "Someone@example.org"
        assert user.password_hash != "s3cret-pass"
        assert not user.is_admin

    def test_duplicate_email(self, user):
        with pytest.raises(ConflictError):
            register_user("architect@example.org", "another-pass")

    @pytest.mark.parametrize("email,password", [
        ("not-an-email", "s3cret-pass"),
        ("ok@example.org", "short"),
        ("", "s3cret-pass"),
    ])
    def test_invalid_registration(self, email, password):
        with pytest.raises(ValidationError):
            register_user(email, password)

    def test_authenticate(self, user):
        assert authenticate_user("architect@example.org", "s3cret-pass").id == user.id
        assert user.last_login_at is not None
        with pytest.raises(AuthError):
            authenticate_user("architect@example.org", "wrong-pass")
        with pytest.raises(AuthError):
            authenticate_user("nobody@example.org", "s3cret-pass")

    def test_create_admin_promotes_existing(self, user):
        admin = create_admin("architect@example.org", "new-admin-pass")
        assert admin.id == user.id
        assert admin.is_admin
        assert authenticate_user("architect@example.org", "s3cret-pass").is_admin

    def test_create_admin_new_account(self):
        admin = create_admin("boss@example.org", "admin-pass-123", contact_name="Boss")
        assert admin.is_admin
        assert admin.contact_name == "Boss"


class TestJwt:
    def test_round_trip(self, app):
        payload = decode_access_token(generate_access_token(42, is_admin=True))
        assert payload["sub"] == 42
        assert payload["is_admin"] is True
        assert payload["type"] == "access"

    def test_expired(self, app):
        token = jwt.encode(
            {"sub": "1", "type": "access", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            app.config["JWT_SECRET_KEY"],
            algorithm="HS256",
        )
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token)

    def test_wrong_type_rejected(self, app):
        token = jwt.encode(
            {"sub": "1", "type": "refresh", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
            app.config["JWT_SECRET_KEY"],
            algorithm="HS256",
        )
        with pytest.raises(jwt.InvalidTokenError):
            decode_access_token(token)


# ═════════════════════════════════════════════════════════════════════════════
# HTTP
# ═════════════════════════════════════════════════════════════════════════════


class TestAuthApi:
    def test_register_returns_token(self, client):
        res = client.post("/api/v1/auth/register", json={
            "email": "new@example.org", "password": "s3cret-pass", "firm_name": "New Firm",
        })
        assert res.status_code == 201
        body = res.get_json()
        assert body["token_type"] == "Bearer"
        assert body["user"]["firm_name"] == "New Firm"

        me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
        assert me.status_code == 200
        assert me.get_json()["email"] == "new@example.org"

    def test_register_duplicate_is_409(self, client, user):
        res = client.post("/api/v1/auth/register", json={
            "email": "architect@example.org", "password": "s3cret-pass",
        })
        assert res.status_code == 409
        assert res.get_json()["code"] == "ERR_CONFLICT_DUPLICATE"

    def test_register_missing_fields_is_400(self, client):
        res = client.post("/api/v1/auth/register", json={"email": "x@example.org"})
        assert res.status_code == 400
        assert res.get_json()["code"] == "ERR_VALIDATION_REQUIRED"

    def test_login(self, client, user):
        res = client.post("/api/v1/auth/login", json={
            "email": "architect@example.org", "password": "s3cret-pass",
        })
        assert res.status_code == 200
        assert res.get_json()["user"]["id"] == user.id

    def test_login_bad_password_is_401(self, client, user):
        res = client.post("/api/v1/auth/login", json={
            "email": "architect@example.org", "password": "wrong-pass",
        })
        assert res.status_code == 401
        assert res.get_json()["code"] == "ERR_UNAUTHORIZED"

    def test_me_requires_token(self, client):
        assert client.get("/api/v1/auth/me").status_code == 401

    def test_me_garbage_token(self, client):
        res = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not.a.token"})
        assert res.status_code == 401
        assert res.get_json()["error"] == "Invalid token"

    def test_non_json_body_is_415(self, client):
        res = client.post("/api/v1/auth/login", data="email=x", content_type="text/plain")
        assert res.status_code == 415


class TestPublicEndpoints:
    def test_health(self, client):
        assert client.get("/api/v1/health/ready").get_json() == {"status": "ok"}
        live = client.get("/api/v1/health/live")
        assert live.status_code == 200
        assert live.get_json()["checks"]["database"]["status"] == "ok"

    def test_reference_lists(self, client):
        cats = client.get("/api/v1/reference/manufacturer-categories").get_json()
        assert cats["total"] == len(cats["items"]) > 0
        roles = client.get("/api/v1/reference/architect-roles").get_json()["items"]
        assert [r["index"] for r in roles] == [0, 1, 2]
        assert client.get("/api/v1/reference/contact-roles").status_code == 200

    def test_request_timing_headers(self, client):
        res = client.get("/api/v1/reference/contact-roles", headers={"X-Request-ID": "abc123"})
        assert res.headers["X-Request-ID"] == "abc123"
        assert "X-Request-Duration-Ms" in res.headers


class TestCli:
    def test_create_admin_command(self, app):
        from showcase.models.auth import User

        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "create-admin", "--email", "cli@example.org", "--password", "cli-pass-123", "--name", "Ops",
        ])
        assert result.exit_code == 0, result.output
        admin = User.query.filter_by(email="cli@example.org").first()
        assert admin is not None and admin.is_admin
