"""Tests for authentication: password hashing, tokens, login, current user."""

import pytest
from datetime import timedelta

from storeroom.core.rbac import UserRole
from storeroom.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from storeroom.models.user import User


# ============== Password hashing ==============

class TestPasswordHashing:
    def test_hash_and_verify(self):
        h = get_password_hash("secret123")
        assert verify_password("secret123", h)

    def test_wrong_password_rejected(self):
        h = get_password_hash("secret123")
        assert not verify_password("wrong", h)

    def test_hash_is_unique(self):
        h1 = get_password_hash("same")
        h2 = get_password_hash("same")
        assert h1 != h2  # different salts

    def test_invalid_hash_returns_false(self):
        assert not verify_password("test", "not-a-hash")


# ============== JWT tokens ==============

class TestJWTTokens:
    def test_create_and_decode(self):
        token = create_access_token(data={"sub": "42", "username": "kim", "role": "storekeeper"})
        payload = decode_access_token(token)
        assert payload is not None
        assert payload["sub"] == "42"
        assert payload["username"] == "kim"
        assert payload["role"] == "storekeeper"

    def test_token_has_expiry_and_id(self):
        payload = decode_access_token(create_access_token(data={"sub": "1"}))
        assert "exp" in payload
        assert "iat" in payload
        assert "jti" in payload

    def test_custom_expiry(self):
        token = create_access_token(data={"sub": "1"}, expires_delta=timedelta(hours=1))
        assert decode_access_token(token) is not None

    def test_expired_token_rejected(self):
        token = create_access_token(data={"sub": "1"}, expires_delta=timedelta(seconds=-10))
        assert decode_access_token(token) is None

    def test_invalid_token_rejected(self):
        assert decode_access_token("not.a.token") is None

    def test_tampered_token_rejected(self):
        token = create_access_token(data={"sub": "1"})
        tampered = token[:-5] + "XXXXX"
        assert decode_access_token(tampered) is None


# ============== Login endpoint ==============

class TestLoginEndpoint:
    def _add_user(self, db_session, username, password, role=UserRole.STOREKEEPER, is_active=True):
        user = User(
            username=username,
            email=f"{username}@test.com",
            full_name=username.title(),
            password_hash=get_password_hash(password),
            role=role,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        return user

    def test_successful_login(self, client, db_session):
        self._add_user(db_session, "login", "pass123")

        res = client.post("/api/auth/login", json={"username": "login", "password": "pass123"})
        assert res.status_code == 200
        data = res.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["username"] == "login"
        assert data["user"]["role"] == "storekeeper"
        assert "password_hash" not in data["user"]

        payload = decode_access_token(data["access_token"])
        assert payload["username"] == "login"
        assert payload["role"] == "storekeeper"

    def test_wrong_password_401(self, client, db_session):
        self._add_user(db_session, "wrong", "correct")
        res = client.post("/api/auth/login", json={"username": "wrong", "password": "incorrect"})
        assert res.status_code == 401

    def test_nonexistent_user_401(self, client):
        res = client.post("/api/auth/login", json={"username": "nobody", "password": "anything"})
        assert res.status_code == 401

    def test_inactive_user_403(self, client, db_session):
        self._add_user(db_session, "inactive", "pass", is_active=False)
        res = client.post("/api/auth/login", json={"username": "inactive", "password": "pass"})
        assert res.status_code == 403

    def test_missing_fields_422(self, client):
        res = client.post("/api/auth/login", json={"username": "x"})
        assert res.status_code == 422


class TestMeEndpoint:
    def test_get_current_user(self, client, viewer_headers, viewer_user):
        res = client.get("/api/auth/me", headers=viewer_headers)
        assert res.status_code == 200
        data = res.json()
        assert data["username"] == viewer_user.username
        assert data["role"] == "viewer"

    def test_unauthenticated_rejected(self, client):
        res = client.get("/api/auth/me")
        assert res.status_code == 401

    def test_garbage_token_rejected(self, client):
        res = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
        assert res.status_code == 401

    def test_deactivated_user_token_rejected(self, client, db_session, viewer_headers, viewer_user):
        viewer_user.is_active = False
        db_session.commit()
        res = client.get("/api/auth/me", headers=viewer_headers)
        assert res.status_code == 401

    @pytest.mark.parametrize("role", ["superuser", "owner"])
    def test_unknown_role_in_token_rejected(self, client, viewer_user, role):
        token = create_access_token(
            data={"sub": str(viewer_user.id), "username": viewer_user.username, "role": role}
        )
        res = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert res.status_code == 401

    @pytest.mark.parametrize("subject", ["abc", "1.5", ""])
    def test_non_numeric_subject_rejected(self, client, viewer_user, subject):
        token = create_access_token(
            data={"sub": subject, "username": viewer_user.username, "role": "viewer"}
        )
        res = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert res.status_code == 401
