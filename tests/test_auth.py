from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId
from jose import jwt

from nextplay import settings
from nextplay.auth import create_access_token, verify_credential, verify_password
from nextplay.errors import InvalidCredential
from nextplay.routes import auth as auth_routes


# ---------- credential verifier ----------
def test_verify_credential_returns_claims():
    user = {"_id": ObjectId(), "email": "pat@example.com", "role": "parent"}
    claims = verify_credential(create_access_token(user))
    assert claims.identity_id == str(user["_id"])
    assert claims.email == "pat@example.com"
    assert claims.role_at_issuance == "parent"


def test_verify_credential_rejects_expired():
    user = {"_id": ObjectId(), "email": "pat@example.com", "role": "parent"}
    token = create_access_token(user, expires_delta=timedelta(seconds=-10))
    with pytest.raises(InvalidCredential):
        verify_credential(token)


@pytest.mark.parametrize("raw", [None, "", "not-a-jwt", "a.b.c"])
def test_verify_credential_rejects_malformed(raw):
    with pytest.raises(InvalidCredential):
        verify_credential(raw)


def test_verify_credential_rejects_bad_signature():
    now = datetime.now(timezone.utc)
    forged = jwt.encode(
        {"sub": str(ObjectId()), "role": "admin", "type": "access", "exp": int((now + timedelta(days=1)).timestamp())},
        "some-other-secret",
        algorithm="HS256",
    )
    with pytest.raises(InvalidCredential):
        verify_credential(forged)


def test_verify_credential_rejects_other_token_types():
    now = datetime.now(timezone.utc)
    refresh = jwt.encode(
        {"sub": str(ObjectId()), "type": "refresh", "exp": int((now + timedelta(days=1)).timestamp())},
        settings.SECRET_KEY,
        algorithm=settings.JWT_ALG,
    )
    with pytest.raises(InvalidCredential):
        verify_credential(refresh)


# ---------- register ----------
def test_register_creates_unverified_parent(client, mock_db):
    res = client.post(
        "/api/auth/register",
        json={"name": "Pat", "email": "Pat@Example.com", "password": "secret123", "role": "admin"},
    )
    assert res.status_code == 201
    body = res.json()["user"]
    assert body["email"] == "pat@example.com"
    assert body["role"] == "parent"
    assert "password" not in body
    assert "emailVerificationToken" not in body

    stored = mock_db.users.find_one({"email": "pat@example.com"})
    assert stored["isEmailVerified"] is False
    assert stored["emailVerificationToken"]
    assert mock_db.activity_logs.count_documents({"action": "register"}) == 1


def test_register_validation(client, mock_db):
    assert client.post("/api/auth/register", json={"email": "a@b.co", "password": "secret123"}).status_code == 400
    res = client.post("/api/auth/register", json={"name": "A", "email": "a@b.co", "password": "123"})
    assert res.status_code == 400
    assert client.post("/api/auth/register", content=b"{nope", headers={"content-type": "application/json"}).status_code == 400


def test_register_duplicate_email(client, mock_db, make_user):
    make_user("Pat", "pat@example.com")
    res = client.post("/api/auth/register", json={"name": "Pat", "email": "PAT@example.com", "password": "secret123"})
    assert res.status_code == 409


def test_register_duplicate_race_is_conflict(client, mock_db, make_user, monkeypatch):
    make_user("Pat", "pat@example.com")
    mock_db.users.create_index("email", unique=True)
    # both requests passed the lookup before either inserted
    monkeypatch.setattr(auth_routes, "find_identity_by_email", lambda email: None)
    res = client.post("/api/auth/register", json={"name": "Pat", "email": "pat@example.com", "password": "secret123"})
    assert res.status_code == 409
    assert res.json()["detail"] == "User already exists with this email"
    assert mock_db.users.count_documents({"email": "pat@example.com"}) == 1


# ---------- login ----------
def test_login_sets_cookie_and_cookie_authenticates(client, mock_db, make_user):
    make_user("Pat", "pat@example.com", password="secret123")
    res = client.post("/api/auth/login", json={"email": "pat@example.com", "password": "secret123"})
    assert res.status_code == 200
    assert res.json()["user"]["email"] == "pat@example.com"
    assert "password" not in res.json()["user"]
    set_cookie = res.headers["set-cookie"].lower()
    assert "token=" in set_cookie
    assert "httponly" in set_cookie
    assert "samesite=strict" in set_cookie

    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["user"]["email"] == "pat@example.com"


def test_login_bad_credentials(client, mock_db, make_user):
    make_user("Pat", "pat@example.com", password="secret123")
    assert client.post("/api/auth/login", json={"email": "pat@example.com", "password": "wrong"}).status_code == 401
    assert client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "x"}).status_code == 401


def test_login_unverified_gets_fresh_token(client, mock_db, make_user):
    user = make_user("Pat", "pat@example.com", verified=False)
    res = client.post("/api/auth/login", json={"email": "pat@example.com", "password": "secret123"})
    assert res.status_code == 403
    assert res.json()["requiresVerification"] is True
    assert mock_db.users.find_one({"_id": user["_id"]})["emailVerificationToken"]


def test_logout_clears_cookie(client):
    res = client.post("/api/auth/logout")
    assert res.status_code == 200
    assert "token=" in res.headers["set-cookie"]


# ---------- verify / reset ----------
def test_verify_email(client, mock_db):
    client.post("/api/auth/register", json={"name": "Pat", "email": "pat@example.com", "password": "secret123"})
    token = mock_db.users.find_one({"email": "pat@example.com"})["emailVerificationToken"]

    assert client.post("/api/auth/verify-email", json={"token": "bogus"}).status_code == 400
    assert client.post("/api/auth/verify-email", json={"token": token}).status_code == 200

    stored = mock_db.users.find_one({"email": "pat@example.com"})
    assert stored["isEmailVerified"] is True
    assert "emailVerificationToken" not in stored
    res = client.post("/api/auth/login", json={"email": "pat@example.com", "password": "secret123"})
    assert res.status_code == 200


def test_verify_email_expired(client, mock_db, make_user):
    user = make_user("Pat", "pat@example.com", verified=False)
    mock_db.users.update_one(
        {"_id": user["_id"]},
        {"$set": {"emailVerificationToken": "t0k", "emailVerificationExpires": datetime.now(timezone.utc) - timedelta(hours=1)}},
    )
    assert client.post("/api/auth/verify-email", json={"token": "t0k"}).status_code == 400


def test_forgot_password_does_not_reveal_accounts(client, mock_db, make_user):
    make_user("Pat", "pat@example.com")
    known = client.post("/api/auth/forgot-password", json={"email": "pat@example.com"})
    unknown = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()
    assert mock_db.users.find_one({"email": "pat@example.com"})["passwordResetToken"]


def test_reset_password(client, mock_db, make_user):
    make_user("Pat", "pat@example.com", password="secret123")
    client.post("/api/auth/forgot-password", json={"email": "pat@example.com"})
    token = mock_db.users.find_one({"email": "pat@example.com"})["passwordResetToken"]

    assert client.post("/api/auth/reset-password", json={"token": token, "password": "123"}).status_code == 400
    assert client.post("/api/auth/reset-password", json={"token": "nope", "password": "newpass1"}).status_code == 400
    assert client.post("/api/auth/reset-password", json={"token": token, "password": "newpass1"}).status_code == 200

    stored = mock_db.users.find_one({"email": "pat@example.com"})
    assert verify_password("newpass1", stored["password"])
    assert "passwordResetToken" not in stored
