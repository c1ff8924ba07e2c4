from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import jwt
from fastapi.testclient import TestClient

from app.auth.jwt import create_access_token, verify_access_token
from app.auth.password import hash_password
from app.core.config import settings
from app.main import app
from app.models import User
from app.models.user import UserRole

PASSWORD = "StrongPass123"


def register(client: TestClient, email: str, password: str = PASSWORD, **extra):
    return client.post("/api/auth/register", json={"email": email, "password": password, **extra})


def login(client: TestClient, email: str, password: str = PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def make_user(db_session, email: str, role: UserRole = UserRole.MEMBER, **fields) -> User:
    user = User(
        username=email.split("@")[0],
        email=email,
        password_hash=hash_password(PASSWORD),
        role=role,
        **fields,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def token_for(db_session, email: str, role: UserRole = UserRole.MEMBER, **fields) -> str:
    return create_access_token(make_user(db_session, email, role, **fields))


def _claims(sub: str, **overrides) -> dict:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": sub,
        "username": "someone",
        "role": "admin",
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(hours=1)).timestamp()),
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
    }
    claims.update(overrides)
    return claims


def test_register_sets_session_and_token(client: TestClient):
    resp = register(client, "Ana@Example.com", firstName="Ana", lastName="Lee")
    assert resp.status_code == 201
    body = resp.json()
    assert body["token"]
    assert body["user"]["email"] == "ana@example.com"
    assert body["user"]["role"] == "member"
    assert client.cookies.get(settings.token_cookie_name)
    assert client.cookies.get(settings.session_cookie_name)

    me = client.get("/api/me")
    assert me.status_code == 200
    assert me.json()["isAuthenticated"] is True
    assert me.json()["user"]["firstName"] == "Ana"


def test_register_sends_new_member_notifications(client: TestClient, notifier):
    register(client, "new@example.com")
    assert notifier.kinds() == ["contact", "welcome", "operator"]


def test_register_duplicate_email_conflicts(client: TestClient):
    assert register(client, "dup@example.com").status_code == 201
    resp = register(TestClient(app), "DUP@example.com")
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "USER_EXISTS"


def test_login_with_wrong_password_is_rejected(client: TestClient):
    register(client, "pw@example.com")
    resp = login(TestClient(app), "pw@example.com", "WrongPass123")
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "INVALID_CREDENTIALS"


def test_each_login_issues_a_distinct_token(client: TestClient):
    register(client, "twice@example.com")
    first = login(client, "twice@example.com").json()["token"]
    second = login(client, "twice@example.com").json()["token"]
    assert first != second


def test_me_requires_authentication(client: TestClient):
    for path in ("/api/me", "/api/user"):
        resp = client.get(path)
        assert resp.status_code == 401
        assert resp.json()["detail"]["code"] == "UNAUTHORIZED"


def test_bearer_token_authenticates(client: TestClient, db_session):
    token = token_for(db_session, "bearer@example.com")
    resp = client.get("/api/user", headers=auth_headers(token))
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "bearer@example.com"


def test_token_cookie_authenticates(client: TestClient, db_session):
    token = token_for(db_session, "cookie@example.com")
    client.cookies.set(settings.token_cookie_name, token)
    resp = client.get("/api/me")
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "cookie@example.com"


def test_session_wins_over_token(client: TestClient, db_session):
    register(client, "session@example.com")
    other_token = token_for(db_session, "other@example.com")

    resp = client.get("/api/me", headers=auth_headers(other_token))
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "session@example.com"


def test_expired_token_is_anonymous(client: TestClient, db_session):
    user = make_user(db_session, "expired@example.com")
    token = create_access_token(user, ttl_seconds=-60)
    resp = client.get("/api/me", headers=auth_headers(token))
    assert resp.status_code == 401


def test_token_signed_with_other_secret_is_anonymous(client: TestClient, db_session):
    user = make_user(db_session, "forged@example.com")
    token = jwt.encode(_claims(str(user.id)), "not-the-real-secret", algorithm="HS256")
    resp = client.get("/api/me", headers=auth_headers(token))
    assert resp.status_code == 401


def test_token_for_unknown_user_is_anonymous(client: TestClient):
    token = jwt.encode(_claims(str(uuid.uuid4())), settings.jwt_secret, algorithm="HS256")
    resp = client.get("/api/me", headers=auth_headers(token))
    assert resp.status_code == 401


def test_malformed_token_is_anonymous(client: TestClient):
    resp = client.get("/api/me", headers=auth_headers("not-a-jwt"))
    assert resp.status_code == 401


def test_verify_rejects_wrong_audience():
    token = jwt.encode(
        _claims(str(uuid.uuid4()), aud="someone-else"), settings.jwt_secret, algorithm="HS256"
    )
    try:
        verify_access_token(token)
    except ValueError:
        pass
    else:
        raise AssertionError("token with foreign audience was accepted")


def test_authorization_reads_role_from_database(client: TestClient, db_session):
    user = make_user(db_session, "promoted@example.com")
    token = create_access_token(user)
    assert client.get("/api/admin/users", headers=auth_headers(token)).status_code == 403

    user.role = UserRole.ADMIN
    db_session.commit()

    assert client.get("/api/admin/users", headers=auth_headers(token)).status_code == 200


def test_logout_clears_session_and_token(client: TestClient):
    register(client, "bye@example.com")
    assert client.get("/api/me").status_code == 200

    resp = client.post("/api/auth/logout")
    assert resp.status_code == 200
    assert client.get("/api/me").status_code == 401
