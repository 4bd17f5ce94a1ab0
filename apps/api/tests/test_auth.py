from datetime import timedelta

import pytest

from conftest import PASSWORD, login
from membership.core.errors import InvalidCredentials
from membership.models.entities import UserSession, utcnow
from membership.services.sessions import (
    authenticate,
    create_session,
    destroy_session,
    purge_expired_sessions,
    resolve_session,
)


def test_login_sets_session_cookie_and_returns_user(client, seeded_users):
    resp = login(client, "admin")
    assert resp.json() == {
        "id": seeded_users["admin"].id,
        "username": "admin",
        "name": "Admin",
        "role": "ADMIN",
    }
    cookie = resp.headers["set-cookie"]
    assert cookie.startswith("session=")
    assert "HttpOnly" in cookie
    assert "samesite=lax" in cookie.lower()
    assert "Max-Age=604800" in cookie
    assert "passwordHash" not in resp.text

    me = client.get("/auth/me")
    assert me.status_code == 200
    assert me.json()["username"] == "admin"


def test_unknown_user_and_wrong_password_look_identical(client, seeded_users):
    wrong_password = client.post("/auth/login", json={"username": "admin", "password": "nope"})
    unknown_user = client.post("/auth/login", json={"username": "ghost", "password": PASSWORD})
    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json() == {"detail": "Invalid credentials"}
    assert "set-cookie" not in wrong_password.headers


def test_login_with_missing_fields_is_rejected(client, seeded_users):
    resp = client.post("/auth/login", json={"username": "admin"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Validation Error"


def test_session_status_reflects_cookie(client, seeded_users):
    assert client.get("/auth/session").json() == {"authenticated": False, "user": None}

    login(client, "reader")
    status = client.get("/auth/session").json()
    assert status["authenticated"] is True
    assert status["user"]["role"] == "USER"


def test_me_requires_session(client):
    resp = client.get("/auth/me")
    assert resp.status_code == 401
    assert resp.json() == {"detail": "Unauthorized"}


def test_logout_revokes_session_and_is_idempotent(client, db_session, seeded_users):
    login(client, "reader")
    token = client.cookies.get("session")
    assert resolve_session(db_session, token) is not None

    resp = client.post("/auth/logout")
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert resolve_session(db_session, token) is None
    assert client.get("/auth/me").status_code == 401

    assert client.post("/auth/logout").json() == {"success": True}


def test_authenticate_raises_same_error_for_both_failures(db_session, seeded_users):
    with pytest.raises(InvalidCredentials):
        authenticate(db_session, "reader", "wrong")
    with pytest.raises(InvalidCredentials):
        authenticate(db_session, "nobody", PASSWORD)
    assert authenticate(db_session, "reader", PASSWORD).username == "reader"


def test_each_login_gets_its_own_token(db_session, seeded_users):
    user_id = seeded_users["reader"].id
    first = create_session(db_session, user_id)
    second = create_session(db_session, user_id)
    db_session.commit()
    assert first != second
    assert resolve_session(db_session, first).id == user_id
    assert resolve_session(db_session, second).id == user_id

    rows = db_session.query(UserSession).count()
    for _ in range(5):
        assert resolve_session(db_session, first).id == user_id
    assert db_session.query(UserSession).count() == rows
    assert not db_session.new and not db_session.dirty


def test_expired_or_unknown_tokens_resolve_to_none(db_session, seeded_users):
    user_id = seeded_users["reader"].id
    db_session.add(UserSession(token="old-token", user_id=user_id, created_at=utcnow() - timedelta(days=8)))
    db_session.commit()

    assert resolve_session(db_session, "old-token") is None
    assert resolve_session(db_session, "missing") is None
    assert resolve_session(db_session, None) is None

    assert purge_expired_sessions(db_session) == 1
    db_session.commit()


def test_destroy_session_is_idempotent(db_session, seeded_users):
    token = create_session(db_session, seeded_users["reader"].id)
    db_session.commit()

    destroy_session(db_session, token)
    destroy_session(db_session, token)
    destroy_session(db_session, None)
    db_session.commit()
    assert resolve_session(db_session, token) is None
