from fastapi.testclient import TestClient
from itsdangerous import URLSafeTimedSerializer

from main import app
from models import User
from routers.auth import (
    SESSION_COOKIE,
    create_session_token,
    identity_serializer,
    verify_session_token,
)


def test_session_token_round_trip():
    token = create_session_token("abc")
    assert verify_session_token(token) == {"user_id": "abc"}
    assert verify_session_token(token + "tampered") is None
    assert verify_session_token("not a token") is None


def test_current_user(client, user):
    response = client.get("/api/auth/user")

    assert response.status_code == 200
    assert response.json() == {
        "id": user.id,
        "email": "volunteer@example.org",
        "first_name": "Vera",
        "last_name": "Lopez",
        "profile_image_url": None,
        "role": "volunteer",
    }


def test_missing_or_bad_cookie_is_401(anon_client):
    response = anon_client.get("/api/auth/user")
    assert response.status_code == 401
    assert response.json() == {"detail": "Not logged in"}

    forged = TestClient(app, cookies={SESSION_COOKIE: "forged"})
    assert forged.get("/api/auth/user").status_code == 401


def test_session_for_unknown_user_is_401(anon_client):
    stranger = TestClient(app, cookies={SESSION_COOKIE: create_session_token("ghost")})
    assert stranger.get("/api/auth/user").json() == {"detail": "User not found for this session"}


def test_login_callback_upserts_user_and_sets_cookie(anon_client, session):
    token = identity_serializer.dumps(
        {"sub": "idp-77", "email": "ada@example.org", "first_name": "Ada", "last_name": "Okafor"}
    )

    response = anon_client.post("/api/auth/callback", json={"token": token})

    assert response.status_code == 200
    assert response.json()["id"] == "idp-77"
    assert response.json()["role"] == "volunteer"
    assert session.get(User, "idp-77").email == "ada@example.org"

    cookie = response.cookies.get(SESSION_COOKIE)
    assert verify_session_token(cookie) == {"user_id": "idp-77"}

    logged_in = TestClient(app, cookies={SESSION_COOKIE: cookie})
    assert logged_in.get("/api/auth/user").json()["first_name"] == "Ada"


def test_login_callback_updates_existing_profile(anon_client, session, user):
    token = identity_serializer.dumps({"sub": user.id, "email": user.email, "first_name": "Veronica"})

    assert anon_client.post("/api/auth/callback", json={"token": token}).status_code == 200

    session.refresh(user)
    assert user.first_name == "Veronica"


def test_login_callback_rejects_foreign_signature(anon_client):
    foreign = URLSafeTimedSerializer("someone-else", salt="identity").dumps({"sub": "intruder"})

    response = anon_client.post("/api/auth/callback", json={"token": foreign})

    assert response.status_code == 401


def test_login_callback_rejects_incomplete_claims(anon_client):
    token = identity_serializer.dumps({"email": "nobody@example.org"})

    assert anon_client.post("/api/auth/callback", json={"token": token}).status_code == 400


def test_logout_clears_cookie(client):
    response = client.post("/api/logout")

    assert response.status_code == 204
    assert SESSION_COOKIE in response.headers.get("set-cookie", "")
