from datetime import datetime, timedelta

from tagform.models.user_model import RevokedToken


def test_register_sends_welcome_email(client, sent_emails):
    response = client.post(
        "/api/auth/register",
        json={"email": "New@Example.com", "password": "password123", "fullName": "New User"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["statusCode"] == 201
    assert body["data"]["user"]["email"] == "new@example.com"
    assert "password" not in body["data"]["user"]
    assert sent_emails == [{"email": "new@example.com", "name": "New User"}]


def test_register_duplicate_email_conflicts(client):
    payload = {"email": "dup@example.com", "password": "password123", "fullName": "Dup"}
    client.post("/api/auth/register", json=payload)

    response = client.post("/api/auth/register", json=payload)

    assert response.status_code == 409
    assert response.json() == {"statusCode": 409, "message": "Email already exists"}


def test_register_validates_fields(client):
    response = client.post("/api/auth/register", json={"email": "not-an-email", "password": "short"})

    assert response.status_code == 400
    fields = {e["field"]: e["message"] for e in response.json()["message"]}
    assert fields["fullName"] == "Full name is required."
    assert fields["email"] == "Invalid email format"
    assert fields["password"] == "Password must be at least 8 characters long"


def test_login_rejects_bad_credentials(client, login):
    login(email="me@example.com")

    response = client.post("/api/auth/login", json={"email": "me@example.com", "password": "wrong-password"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


def test_profile_requires_token(client):
    response = client.get("/api/auth/profile")

    assert response.status_code == 401
    assert response.json() == {"statusCode": 401, "message": "No token provided"}


def test_profile_and_logout(client, auth_headers):
    profile = client.get("/api/auth/profile", headers=auth_headers)
    assert profile.status_code == 200
    assert profile.json()["data"]["user"]["email"] == "owner@example.com"

    assert client.post("/api/auth/logout", headers=auth_headers).status_code == 200

    # The revoked token is no longer accepted
    assert client.get("/api/auth/profile", headers=auth_headers).status_code == 401


def test_google_url_uses_configured_client(client):
    response = client.get("/api/auth/google")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["provider"] == "google"
    assert data["url"].startswith("https://accounts.google.com/")
    assert "response_type=code" in data["url"]


def test_logout_purges_expired_revocations(client, db, auth_headers):
    user_id = client.get("/api/auth/profile", headers=auth_headers).json()["data"]["user"]["id"]
    db.add(RevokedToken(jti="stale", user_id=user_id, expires_at=datetime.utcnow() - timedelta(days=1)))
    db.commit()

    assert client.post("/api/auth/logout", headers=auth_headers).status_code == 200

    db.expire_all()
    assert db.get(RevokedToken, "stale") is None
    assert db.query(RevokedToken).count() == 1
