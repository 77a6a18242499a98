import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("REFRESH_SECRET_KEY", "test-refresh-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_TO_FILE", "false")

import pytest
from fastapi.testclient import TestClient

from tagform.config.database_config import Base, SessionLocal, engine, get_db
from tagform.main import app
from tagform.models.user_model import User
from tagform.models.workspace_model import Workspace
from tagform.schema.form_schema import FormCreate
from tagform.services import form_service
from tagform.utils.auth_utils import hash_password


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db(reset_database):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sent_emails(monkeypatch):
    sent = []

    async def fake_send_welcome_email(user_email, user_name):
        sent.append({"email": user_email, "name": user_name})
        return True

    monkeypatch.setattr("tagform.routes.auth_router.send_welcome_email", fake_send_welcome_email)
    return sent


@pytest.fixture
def client(reset_database, sent_emails):
    def override_get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register_and_login(client, email="owner@example.com", password="password123", name="Owner"):
    client.post("/api/auth/register", json={"email": email, "password": password, "fullName": name})
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    token = response.json()["data"]["authToken"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def login(client):
    """Register an account and return its Authorization header"""
    def _login(email="owner@example.com", password="password123", name="Owner"):
        return register_and_login(client, email=email, password=password, name=name)
    return _login


@pytest.fixture
def auth_headers(login):
    return login()


@pytest.fixture
def user(db):
    user = User(email="service@example.com", full_name="Service User", password=hash_password("password123"))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def workspace(db, user):
    workspace = Workspace(name="Research", type="private", user_id=user.id, slug="research")
    db.add(workspace)
    db.commit()
    db.refresh(workspace)
    return workspace


@pytest.fixture
def form(db, workspace):
    created = form_service.create_form(db, workspace.id, FormCreate(name="Customer Feedback"))
    return form_service.get_workspace_form(db, workspace.id, created["id"])
