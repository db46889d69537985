import os

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-access-secret")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SWEEP_TOKENS_ON_STARTUP", "false")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import taskapi.models  # noqa: E402,F401
from taskapi.config import settings as app_settings  # noqa: E402
from taskapi.database import Base, SessionLocal, engine  # noqa: E402
from taskapi.main import create_app  # noqa: E402
from taskapi.services.auth_service import AuthService  # noqa: E402
from taskapi.services.token_store import TokenStore  # noqa: E402
from taskapi.utils.security import CredentialService  # noqa: E402

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(schema):
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def settings():
    return app_settings


@pytest.fixture
def credentials(settings):
    return CredentialService(settings)


@pytest.fixture
def token_store():
    return TokenStore()


@pytest.fixture
def auth_service(credentials, token_store):
    return AuthService(credentials, token_store)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app)


def register(client, email, password=PASSWORD, name=None) -> dict:
    body = {"email": email, "password": password}
    if name is not None:
        body["name"] = name
    resp = client.post("/api/v1/auth/register", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def bearer(session: dict) -> dict:
    return {"Authorization": f"Bearer {session['accessToken']}"}


@pytest.fixture
def alice(client):
    return register(client, "alice@mail.com", name="Alice")


@pytest.fixture
def bob(client):
    return register(client, "bob@mail.com", name="Bob")
