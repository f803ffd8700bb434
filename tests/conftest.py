import os
import tempfile

# Settings are read at import time, so point every path at a scratch directory first
_scratch = tempfile.mkdtemp(prefix="backoffice-tests-")
os.environ["LOG_FILE"] = os.path.join(_scratch, "logs", "test.log")
os.environ["UPLOAD_DIR"] = os.path.join(_scratch, "uploads")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_scratch, 'backoffice.db')}"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["PUBLIC_BASE_URL"] = "http://testserver"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from backoffice.db.database import get_session
from backoffice.main import create_app
from backoffice.config.config import settings

API = settings.API_PREFIX


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def app(engine):
    app = create_app()

    def get_test_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = get_test_session
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def sign_up_and_in(client, email="owner@example.com", password="secret123"):
    response = client.post(f"{API}/auth/signup", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    response = client.post(f"{API}/auth/token", data={"username": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    """Signed-in owner without a hotel"""
    return sign_up_and_in(client)


@pytest.fixture
def hotel_headers(client, auth_headers):
    """Signed-in owner whose hotel is set up"""
    response = client.put(
        f"{API}/hotels/setup",
        data={"name": "Seaside Inn", "address": "1 Beach Road", "services": ["WiFi", "Parking"]},
        headers=auth_headers
    )
    assert response.status_code == 200, response.text
    return auth_headers
