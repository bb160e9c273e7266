import os

# Settings are read once at import time, so point the app at throwaway resources first.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from geosoft.api.deps import get_db
from geosoft.db.base import Base
from geosoft.main import app
from geosoft.services.rate_limit import clear_rate_limiter


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def client(session_factory):
    clear_rate_limiter()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    clear_rate_limiter()


def register_user(client, *, username, email, password="password123", app_source="timetablely"):
    response = client.post(
        "/api/v1/auth/register",
        json={"username": username, "email": email, "password": password, "app_source": app_source},
    )
    assert response.status_code == 201
    return response.json()


def login_user(client, identifier, password="password123", app_source=None):
    payload = {"identifier": identifier, "password": password}
    if app_source is not None:
        payload["app_source"] = app_source
    response = client.post("/api/v1/auth/login", json=payload)
    assert response.status_code == 200
    return response.json()["access_token"]


@pytest.fixture()
def auth_headers(client):
    register_user(client, username="planner", email="planner@example.com")
    token = login_user(client, "planner@example.com")
    return {"Authorization": f"Bearer {token}"}
