# tests/conftest.py

from __future__ import annotations

import os

# Settings are read at import time; point them at throwaway values first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"

from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from tasknest.db.session import get_session
from tasknest.main import app
from tasknest.services.live import TaskFeed


@pytest.fixture()
def engine():
    """
    One in-memory SQLite database per test.

    StaticPool keeps a single connection so every session (and the worker
    threads TestClient runs sync endpoints in) sees the same database.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine) -> Iterator[Session]:
    with Session(engine) as session:
        yield session


@pytest.fixture()
def feed() -> TaskFeed:
    return TaskFeed()


@pytest.fixture()
def client(engine, feed: TaskFeed) -> Iterator[TestClient]:
    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    previous_feed = app.state.task_feed
    app.state.task_feed = feed
    with TestClient(app) as client:
        yield client
    app.state.task_feed = previous_feed
    app.dependency_overrides.clear()


@pytest.fixture()
def register(client: TestClient) -> Callable[..., dict]:
    def _register(email: str = "ada@example.com", password: str = "secret123", name: str = "Ada") -> dict:
        response = client.post(
            "/api/v1/auth/register",
            json={"email": email, "password": password, "name": name},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture()
def login(client: TestClient) -> Callable[..., str]:
    def _login(email: str = "ada@example.com", password: str = "secret123") -> str:
        response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return response.json()["access_token"]

    return _login


@pytest.fixture()
def token(register, login) -> str:
    register()
    return login()


@pytest.fixture()
def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
