"""
Shared fixtures: an in-memory store, a frozen clock for the rate limiter and
an application built through create_app().
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "warning")

import time

import pytest
from fastapi.testclient import TestClient
from limits.storage import MemoryStorage
from sqlalchemy.orm import sessionmaker

from database import build_engine, get_db
from main import create_app
from ratelimit import FixedWindowRateLimiter

RATE_LIMIT_MESSAGE = "Too many requests, please try again after 1 minutes!"


class FrozenClock:
    """Stands in for time.time so rate-limit windows only move when told to."""

    def __init__(self, start: float):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock(monkeypatch):
    frozen = FrozenClock(float(int(time.time())))
    monkeypatch.setattr(time, "time", frozen)
    return frozen


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    yield engine
    engine.dispose()


@pytest.fixture
def make_app(engine):
    """Build an app with its own limiter; max_requests defaults high so CRUD tests are not throttled."""

    def _make(max_requests: int = 1000, window_seconds: int = 60):
        limiter = FixedWindowRateLimiter(
            storage=MemoryStorage(),
            window_seconds=window_seconds,
            max_requests=max_requests,
            message=RATE_LIMIT_MESSAGE,
        )
        app = create_app(rate_limiter=limiter, bind=engine)
        TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        def override_get_db():
            db = TestingSession()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        return app

    return _make


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def customer_payload():
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "address": "12 St James's Square, London",
        "email": "ada@example.com",
        "phone_number": "+44 20 7946 0000",
    }


@pytest.fixture
def product_payload():
    return {
        "name": "Analytical Engine",
        "description": "Mechanical general-purpose computer",
        "price": "1999.99",
        "category": "machines",
        "image_url": "https://example.com/engine.png",
    }


@pytest.fixture
def registered_user(client):
    credentials = {"username": "grace", "email": "grace@example.com", "password": "C0b0l!rocks"}
    response = client.post("/api/v1/users", json=credentials)
    assert response.status_code == 200
    return {**credentials, "id": response.json()["id"]}


@pytest.fixture
def auth_token(client, registered_user):
    response = client.post(
        "/api/v1/login",
        json={"username": registered_user["username"], "password": registered_user["password"]},
    )
    assert response.status_code == 200
    return response.json()["access_token"]
