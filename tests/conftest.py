import os

# must be set before catering.config is imported
os.environ.update(
    ENV="test",
    DATABASE_URL="sqlite://",
    ADMIN_USER="admin",
    ADMIN_PASS="secret",
    JWT_SECRET="test-secret",
    CRON_SECRET="cron-secret",
    ADMIN_EMAIL="admin@example.com",
    KITCHEN_EMAIL="kitchen@example.com",
    RESEND_API_KEY="",
)

from datetime import date, timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from catering.db import get_db  # noqa: E402
from catering.main import app  # noqa: E402
from catering.migrations import run_migrations  # noqa: E402
from catering.notify.email_notify import notifier  # noqa: E402
from catering.routers import auth  # noqa: E402


@pytest.fixture()
def engine():
    eng = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    run_migrations(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    """Every email the app tries to send, instead of calling the provider."""
    sent = []

    def fake_send(message):
        sent.append(message)
        return True

    monkeypatch.setattr(notifier, "api_key", "test-key")
    monkeypatch.setattr(notifier, "send", fake_send)
    return sent


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    auth.login_attempts.clear()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def admin(client):
    c = TestClient(app)
    resp = c.post("/admin/login", json={"username": "admin", "password": "secret"})
    assert resp.status_code == 200
    return c


def open_day(min_days: int = 3) -> date:
    """First Wed-Sun at least `min_days` from today."""
    d = date.today() + timedelta(days=min_days)
    while d.weekday() in (0, 1):
        d += timedelta(days=1)
    return d


@pytest.fixture()
def order_payload():
    def make(**overrides):
        payload = {
            "customer_name": "Dana Cohen",
            "customer_email": "dana@example.com",
            "customer_phone": "212-555-0101",
            "fulfillment_type": "pickup",
            "pickup_date": open_day().isoformat(),
            "pickup_time": "2:00 PM",
            "order_data": {
                "items": [
                    {
                        "type": "party_box",
                        "quantity": 1,
                        "price_cents": 22500,
                        "flavors": [{"name": "Cheese", "quantity": 20}, {"name": "Potato Leek", "quantity": 20}],
                    },
                    {
                        "type": "big_box",
                        "quantity": 1,
                        "price_cents": 7800,
                        "flavors": [{"name": "Spinach Artichoke", "quantity": 8}],
                    },
                ],
                "addons": [{"name": "Extra Spicy Schug", "quantity": 2, "price_cents": 800}],
            },
        }
        payload.update(overrides)
        return payload
    return make


@pytest.fixture()
def create_order(client, order_payload):
    def create(**overrides) -> int:
        resp = client.post("/orders", json=order_payload(**overrides))
        assert resp.status_code == 201, resp.text
        return resp.json()["id"]
    return create
