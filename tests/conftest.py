"""Shared test fixtures."""
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from app.database.memory_store import MemoryRecordStore
from app.database.sql_store import SQLRecordStore
from app.main import app
from app.notifications.dispatcher import NotificationDispatcher
from config.appconfig import settings
from tests.utils.fakes import SERVICE, RecordingNotifier


@pytest.fixture(autouse=True)
def test_settings(monkeypatch, tmp_path):
    """Isolated settings: no Telegram, throwaway secret and sqlite file."""
    monkeypatch.setattr(settings, "ENVIRONMENT", "test")
    monkeypatch.setattr(settings, "SECRET_KEY", "test-secret-key")
    monkeypatch.setattr(settings, "TELEGRAM_BOT_TOKEN", "")
    monkeypatch.setattr(settings, "TELEGRAM_CHAT_ID", "")
    monkeypatch.setattr(settings, "SQLITE_PATH", str(tmp_path / "appointments.db"))
    monkeypatch.setattr(settings, "STORAGE_BACKEND", "memory")
    yield settings


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture(params=["memory", "sqlite"])
def client(request, monkeypatch, notifier):
    """FastAPI test client running the full lifespan against each backend."""
    monkeypatch.setattr(settings, "STORAGE_BACKEND", request.param)
    with TestClient(app) as test_client:
        app.state.dispatcher = NotificationDispatcher(notifier)
        yield test_client


@pytest.fixture
def login(client):
    """Log in and return bearer headers. Clears the auth cookie so tests stay explicit."""

    def _login(username: str, password: str) -> dict:
        response = client.post("/api/auth/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        client.cookies.clear()
        return {"Authorization": f"Bearer {response.json()['accessToken']}"}

    return _login


@pytest.fixture
def booking_payload():
    """Create booking request bodies."""

    def _create(date: str = "2025-03-10", time: str = "13:00", **overrides) -> dict:
        payload = {
            "patientName": "Aigerim Sadykova",
            "patientPhone": "+7 701 555 0101",
            "patientEmail": "aigerim@example.com",
            "date": date,
            "time": time,
            "serviceType": dict(SERVICE),
            "problemDescription": "Lower back pain after running",
        }
        payload.update(overrides)
        return payload

    return _create


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def store(request, tmp_path):
    """Initialized record store for each backend."""
    if request.param == "memory":
        record_store = MemoryRecordStore()
    else:
        record_store = SQLRecordStore(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await record_store.initialize()
    yield record_store
    await record_store.close()


@pytest.fixture
def settle_notifications(client):
    """Wait for scheduled notifications on the app's event loop."""

    def _settle(timeout: float = 2.0) -> None:
        client.portal.call(app.state.dispatcher.drain, timeout)

    return _settle
