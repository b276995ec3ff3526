"""
Shared fixtures: a file-backed SQLite database per test, a recording push
gateway, and the FastAPI app wired to both.
"""

import asyncio
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from orderdesk.core.config import Settings
from orderdesk.core.errors import NotificationDeliveryError
from orderdesk.database import build_engine, build_session_maker, init_db
from orderdesk.main import configure_app
from orderdesk.services.dispatcher import NotificationDispatcher
from orderdesk.services.notifications.base import (
    BaseNotificationGateway,
    DeliveryResult,
    PushMessage,
)
from orderdesk.services.orders import OrderLifecycleManager
from orderdesk.store import OrderStore, SettingsStore

ADMIN_PASSWORD = "secret"
ADMIN_DEVICE = "ExponentPushToken[admin-device-1]"


class RecordingGateway(BaseNotificationGateway):
    """Push gateway that remembers messages and can be told to fail."""

    def __init__(self, fail_with: Optional[Exception] = None):
        self.fail_with = fail_with
        self.sent: list[PushMessage] = []

    @property
    def provider_name(self) -> str:
        return "recording"

    async def send(self, message: PushMessage) -> DeliveryResult:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(message)
        return DeliveryResult(success=True, data={"data": {"status": "ok"}}, provider="recording")

    async def health_check(self) -> bool:
        return True


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        env_mode="development",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'orderdesk.db'}",
        admin_token_secret="test-signing-key-for-orderdesk-sessions",
        admin_auth_required=True,
    )


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()


# =============================================================================
# SERVICE-LEVEL FIXTURES (async)
# =============================================================================

@pytest.fixture
async def session_maker(settings):
    engine = build_engine(settings)
    await init_db(engine)
    yield build_session_maker(engine)
    await engine.dispose()


@pytest.fixture
def order_store(session_maker) -> OrderStore:
    return OrderStore(session_maker)


@pytest.fixture
def settings_store(session_maker) -> SettingsStore:
    return SettingsStore(session_maker)


@pytest.fixture
def dispatcher(gateway) -> NotificationDispatcher:
    return NotificationDispatcher(gateway)


@pytest.fixture
def manager(order_store, settings_store, dispatcher) -> OrderLifecycleManager:
    return OrderLifecycleManager(order_store, settings_store, dispatcher)


# =============================================================================
# HTTP FIXTURES
# =============================================================================

def seed_admin(settings: Settings, password: str = ADMIN_PASSWORD, push_token: Optional[str] = None) -> None:
    """Create the admin profile in the test database before the app starts."""

    async def _seed():
        engine = build_engine(settings)
        await init_db(engine)
        store = SettingsStore(build_session_maker(engine))
        await store.set_admin_password(password)
        if push_token:
            await store.record_admin_login(push_token=push_token)
        await engine.dispose()

    asyncio.run(_seed())


@pytest.fixture
def client(settings, gateway):
    app = configure_app(settings, gateway=gateway)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_client(settings, gateway):
    """Client with an admin profile (device token stored) and a session header."""
    seed_admin(settings, push_token=ADMIN_DEVICE)
    app = configure_app(settings, gateway=gateway)
    with TestClient(app) as test_client:
        response = test_client.post("/admin/login", json={"password": ADMIN_PASSWORD})
        assert response.status_code == 200
        test_client.headers["Authorization"] = f"Bearer {response.json()['token']}"
        yield test_client


@pytest.fixture
def failing_gateway() -> RecordingGateway:
    return RecordingGateway(fail_with=NotificationDeliveryError("gateway down"))
