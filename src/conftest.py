from contextlib import asynccontextmanager

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.offline.dependencies import get_offline_service
from src.offline.network_monitor import NetworkMonitor
from src.offline.service import OfflineService
from src.offline.tests.inmemory_models import (
    InMemoryLocalStore,
    MockConfig,
    MockHttpClient,
    RecordingDelivery,
    RecordingNotifier,
)


@pytest.fixture(scope="function")
def client_factory():
    """Build a test client with the given dependency overrides applied."""

    @asynccontextmanager
    async def factory(overrides: dict | None = None):
        for dependency, override in (overrides or {}).items():
            app.dependency_overrides[dependency] = override

        transport = ASGITransport(app=app)
        try:
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                yield ac
        finally:
            app.dependency_overrides.clear()

    return factory


@pytest.fixture(scope="function")
async def client(client_factory):
    """Create a test client."""
    async with client_factory() as ac:
        yield ac


@pytest.fixture(scope="function")
def http_client():
    return MockHttpClient()


@pytest.fixture(scope="function")
def rsvp_delivery():
    return RecordingDelivery()


@pytest.fixture(scope="function")
def photo_delivery():
    return RecordingDelivery()


@pytest.fixture(scope="function")
def notifier():
    return RecordingNotifier()


@pytest.fixture(scope="function")
async def offline_service(http_client, rsvp_delivery, photo_delivery, notifier):
    """Offline service on an in-memory store with recording deliveries, starting offline."""
    config = MockConfig()
    service = OfflineService(
        config=config,
        store=InMemoryLocalStore(),
        monitor=NetworkMonitor(config=config, http_client_class=http_client),
        rsvp_delivery=rsvp_delivery,
        photo_delivery=photo_delivery,
        notifier=notifier,
        start_monitor=False,
    )
    await service.init()
    yield service
    await service.dispose()


@pytest.fixture(scope="function")
def service_overrides(offline_service):
    return {get_offline_service: lambda: offline_service}
