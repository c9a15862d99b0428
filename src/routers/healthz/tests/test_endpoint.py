from datetime import datetime

import pytest

from src.config.settings import settings
from src.offline.urls import OFFLINE_STATUS_URL


@pytest.mark.asyncio
async def test_health_reports_environment_and_time(client):
    response = await client.get("/healthz/")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["environment"] == settings.ENVIRONMENT
    assert datetime.fromisoformat(body["timestamp"]).tzinfo is not None


@pytest.mark.asyncio
async def test_health_is_up_before_the_offline_service_is_ready(client):
    health = await client.get("/healthz/")
    offline_status = await client.get(OFFLINE_STATUS_URL)

    assert health.status_code == 200
    assert offline_status.status_code == 503


@pytest.mark.asyncio
async def test_root_names_the_sync_api(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert "Offline Sync" in response.json()["message"]
