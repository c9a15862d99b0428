import pytest

from src.offline.urls import WEDDING_DATA_URL

SCHEDULE = {"ceremony": "15:00", "reception": "18:30", "venue": "Rose Garden"}


@pytest.mark.asyncio
async def test_saved_data_can_be_read_back(client_factory, service_overrides):
    async with client_factory(service_overrides) as client:
        saved = await client.put(url=WEDDING_DATA_URL.format(key="schedule"), json=SCHEDULE)
        fetched = await client.get(url=WEDDING_DATA_URL.format(key="schedule"))

    assert saved.status_code == 200
    assert fetched.status_code == 200
    assert fetched.json()["key"] == "schedule"
    assert fetched.json()["data"] == SCHEDULE
    assert fetched.json()["timestamp"] == saved.json()["timestamp"]


@pytest.mark.asyncio
async def test_saving_again_overwrites(client_factory, service_overrides):
    async with client_factory(service_overrides) as client:
        await client.put(url=WEDDING_DATA_URL.format(key="schedule"), json=SCHEDULE)
        await client.put(url=WEDDING_DATA_URL.format(key="schedule"), json={"ceremony": "16:00"})
        fetched = await client.get(url=WEDDING_DATA_URL.format(key="schedule"))

    assert fetched.json()["data"] == {"ceremony": "16:00"}


@pytest.mark.asyncio
async def test_missing_key_returns_404(client_factory, service_overrides):
    async with client_factory(service_overrides) as client:
        response = await client.get(url=WEDDING_DATA_URL.format(key="menu"))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_store_failure_returns_503(client_factory, offline_service, service_overrides):
    offline_service.store.broken = True

    async with client_factory(service_overrides) as client:
        response = await client.put(url=WEDDING_DATA_URL.format(key="schedule"), json=SCHEDULE)

    assert response.status_code == 503
