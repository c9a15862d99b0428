from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel

from src.offline.dependencies import get_offline_service
from src.offline.errors import StorageError
from src.offline.service import OfflineService
from src.offline.urls import WEDDING_DATA_URL

router = APIRouter()


class WeddingDataResponse(BaseModel):
    key: str
    data: Any
    timestamp: int


@router.get(WEDDING_DATA_URL, response_model=WeddingDataResponse)
async def get_wedding_data(
    key: str,
    service: OfflineService = Depends(get_offline_service),
) -> WeddingDataResponse:
    """Last known good copy of a piece of wedding data, for offline reads."""
    try:
        cached = await service.get_wedding_data(key)
    except StorageError:
        raise HTTPException(status_code=503, detail="Local store unavailable")

    if cached is None:
        raise HTTPException(status_code=404, detail=f"No cached data for '{key}'")
    return WeddingDataResponse(key=cached.key, data=cached.data, timestamp=cached.timestamp)


@router.put(WEDDING_DATA_URL, response_model=WeddingDataResponse)
async def save_wedding_data(
    key: str,
    data: Any = Body(...),
    service: OfflineService = Depends(get_offline_service),
) -> WeddingDataResponse:
    """Overwrite the cached copy after a successful fetch."""
    try:
        cached = await service.save_wedding_data(key, data)
    except StorageError:
        raise HTTPException(status_code=503, detail="Local store unavailable")

    return WeddingDataResponse(key=cached.key, data=cached.data, timestamp=cached.timestamp)
