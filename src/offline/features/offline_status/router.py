from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from src.offline.dependencies import get_offline_service
from src.offline.dtos import SYNCABLE_COLLECTIONS, Collection, ConnectionQuality, PendingRSVPDTO
from src.offline.errors import StorageError
from src.offline.service import OfflineService
from src.offline.urls import OFFLINE_STATUS_URL, PENDING_ITEMS_URL

router = APIRouter()


class OfflineStatusResponse(BaseModel):
    is_online: bool
    is_connecting: bool
    connection_quality: ConnectionQuality
    last_connected: datetime | None = None
    pending_rsvps: int
    pending_photos: int
    last_sync: datetime | None = None
    failing_items: dict[str, int] = {}


class PendingItemResponse(BaseModel):
    id: str
    timestamp: int
    label: str


@router.get(OFFLINE_STATUS_URL, response_model=OfflineStatusResponse)
async def get_offline_status(
    service: OfflineService = Depends(get_offline_service),
) -> OfflineStatusResponse:
    try:
        status = await service.get_offline_status()
    except StorageError:
        raise HTTPException(status_code=503, detail="Local store unavailable")

    return OfflineStatusResponse(
        is_online=status.is_online,
        is_connecting=status.is_connecting,
        connection_quality=status.connection_quality,
        last_connected=status.last_connected,
        pending_rsvps=status.pending_rsvps,
        pending_photos=status.pending_photos,
        last_sync=status.last_sync,
        failing_items=status.failing_items,
    )


@router.get(PENDING_ITEMS_URL, response_model=list[PendingItemResponse])
async def list_pending_items(
    collection: Collection,
    service: OfflineService = Depends(get_offline_service),
) -> list[PendingItemResponse]:
    """List queued items without their payloads."""
    if collection not in SYNCABLE_COLLECTIONS:
        raise HTTPException(status_code=404, detail=f"'{collection.value}' is not a sync queue")

    try:
        items = await service.store.get_all(collection)
    except StorageError:
        raise HTTPException(status_code=503, detail="Local store unavailable")

    return [
        PendingItemResponse(
            id=item.id,
            timestamp=item.timestamp,
            label=item.full_name if isinstance(item, PendingRSVPDTO) else item.filename,
        )
        for item in items
    ]
