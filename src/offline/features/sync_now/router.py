from enum import Enum

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.offline.dependencies import get_offline_service
from src.offline.dtos import Collection, ConnectionQuality
from src.offline.service import OfflineService
from src.offline.urls import NETWORK_EVENT_URL, SYNC_NOW_URL

router = APIRouter()


class NetworkEvent(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class DrainResultResponse(BaseModel):
    collection: Collection
    delivered: list[str]
    failed: list[str]
    remaining: int
    skipped: bool


class NetworkStatusResponse(BaseModel):
    is_online: bool
    is_connecting: bool
    connection_quality: ConnectionQuality


@router.post(SYNC_NOW_URL, response_model=list[DrainResultResponse])
async def sync_now(
    service: OfflineService = Depends(get_offline_service),
) -> list[DrainResultResponse]:
    """Drain every pending queue now. Items that fail stay queued."""
    results = await service.queue.drain_all()
    return [
        DrainResultResponse(
            collection=result.collection,
            delivered=result.delivered,
            failed=result.failed,
            remaining=result.remaining,
            skipped=result.skipped,
        )
        for result in results
    ]


@router.post(NETWORK_EVENT_URL, response_model=NetworkStatusResponse)
async def report_network_event(
    event: NetworkEvent,
    service: OfflineService = Depends(get_offline_service),
) -> NetworkStatusResponse:
    """Feed a platform online/offline event into the network monitor."""
    if event == NetworkEvent.ONLINE:
        status = await service.monitor.handle_online()
    else:
        status = await service.monitor.handle_offline()

    return NetworkStatusResponse(
        is_online=status.is_online,
        is_connecting=status.is_connecting,
        connection_quality=status.connection_quality,
    )
