from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Response, UploadFile
from pydantic import BaseModel

from src.offline.dependencies import get_offline_service
from src.offline.errors import StorageError
from src.offline.service import OfflineService
from src.offline.urls import CACHED_IMAGE_URL

router = APIRouter()


class CachedImageResponse(BaseModel):
    url: str
    content_type: str
    size: int
    timestamp: int


@router.get(CACHED_IMAGE_URL)
async def get_cached_image(
    url: str = Query(..., min_length=1),
    service: OfflineService = Depends(get_offline_service),
) -> Response:
    """Serve a previously cached image so galleries keep working offline."""
    try:
        image = await service.get_cached_image(url)
    except StorageError:
        raise HTTPException(status_code=503, detail="Local store unavailable")

    if image is None:
        raise HTTPException(status_code=404, detail=f"No cached image for '{url}'")
    return Response(content=image.blob, media_type=image.content_type)


@router.put(CACHED_IMAGE_URL, response_model=CachedImageResponse)
async def save_cached_image(
    url: str = Form(..., min_length=1),
    image: UploadFile = File(...),
    service: OfflineService = Depends(get_offline_service),
) -> CachedImageResponse:
    content_type = image.content_type or "application/octet-stream"
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=422, detail="Only images can be cached")

    blob = await image.read()
    try:
        cached = await service.save_cached_image(url, blob, content_type)
    except StorageError:
        raise HTTPException(status_code=503, detail="Local store unavailable")

    return CachedImageResponse(
        url=cached.url,
        content_type=cached.content_type,
        size=len(cached.blob),
        timestamp=cached.timestamp,
    )
