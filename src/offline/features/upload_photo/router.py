from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from src.offline.dependencies import get_offline_service
from src.offline.errors import DeliveryRejectedError, StorageError, ValidationError
from src.offline.features.submit_rsvp.router import SubmissionResponse
from src.offline.service import OfflineService
from src.offline.urls import UPLOAD_PHOTO_URL

router = APIRouter()


@router.post(UPLOAD_PHOTO_URL, response_model=SubmissionResponse)
async def upload_photo(
    photo: UploadFile = File(...),
    guest_name: str = Form(...),
    caption: str = Form(""),
    service: OfflineService = Depends(get_offline_service),
) -> SubmissionResponse:
    """Upload a guest photo, queueing it locally when the wedding API is out of reach."""
    content = await photo.read()
    try:
        result = await service.submissions.upload_photo(
            file=content,
            guest_name=guest_name,
            caption=caption,
            filename=photo.filename or "photo.jpg",
            content_type=photo.content_type or "application/octet-stream",
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail={"field": e.field, "message": str(e)})
    except DeliveryRejectedError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError:
        raise HTTPException(status_code=503, detail="Could not save your photo, please try again")

    return SubmissionResponse(status=result.status, message=result.message, item_id=result.item_id)
