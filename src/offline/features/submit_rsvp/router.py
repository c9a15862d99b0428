from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from src.offline.dependencies import get_offline_service
from src.offline.dtos import AttendanceStatus, SubmissionStatus
from src.offline.errors import DeliveryRejectedError, StorageError, ValidationError
from src.offline.service import OfflineService
from src.offline.urls import SUBMIT_RSVP_URL
from src.rsvp.form import RSVPFormState

router = APIRouter()


class GuestSubmit(BaseModel):
    full_name: str = ""
    meal_preference: str = ""
    allergies: str = ""


class RSVPSubmit(BaseModel):
    """Either a guests array or the legacy single-guest fields."""

    attending: AttendanceStatus
    guests: list[GuestSubmit] = []
    additional_notes: str = ""
    # Legacy single-guest fields
    full_name: str | None = None
    meal_preference: str | None = None
    allergies: str | None = None

    def to_form_state(self) -> RSVPFormState:
        record = {
            "attending": self.attending.value,
            "additionalNotes": self.additional_notes,
            "fullName": self.full_name,
            "mealPreference": self.meal_preference,
            "allergies": self.allergies,
            "guests": [
                {
                    "fullName": guest.full_name,
                    "mealPreference": guest.meal_preference,
                    "allergies": guest.allergies,
                }
                for guest in self.guests
            ],
        }
        return RSVPFormState.from_existing(record)


class SubmissionResponse(BaseModel):
    status: SubmissionStatus
    message: str
    item_id: str | None = None


@router.post(SUBMIT_RSVP_URL, response_model=SubmissionResponse)
async def submit_rsvp(
    rsvp_data: RSVPSubmit,
    service: OfflineService = Depends(get_offline_service),
) -> SubmissionResponse:
    """
    Submit an RSVP.
    Sent straight to the wedding API when it is reachable, otherwise saved
    locally and synced once the connection is back.
    """
    try:
        result = await service.submissions.submit_form(rsvp_data.to_form_state())
    except ValidationError as e:
        raise HTTPException(status_code=422, detail={"field": e.field, "message": str(e)})
    except DeliveryRejectedError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError:
        raise HTTPException(status_code=503, detail="Could not save your RSVP, please try again")

    return SubmissionResponse(status=result.status, message=result.message, item_id=result.item_id)
