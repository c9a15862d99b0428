"""Checks applied before a pending item is written to the queue.

Anything rejected here would be refused by the server on every retry, so it
is never queued.
"""

from typing import Protocol

from src.config.settings import settings
from src.offline.dtos import (
    SYNCABLE_COLLECTIONS,
    AttendanceStatus,
    Collection,
    PendingPhotoUploadDTO,
    PendingRSVPDTO,
    StoredItem,
)
from src.offline.errors import ValidationError
from src.offline.repository.store import ITEM_TYPES
from src.rsvp.validation import (
    ALLERGIES_MAX_LENGTH,
    NOTES_MAX_LENGTH,
    sanitize_text,
    validate_attendance,
    validate_guest_count,
    validate_meal_preference,
    validate_name,
)


def _validate_identity(item: PendingRSVPDTO | PendingPhotoUploadDTO) -> None:
    if not isinstance(item.id, str) or not item.id.strip():
        raise ValidationError("Pending item id is required", field="id")
    if not isinstance(item.timestamp, int) or item.timestamp <= 0:
        raise ValidationError("Pending item timestamp must be a positive epoch", field="timestamp")


def validate_pending_rsvp(rsvp: PendingRSVPDTO, meal_preferences_enabled: bool = True) -> None:
    _validate_identity(rsvp)
    attending = validate_attendance(rsvp.attending)

    if attending == AttendanceStatus.YES:
        validate_name(rsvp.full_name, "Guest name")
    elif not (rsvp.full_name or "").strip():
        raise ValidationError("Guest name is required", field="fullName")

    validate_meal_preference(rsvp.meal_preference, attending, meal_preferences_enabled)
    sanitize_text(rsvp.allergies, ALLERGIES_MAX_LENGTH, field="allergies")
    sanitize_text(rsvp.additional_notes, NOTES_MAX_LENGTH, field="additionalNotes")

    if rsvp.guests:
        validate_guest_count(len(rsvp.guests))
    for index, guest in enumerate(rsvp.guests):
        if attending == AttendanceStatus.YES:
            validate_name(guest.full_name, f"Guest {index + 1} name")
        validate_meal_preference(guest.meal_preference, attending, meal_preferences_enabled)
        sanitize_text(guest.allergies, ALLERGIES_MAX_LENGTH, field="allergies")


def validate_pending_photo(photo: PendingPhotoUploadDTO, max_bytes: int) -> None:
    _validate_identity(photo)
    if not photo.file:
        raise ValidationError("Photo file is empty", field="photo")
    if len(photo.file) > max_bytes:
        raise ValidationError(f"Photo is larger than {max_bytes} bytes", field="photo")
    if not photo.content_type.startswith("image/"):
        raise ValidationError("Only image uploads are supported", field="photo")
    if not (photo.guest_name or "").strip():
        raise ValidationError("Uploader name is required", field="guestName")
    sanitize_text(photo.caption, NOTES_MAX_LENGTH, field="caption")


class ItemLimits(Protocol):
    meal_preferences_enabled: bool
    max_photo_bytes: int


def validate_pending_item(
    collection: Collection, item: StoredItem, config: ItemLimits = settings
) -> None:
    expected = ITEM_TYPES.get(collection)
    if collection not in SYNCABLE_COLLECTIONS or not isinstance(item, expected):
        raise ValidationError(
            f"{type(item).__name__} cannot be queued in '{collection.value}'", field="collection"
        )

    if isinstance(item, PendingRSVPDTO):
        validate_pending_rsvp(item, config.meal_preferences_enabled)
    elif isinstance(item, PendingPhotoUploadDTO):
        validate_pending_photo(item, config.max_photo_bytes)
