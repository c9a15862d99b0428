"""Field validators shared by the RSVP form and the offline queue.

Every validator returns the cleaned value or raises ``ValidationError``.
"""

import re

from src.offline.dtos import AttendanceStatus
from src.offline.errors import ValidationError

MEAL_PREFERENCES = ("chicken", "beef", "fish", "vegetarian", "vegan", "kids")

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
ALLERGIES_MAX_LENGTH = 200
NOTES_MAX_LENGTH = 500
MIN_GUESTS = 1
MAX_GUESTS = 10

_NAME_RE = re.compile(r"^[a-zA-Z\s\-']+$")
_UNSAFE_CHARS_RE = re.compile(r"[<>\"']")


def validate_name(name: str, field_name: str = "Name") -> str:
    trimmed = (name or "").strip()
    if not trimmed:
        raise ValidationError(f"{field_name} is required", field="fullName")
    if len(trimmed) < NAME_MIN_LENGTH:
        raise ValidationError(
            f"{field_name} must be at least {NAME_MIN_LENGTH} characters long", field="fullName"
        )
    if len(trimmed) > NAME_MAX_LENGTH:
        raise ValidationError(f"{field_name} is too long", field="fullName")
    if not _NAME_RE.match(trimmed):
        raise ValidationError(f"{field_name} contains invalid characters", field="fullName")
    return trimmed


def validate_attendance(attending: str | AttendanceStatus) -> AttendanceStatus:
    value = attending.value if isinstance(attending, AttendanceStatus) else str(attending)
    try:
        return AttendanceStatus(value.strip().upper())
    except ValueError:
        raise ValidationError("Invalid attendance status", field="attending")


def validate_guest_count(count: int, max_guests: int = MAX_GUESTS) -> int:
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValidationError("Guest count must be a whole number", field="guestCount")
    upper = min(max_guests, MAX_GUESTS)
    if count < MIN_GUESTS or count > upper:
        raise ValidationError(
            f"Guest count must be between {MIN_GUESTS} and {upper}", field="guestCount"
        )
    return count


def validate_meal_preference(
    preference: str,
    attending: AttendanceStatus | None = None,
    enabled: bool = True,
) -> str:
    """Lowercase and check the meal choice; only attending guests must pick one."""
    if not enabled:
        return ""

    lowered = (preference or "").strip().lower()
    if not lowered:
        if attending == AttendanceStatus.YES:
            raise ValidationError("Meal preference is required", field="mealPreference")
        return ""

    if lowered not in MEAL_PREFERENCES:
        raise ValidationError("Invalid meal preference", field="mealPreference")
    return lowered


def sanitize_text(text: str | None, max_length: int = NOTES_MAX_LENGTH, field: str | None = None) -> str:
    trimmed = (text or "").strip()
    if len(trimmed) > max_length:
        raise ValidationError(f"Text is too long (max {max_length} characters)", field=field)
    return _UNSAFE_CHARS_RE.sub("", trimmed)
