"""Multi-guest RSVP form state.

Older RSVP records only carry a single guest in top-level ``fullName`` /
``mealPreference`` / ``allergies`` fields. Newer ones carry a ``guests``
array. The form always works on the array and mirrors the first guest back
into the legacy fields when it builds a submission.
"""

from dataclasses import dataclass, field, fields
from typing import Any

from src.config.settings import settings
from src.offline.dtos import AttendanceStatus, GuestDTO, PendingRSVPDTO
from src.offline.errors import ValidationError
from src.rsvp.validation import (
    ALLERGIES_MAX_LENGTH,
    MAX_GUESTS,
    NOTES_MAX_LENGTH,
    sanitize_text,
    validate_attendance,
    validate_guest_count,
    validate_meal_preference,
    validate_name,
)


@dataclass
class GuestFormEntry:
    full_name: str = ""
    meal_preference: str = ""
    allergies: str = ""

    def is_blank(self) -> bool:
        return not (self.full_name.strip() or self.meal_preference.strip() or self.allergies.strip())


GUEST_FIELDS = {f.name for f in fields(GuestFormEntry)}


def is_legacy_rsvp(rsvp: dict[str, Any]) -> bool:
    """True when the record predates the guests array."""
    return not rsvp.get("guests")


def guests_from_rsvp(rsvp: dict[str, Any]) -> list[GuestFormEntry]:
    if is_legacy_rsvp(rsvp):
        return [
            GuestFormEntry(
                full_name=rsvp.get("fullName") or "",
                meal_preference=rsvp.get("mealPreference") or "",
                allergies=rsvp.get("allergies") or "",
            )
        ]
    return [
        GuestFormEntry(
            full_name=guest.get("fullName") or "",
            meal_preference=guest.get("mealPreference") or "",
            allergies=guest.get("allergies") or "",
        )
        for guest in rsvp["guests"]
    ]


@dataclass
class RSVPFormState:
    attending: AttendanceStatus = AttendanceStatus.NO
    guests: list[GuestFormEntry] = field(default_factory=lambda: [GuestFormEntry()])
    additional_notes: str = ""
    max_guests: int = MAX_GUESTS
    meal_preferences_enabled: bool = True

    @classmethod
    def from_existing(
        cls,
        rsvp: dict[str, Any] | None,
        max_guests: int | None = None,
        meal_preferences_enabled: bool | None = None,
    ) -> "RSVPFormState":
        """Build form state from a server RSVP record (camelCase), migrating legacy records."""
        options = {
            "max_guests": max_guests or settings.max_guests_per_rsvp,
            "meal_preferences_enabled": (
                settings.meal_preferences_enabled
                if meal_preferences_enabled is None
                else meal_preferences_enabled
            ),
        }
        if not rsvp:
            return cls(**options)

        try:
            attending = validate_attendance(rsvp.get("attending") or AttendanceStatus.NO)
        except ValidationError:
            attending = AttendanceStatus.NO

        return cls(
            attending=attending,
            guests=guests_from_rsvp(rsvp),
            additional_notes=rsvp.get("additionalNotes") or "",
            **options,
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def set_attending(self, attending: str | AttendanceStatus) -> None:
        self.attending = validate_attendance(attending)

    def add_guest(self) -> GuestFormEntry:
        if len(self.guests) >= self.max_guests:
            raise ValidationError(
                f"No more than {self.max_guests} guests can be added", field="guestCount"
            )
        guest = GuestFormEntry()
        self.guests.append(guest)
        return guest

    def remove_guest(self, index: int) -> None:
        if len(self.guests) <= 1:
            raise ValidationError("At least one guest is required", field="guestCount")
        del self.guests[index]

    def update_guest(self, index: int, **changes: str) -> GuestFormEntry:
        unknown = set(changes) - GUEST_FIELDS
        if unknown:
            raise ValueError(f"Unknown guest fields: {', '.join(sorted(unknown))}")
        guest = self.guests[index]
        for name, value in changes.items():
            setattr(guest, name, value)
        return guest

    # -------------------------------------------------------------------------
    # Validation and normalization
    # -------------------------------------------------------------------------

    def filled_guests(self) -> list[GuestFormEntry]:
        """Guests worth submitting; blank rows after the first are dropped."""
        filled = [guest for guest in self.guests if not guest.is_blank()]
        if not filled and self.guests:
            return [self.guests[0]]
        return filled

    def validate(self) -> dict[str, str]:
        """Return field errors keyed like ``guests.0.fullName``; empty when valid."""
        errors: dict[str, str] = {}
        guests = self.filled_guests()
        attending_yes = self.attending == AttendanceStatus.YES

        if attending_yes and all(guest.is_blank() for guest in guests):
            errors["guests"] = "At least one guest is required when attending"
        else:
            try:
                validate_guest_count(len(guests), self.max_guests)
            except ValidationError as e:
                errors["guestCount"] = str(e)

        for index, guest in enumerate(guests):
            prefix = f"guests.{index}"
            if attending_yes:
                try:
                    validate_name(guest.full_name, f"Guest {index + 1} name")
                except ValidationError as e:
                    errors[f"{prefix}.fullName"] = str(e)
            try:
                validate_meal_preference(
                    guest.meal_preference, self.attending, self.meal_preferences_enabled
                )
            except ValidationError as e:
                errors[f"{prefix}.mealPreference"] = f"Guest {index + 1}: {e}"
            try:
                sanitize_text(guest.allergies, ALLERGIES_MAX_LENGTH)
            except ValidationError as e:
                errors[f"{prefix}.allergies"] = f"Guest {index + 1}: {e}"

        try:
            sanitize_text(self.additional_notes, NOTES_MAX_LENGTH)
        except ValidationError as e:
            errors["additionalNotes"] = str(e)

        return errors

    def _normalized_guests(self) -> list[dict[str, str]]:
        normalized = []
        for guest in self.filled_guests():
            if guest.is_blank() and self.attending != AttendanceStatus.YES:
                continue
            entry = {
                "fullName": guest.full_name.strip(),
                "mealPreference": validate_meal_preference(
                    guest.meal_preference, self.attending, self.meal_preferences_enabled
                ),
            }
            allergies = sanitize_text(guest.allergies, ALLERGIES_MAX_LENGTH)
            if allergies:
                entry["allergies"] = allergies
            normalized.append(entry)
        return normalized

    def to_submission(self) -> dict[str, Any]:
        """Normalized payload in the server's RSVP input shape.

        Raises ``ValidationError`` when the form is not valid.
        """
        errors = self.validate()
        if errors:
            field_name, message = next(iter(errors.items()))
            raise ValidationError(message, field=field_name)

        guests = self._normalized_guests()
        primary = guests[0] if guests else {}
        submission: dict[str, Any] = {
            "attending": self.attending.value,
            "guestCount": len(guests) or 1,
            "guests": guests,
            # legacy fields mirror the first guest
            "fullName": primary.get("fullName", ""),
            "mealPreference": primary.get("mealPreference", ""),
            "allergies": primary.get("allergies", ""),
        }
        notes = sanitize_text(self.additional_notes, NOTES_MAX_LENGTH)
        if notes:
            submission["additionalNotes"] = notes
        return submission

    def to_pending_rsvp(self, item_id: str, timestamp: int) -> PendingRSVPDTO:
        """Every guest plus the legacy primary-guest fields, ready to deliver or queue."""
        submission = self.to_submission()
        return PendingRSVPDTO(
            id=item_id,
            full_name=submission["fullName"],
            attending=self.attending,
            meal_preference=submission["mealPreference"],
            allergies=submission["allergies"],
            additional_notes=submission.get("additionalNotes", ""),
            timestamp=timestamp,
            guests=tuple(
                GuestDTO(
                    full_name=guest["fullName"],
                    meal_preference=guest["mealPreference"],
                    allergies=guest.get("allergies", ""),
                )
                for guest in submission["guests"]
            ),
        )
