import pytest

from src.offline.dtos import AttendanceStatus, GuestDTO
from src.offline.errors import ValidationError
from src.rsvp.form import GuestFormEntry, RSVPFormState, is_legacy_rsvp

LEGACY_RSVP = {
    "fullName": "Jane Doe",
    "attending": "YES",
    "mealPreference": "vegetarian",
    "allergies": "peanuts",
    "additionalNotes": "Can't wait",
}

MULTI_GUEST_RSVP = {
    "attending": "YES",
    "guestCount": 2,
    "guests": [
        {"fullName": "Jane Doe", "mealPreference": "fish"},
        {"fullName": "John Doe", "mealPreference": "beef", "allergies": "shellfish"},
    ],
    "fullName": "Jane Doe",
    "mealPreference": "fish",
}


def test_legacy_record_is_detected():
    assert is_legacy_rsvp(LEGACY_RSVP) is True
    assert is_legacy_rsvp({**LEGACY_RSVP, "guests": []}) is True
    assert is_legacy_rsvp(MULTI_GUEST_RSVP) is False


def test_legacy_record_becomes_single_guest():
    form = RSVPFormState.from_existing(LEGACY_RSVP, max_guests=10, meal_preferences_enabled=True)

    assert form.attending == AttendanceStatus.YES
    assert form.guests == [
        GuestFormEntry(full_name="Jane Doe", meal_preference="vegetarian", allergies="peanuts")
    ]
    assert form.additional_notes == "Can't wait"


def test_multi_guest_record_keeps_guests_array():
    form = RSVPFormState.from_existing(MULTI_GUEST_RSVP)

    assert [guest.full_name for guest in form.guests] == ["Jane Doe", "John Doe"]
    assert form.guests[1].allergies == "shellfish"


def test_missing_record_gives_blank_form():
    form = RSVPFormState.from_existing(None)

    assert form.attending == AttendanceStatus.NO
    assert form.guests == [GuestFormEntry()]


def test_unknown_attendance_falls_back_to_no():
    form = RSVPFormState.from_existing({**LEGACY_RSVP, "attending": "PERHAPS"})

    assert form.attending == AttendanceStatus.NO


def test_add_and_remove_guests():
    form = RSVPFormState(max_guests=2)

    form.add_guest()
    with pytest.raises(ValidationError):
        form.add_guest()

    form.remove_guest(1)
    with pytest.raises(ValidationError):
        form.remove_guest(0)

    assert len(form.guests) == 1


def test_update_guest_rejects_unknown_fields():
    form = RSVPFormState()

    form.update_guest(0, full_name="Jane Doe")
    with pytest.raises(ValueError):
        form.update_guest(0, shoe_size="42")

    assert form.guests[0].full_name == "Jane Doe"


def test_attending_form_needs_at_least_one_guest():
    form = RSVPFormState(attending=AttendanceStatus.YES)

    errors = form.validate()

    assert "guests" in errors


def test_validation_errors_are_keyed_per_guest():
    form = RSVPFormState(
        attending=AttendanceStatus.YES,
        guests=[
            GuestFormEntry(full_name="Jane Doe", meal_preference="fish"),
            GuestFormEntry(full_name="J", meal_preference="pizza"),
        ],
    )

    errors = form.validate()

    assert set(errors) == {"guests.1.fullName", "guests.1.mealPreference"}
    assert errors["guests.1.fullName"] == "Guest 2 name must be at least 2 characters long"


def test_declined_form_skips_name_and_meal_checks():
    form = RSVPFormState(
        attending=AttendanceStatus.NO,
        guests=[GuestFormEntry(full_name="J")],
    )

    assert form.validate() == {}


def test_too_many_guests():
    form = RSVPFormState(
        attending=AttendanceStatus.YES,
        guests=[GuestFormEntry(full_name="Jane Doe", meal_preference="fish")] * 3,
        max_guests=2,
    )

    assert "guestCount" in form.validate()


def test_notes_length_is_checked():
    form = RSVPFormState(
        attending=AttendanceStatus.NO,
        guests=[GuestFormEntry(full_name="Jane Doe")],
        additional_notes="x" * 501,
    )

    assert "additionalNotes" in form.validate()


def test_submission_mirrors_first_guest_into_legacy_fields():
    form = RSVPFormState.from_existing(MULTI_GUEST_RSVP)
    form.update_guest(0, meal_preference="Fish ")

    submission = form.to_submission()

    assert submission == {
        "attending": "YES",
        "guestCount": 2,
        "guests": [
            {"fullName": "Jane Doe", "mealPreference": "fish"},
            {"fullName": "John Doe", "mealPreference": "beef", "allergies": "shellfish"},
        ],
        "fullName": "Jane Doe",
        "mealPreference": "fish",
        "allergies": "",
    }


def test_submission_drops_blank_extra_guests():
    form = RSVPFormState(
        attending=AttendanceStatus.YES,
        guests=[GuestFormEntry(full_name="Jane Doe", meal_preference="vegan"), GuestFormEntry()],
    )

    submission = form.to_submission()

    assert submission["guestCount"] == 1
    assert len(submission["guests"]) == 1


def test_declined_submission_with_blank_guest():
    form = RSVPFormState(attending=AttendanceStatus.NO, additional_notes=" Sorry! ")

    submission = form.to_submission()

    assert submission["guestCount"] == 1
    assert submission["guests"] == []
    assert submission["fullName"] == ""
    assert submission["additionalNotes"] == "Sorry!"


def test_invalid_form_cannot_be_submitted():
    form = RSVPFormState(attending=AttendanceStatus.YES)

    with pytest.raises(ValidationError):
        form.to_submission()


def test_legacy_record_becomes_single_guest_pending_rsvp():
    form = RSVPFormState.from_existing(LEGACY_RSVP)

    rsvp = form.to_pending_rsvp(item_id="r1", timestamp=1700000000000)

    assert rsvp.id == "r1"
    assert rsvp.full_name == "Jane Doe"
    assert rsvp.attending == AttendanceStatus.YES
    assert rsvp.meal_preference == "vegetarian"
    assert rsvp.allergies == "peanuts"
    assert rsvp.additional_notes == "Cant wait"
    assert rsvp.guests == (
        GuestDTO(full_name="Jane Doe", meal_preference="vegetarian", allergies="peanuts"),
    )


def test_pending_rsvp_carries_every_guest():
    form = RSVPFormState.from_existing(MULTI_GUEST_RSVP)

    rsvp = form.to_pending_rsvp(item_id="r2", timestamp=1700000000000)

    assert rsvp.full_name == "Jane Doe"
    assert rsvp.meal_preference == "fish"
    assert [guest.full_name for guest in rsvp.guests] == ["Jane Doe", "John Doe"]
    assert rsvp.guests[1].allergies == "shellfish"
    assert rsvp.to_graphql_input()["guestCount"] == 2
