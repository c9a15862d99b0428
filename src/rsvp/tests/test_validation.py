import pytest

from src.offline.dtos import AttendanceStatus
from src.offline.errors import ValidationError
from src.rsvp.validation import (
    sanitize_text,
    validate_attendance,
    validate_guest_count,
    validate_meal_preference,
    validate_name,
)


@pytest.mark.parametrize("name", ["Jane Doe", "Mary-Jane O'Neil", "  Al  "])
def test_valid_names_are_trimmed(name):
    assert validate_name(name) == name.strip()


@pytest.mark.parametrize(
    "name, message",
    [
        ("", "Name is required"),
        ("   ", "Name is required"),
        ("J", "Name must be at least 2 characters long"),
        ("x" * 101, "Name is too long"),
        ("Jane <script>", "Name contains invalid characters"),
        ("Jane 2", "Name contains invalid characters"),
    ],
)
def test_invalid_names(name, message):
    with pytest.raises(ValidationError) as exc_info:
        validate_name(name)

    assert str(exc_info.value) == message
    assert exc_info.value.field == "fullName"


def test_attendance_is_case_insensitive():
    assert validate_attendance("yes") == AttendanceStatus.YES
    assert validate_attendance(" Maybe ") == AttendanceStatus.MAYBE
    assert validate_attendance(AttendanceStatus.NO) == AttendanceStatus.NO


def test_unknown_attendance_is_rejected():
    with pytest.raises(ValidationError) as exc_info:
        validate_attendance("PERHAPS")

    assert exc_info.value.field == "attending"


@pytest.mark.parametrize("count", [1, 5, 10])
def test_guest_count_in_range(count):
    assert validate_guest_count(count) == count


@pytest.mark.parametrize("count", [0, 11, -1, True, 2.5])
def test_guest_count_out_of_range(count):
    with pytest.raises(ValidationError):
        validate_guest_count(count)


def test_guest_count_respects_configured_maximum():
    with pytest.raises(ValidationError):
        validate_guest_count(4, max_guests=3)


def test_meal_preference_is_lowercased():
    assert validate_meal_preference("Vegetarian", AttendanceStatus.YES) == "vegetarian"


def test_meal_preference_required_only_when_attending():
    with pytest.raises(ValidationError):
        validate_meal_preference("", AttendanceStatus.YES)

    assert validate_meal_preference("", AttendanceStatus.NO) == ""
    assert validate_meal_preference("", AttendanceStatus.MAYBE) == ""


def test_unknown_meal_preference_is_rejected():
    with pytest.raises(ValidationError):
        validate_meal_preference("pizza", AttendanceStatus.NO)


def test_disabled_meal_preferences_are_ignored():
    assert validate_meal_preference("pizza", AttendanceStatus.YES, enabled=False) == ""


def test_sanitize_text_strips_markup_characters():
    assert sanitize_text('  <b>"Nuts"</b> ') == "bNuts/b"


def test_sanitize_text_enforces_length():
    with pytest.raises(ValidationError) as exc_info:
        sanitize_text("x" * 201, max_length=200, field="allergies")

    assert exc_info.value.field == "allergies"
