from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class Collection(str, Enum):
    """Independent keyed namespaces of the local store."""

    PENDING_RSVPS = "pendingRSVPs"
    PENDING_PHOTOS = "pendingPhotos"
    WEDDING_DATA = "weddingData"
    CACHED_IMAGES = "cachedImages"


# Collections the sync queue is allowed to drain
SYNCABLE_COLLECTIONS = (Collection.PENDING_RSVPS, Collection.PENDING_PHOTOS)


class AttendanceStatus(str, Enum):
    YES = "YES"
    NO = "NO"
    MAYBE = "MAYBE"


class ConnectionQuality(str, Enum):
    FAST = "fast"
    SLOW = "slow"
    UNKNOWN = "unknown"


class SubmissionStatus(str, Enum):
    SUBMITTED = "submitted"
    QUEUED = "queued"


@dataclass(frozen=True)
class GuestDTO:
    """One person covered by an RSVP."""

    full_name: str
    meal_preference: str = ""
    allergies: str = ""

    def to_graphql_input(self) -> dict[str, str]:
        guest = {"fullName": self.full_name, "mealPreference": self.meal_preference}
        if self.allergies:
            guest["allergies"] = self.allergies
        return guest


@dataclass(frozen=True)
class PendingRSVPDTO:
    """RSVP saved locally until the server acknowledges it.

    The top-level name, meal and allergies describe the primary guest. RSVPs
    built from the multi-guest form also carry every guest in ``guests``.
    """

    id: str
    full_name: str
    attending: AttendanceStatus
    meal_preference: str
    allergies: str
    additional_notes: str
    timestamp: int  # epoch milliseconds
    guests: tuple[GuestDTO, ...] = ()

    def to_graphql_input(self) -> dict[str, Any]:
        rsvp_input: dict[str, Any] = {
            "fullName": self.full_name,
            "attending": self.attending.value,
            "mealPreference": self.meal_preference,
            "allergies": self.allergies,
            "additionalNotes": self.additional_notes,
        }
        if self.guests:
            rsvp_input["guestCount"] = len(self.guests)
            rsvp_input["guests"] = [guest.to_graphql_input() for guest in self.guests]
        return rsvp_input


@dataclass(frozen=True)
class PendingPhotoUploadDTO:
    """Photo upload saved locally until the server acknowledges it."""

    id: str
    file: bytes
    caption: str
    guest_name: str
    timestamp: int
    filename: str = "photo.jpg"
    content_type: str = "image/jpeg"

    def __repr__(self) -> str:
        # keep image bytes out of logs
        return (
            f"PendingPhotoUploadDTO(id={self.id!r}, filename={self.filename!r}, "
            f"size={len(self.file)}, guest_name={self.guest_name!r})"
        )


@dataclass(frozen=True)
class CachedReferenceDataDTO:
    """Last known good copy of a piece of wedding data."""

    key: str
    data: Any
    timestamp: int

    @property
    def id(self) -> str:
        return self.key


@dataclass(frozen=True)
class CachedImageDTO:
    """Image bytes cached by their source url for offline viewing."""

    url: str
    blob: bytes
    timestamp: int
    content_type: str = "image/jpeg"

    @property
    def id(self) -> str:
        return self.url

    def __repr__(self) -> str:
        return f"CachedImageDTO(url={self.url!r}, size={len(self.blob)}, timestamp={self.timestamp})"


PendingItem = PendingRSVPDTO | PendingPhotoUploadDTO
StoredItem = PendingRSVPDTO | PendingPhotoUploadDTO | CachedReferenceDataDTO | CachedImageDTO


@dataclass(frozen=True)
class NetworkStatus:
    is_online: bool = False
    is_connecting: bool = False
    last_connected: datetime | None = None
    connection_quality: ConnectionQuality = ConnectionQuality.UNKNOWN


@dataclass(frozen=True)
class DrainResultDTO:
    collection: Collection
    delivered: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    remaining: int = 0
    skipped: bool = False


@dataclass(frozen=True)
class SubmissionResultDTO:
    status: SubmissionStatus
    message: str
    item_id: str | None = None


@dataclass(frozen=True)
class OfflineStatusDTO:
    is_online: bool
    is_connecting: bool
    connection_quality: ConnectionQuality
    last_connected: datetime | None
    pending_rsvps: int
    pending_photos: int
    last_sync: datetime | None
    failing_items: dict[str, int] = field(default_factory=dict)
