"""Submission surface used by the RSVP form and the photo uploader.

A submission is tried directly first. When that is impossible (offline) or
fails for a transient reason, the item is handed to the sync queue and the
guest is told it will sync later instead of seeing an error.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from uuid import uuid4

from src.config.settings import settings
from src.offline.delivery import PhotoDelivery, RSVPDelivery
from src.offline.dtos import (
    AttendanceStatus,
    Collection,
    PendingItem,
    PendingPhotoUploadDTO,
    PendingRSVPDTO,
    SubmissionResultDTO,
    SubmissionStatus,
)
from src.offline.errors import DeliveryRejectedError, TransientNetworkError, ValidationError
from src.offline.network_monitor import NetworkMonitor
from src.offline.notifications import SAVED_OFFLINE
from src.offline.sync_queue import SyncConfig, SyncQueue
from src.offline.validation import validate_pending_item
from src.rsvp.form import RSVPFormState

logger = logging.getLogger(__name__)

SUBMITTED_MESSAGES = {
    Collection.PENDING_RSVPS: "RSVP submitted!",
    Collection.PENDING_PHOTOS: "Photo uploaded!",
}


def now_ms() -> int:
    return int(time.time() * 1000)


def new_item_id() -> str:
    return str(uuid4())


class SubmissionService:
    def __init__(
        self,
        queue: SyncQueue,
        monitor: NetworkMonitor,
        rsvp_delivery: RSVPDelivery,
        photo_delivery: PhotoDelivery,
        config: SyncConfig = settings,
        id_factory: Callable[[], str] = new_item_id,
        clock_ms: Callable[[], int] = now_ms,
    ) -> None:
        self._queue = queue
        self._monitor = monitor
        self._deliveries = {
            Collection.PENDING_RSVPS: rsvp_delivery,
            Collection.PENDING_PHOTOS: photo_delivery,
        }
        self._config = config
        self._id_factory = id_factory
        self._clock_ms = clock_ms

    async def submit_rsvp(
        self,
        full_name: str,
        attending: AttendanceStatus,
        meal_preference: str = "",
        allergies: str = "",
        additional_notes: str = "",
    ) -> SubmissionResultDTO:
        rsvp = PendingRSVPDTO(
            id=self._id_factory(),
            full_name=full_name.strip(),
            attending=attending,
            meal_preference=meal_preference.strip().lower(),
            allergies=allergies.strip(),
            additional_notes=additional_notes.strip(),
            timestamp=self._clock_ms(),
        )
        return await self._submit(Collection.PENDING_RSVPS, rsvp)

    async def submit_form(self, form: RSVPFormState) -> SubmissionResultDTO:
        """Validate a multi-guest form and submit every guest on it."""
        errors = form.validate()
        if errors:
            field, message = next(iter(errors.items()))
            raise ValidationError(message, field=field)

        rsvp = form.to_pending_rsvp(item_id=self._id_factory(), timestamp=self._clock_ms())
        return await self._submit(Collection.PENDING_RSVPS, rsvp)

    async def upload_photo(
        self,
        file: bytes,
        guest_name: str,
        caption: str = "",
        filename: str = "photo.jpg",
        content_type: str = "image/jpeg",
    ) -> SubmissionResultDTO:
        photo = PendingPhotoUploadDTO(
            id=self._id_factory(),
            file=file,
            caption=caption.strip(),
            guest_name=guest_name.strip(),
            timestamp=self._clock_ms(),
            filename=filename,
            content_type=content_type,
        )
        return await self._submit(Collection.PENDING_PHOTOS, photo)

    async def _submit(self, collection: Collection, item: PendingItem) -> SubmissionResultDTO:
        validate_pending_item(collection, item, self._config)

        if self._monitor.is_online:
            try:
                await asyncio.wait_for(
                    self._deliveries[collection](item), timeout=self._config.delivery_timeout
                )
            except DeliveryRejectedError:
                # the server answered; queueing would only repeat the refusal
                raise
            except (TransientNetworkError, asyncio.TimeoutError) as e:
                logger.info(f"Direct {collection.value} submission failed, queueing {item.id}: {e!r}")
            except Exception as e:
                logger.exception(f"Unexpected error submitting {collection.value} item {item.id}: {e}")
            else:
                return SubmissionResultDTO(
                    status=SubmissionStatus.SUBMITTED,
                    message=SUBMITTED_MESSAGES[collection],
                    item_id=item.id,
                )

        await self._queue.enqueue(collection, item)
        return SubmissionResultDTO(
            status=SubmissionStatus.QUEUED,
            message=SAVED_OFFLINE,
            item_id=item.id,
        )
