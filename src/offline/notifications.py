import logging
from typing import Protocol

logger = logging.getLogger(__name__)

BACK_ONLINE = "Back online! Syncing your data..."
WENT_OFFLINE = "You're now offline. Changes will sync when you reconnect."
RSVP_SYNCED = "RSVP synced successfully!"
PHOTO_SYNCED = "Photo uploaded successfully!"
SAVED_OFFLINE = "Saved - will sync when you're back online"
RSVP_REJECTED = "Your RSVP could not be synced. Please check your details and submit it again."
PHOTO_REJECTED = "Your photo could not be uploaded. Please try a different file."


class Notifier(Protocol):
    """User-visible, fire-and-forget notification surface."""

    async def notify(self, message: str) -> None: ...


class LoggingNotifier:
    """Default notifier: writes notifications to the application log."""

    async def notify(self, message: str) -> None:
        logger.info(f"Sync notification: {message}")
