"""Sync queue - delivers locally queued items once the server is reachable.

Per item: queued -> submitting -> delivered (deleted) or queued again. There
is no terminal failed state; an item stays in the store until a delivery
attempt succeeds.
"""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Protocol

import sentry_sdk

from src.config.settings import settings
from src.offline.delivery import PhotoDelivery, RSVPDelivery
from src.offline.dtos import (
    SYNCABLE_COLLECTIONS,
    Collection,
    DrainResultDTO,
    NetworkStatus,
    PendingItem,
)
from src.offline.errors import DeliveryRejectedError, StorageError, TransientNetworkError
from src.offline.network_monitor import NetworkMonitor
from src.offline.notifications import (
    BACK_ONLINE,
    PHOTO_REJECTED,
    PHOTO_SYNCED,
    RSVP_REJECTED,
    RSVP_SYNCED,
    WENT_OFFLINE,
    LoggingNotifier,
    Notifier,
)
from src.offline.repository.store import LocalStore
from src.offline.validation import validate_pending_item

logger = logging.getLogger(__name__)

SUCCESS_MESSAGES = {
    Collection.PENDING_RSVPS: RSVP_SYNCED,
    Collection.PENDING_PHOTOS: PHOTO_SYNCED,
}

REJECTED_MESSAGES = {
    Collection.PENDING_RSVPS: RSVP_REJECTED,
    Collection.PENDING_PHOTOS: PHOTO_REJECTED,
}


class SyncConfig(Protocol):
    delivery_timeout: float
    meal_preferences_enabled: bool
    max_photo_bytes: int


class SyncQueue:
    def __init__(
        self,
        store: LocalStore,
        monitor: NetworkMonitor,
        rsvp_delivery: RSVPDelivery,
        photo_delivery: PhotoDelivery,
        notifier: Notifier | None = None,
        config: SyncConfig = settings,
    ) -> None:
        self._store = store
        self._monitor = monitor
        self._deliveries = {
            Collection.PENDING_RSVPS: rsvp_delivery,
            Collection.PENDING_PHOTOS: photo_delivery,
        }
        self._notifier = notifier or LoggingNotifier()
        self._config = config

        self._locks = {collection: asyncio.Lock() for collection in SYNCABLE_COLLECTIONS}
        self._rerun_requested = {collection: False for collection in SYNCABLE_COLLECTIONS}
        self._background: set[asyncio.Task] = set()
        # failed attempts per item id, for status reporting only
        self._failures: dict[str, int] = {}
        self._rejections_reported: set[str] = set()
        self.last_sync: datetime | None = None

    @property
    def failing_items(self) -> dict[str, int]:
        return dict(self._failures)

    def attach(self) -> None:
        """Start draining automatically on confirmed reconnects."""
        self._monitor.add_listener(self._on_network_change)

    def detach(self) -> None:
        self._monitor.remove_listener(self._on_network_change)

    async def enqueue(self, collection: Collection, item: PendingItem) -> None:
        """Persist an item, then kick off a background drain if we are online.

        Raises ``ValidationError`` for items the server could never accept and
        ``StorageError`` when the local write fails.
        """
        validate_pending_item(collection, item, self._config)
        await self._store.put(collection, item)
        logger.info(f"Queued {collection.value} item {item.id}")

        if self._monitor.is_online:
            self.schedule_drain(collection)

    def schedule_drain(self, collection: Collection) -> asyncio.Task:
        task = asyncio.create_task(self.drain(collection))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def drain(self, collection: Collection) -> DrainResultDTO:
        """Deliver every pending item of ``collection`` one at a time. Never raises."""
        if collection not in self._locks:
            raise ValueError(f"Collection '{collection.value}' is not synced")

        lock = self._locks[collection]
        if lock.locked():
            # the running drain picks up anything new before it returns
            self._rerun_requested[collection] = True
            logger.debug(f"Drain of {collection.value} already running, re-check requested")
            return DrainResultDTO(collection=collection, skipped=True)

        async with lock:
            attempted: set[str] = set()
            delivered: list[str] = []
            failed: list[str] = []
            while True:
                self._rerun_requested[collection] = False
                run_delivered, run_failed = await self._drain_once(collection, attempted)
                delivered.extend(run_delivered)
                failed.extend(run_failed)
                remaining = await self._remaining(collection)
                # no await between this check and releasing the lock
                if not self._rerun_requested[collection]:
                    break

        if delivered:
            self.last_sync = datetime.now(UTC)
        if delivered or failed:
            logger.info(
                f"Drained {collection.value}: {len(delivered)} delivered, "
                f"{len(failed)} failed, {remaining} remaining"
            )
        return DrainResultDTO(
            collection=collection,
            delivered=delivered,
            failed=failed,
            remaining=remaining,
        )

    async def drain_all(self) -> list[DrainResultDTO]:
        return [await self.drain(collection) for collection in SYNCABLE_COLLECTIONS]

    async def wait_idle(self) -> None:
        """Wait for every background drain started so far."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def _drain_once(
        self, collection: Collection, attempted: set[str]
    ) -> tuple[list[str], list[str]]:
        delivered: list[str] = []
        failed: list[str] = []

        try:
            items = await self._store.get_all(collection)
        except StorageError as e:
            logger.error(f"Cannot read {collection.value} for sync: {e}")
            return delivered, failed

        deliver = self._deliveries[collection]
        for item in items:
            if item.id in attempted:
                continue
            attempted.add(item.id)

            if await self._deliver_one(collection, deliver, item):
                delivered.append(item.id)
            else:
                failed.append(item.id)

        return delivered, failed

    async def _deliver_one(self, collection: Collection, deliver, item: PendingItem) -> bool:
        try:
            await asyncio.wait_for(deliver(item), timeout=self._config.delivery_timeout)
        except (TransientNetworkError, asyncio.TimeoutError) as e:
            logger.warning(f"Failed to sync {collection.value} item {item.id}, will retry: {e!r}")
            self._record_failure(item.id)
            return False
        except DeliveryRejectedError as e:
            logger.error(f"Server rejected {collection.value} item {item.id}: {e}")
            self._record_failure(item.id)
            if item.id not in self._rejections_reported:
                self._rejections_reported.add(item.id)
                sentry_sdk.capture_exception(e)
                await self._notify(REJECTED_MESSAGES[collection])
            return False
        except Exception as e:
            logger.exception(f"Unexpected error syncing {collection.value} item {item.id}")
            sentry_sdk.capture_exception(e)
            self._record_failure(item.id)
            return False

        try:
            await self._store.delete(collection, item.id)
        except StorageError as e:
            # delivered but still stored; the idempotency key covers the resend
            logger.error(f"Delivered {item.id} but could not remove it from the queue: {e}")
            self._record_failure(item.id)
            return False

        self._failures.pop(item.id, None)
        self._rejections_reported.discard(item.id)
        await self._notify(SUCCESS_MESSAGES[collection])
        return True

    def _record_failure(self, item_id: str) -> None:
        self._failures[item_id] = self._failures.get(item_id, 0) + 1

    async def _remaining(self, collection: Collection) -> int:
        try:
            return await self._store.count(collection)
        except StorageError:
            return -1

    async def _notify(self, message: str) -> None:
        try:
            await self._notifier.notify(message)
        except Exception as e:
            logger.error(f"Notification failed: {e}")

    async def _on_network_change(self, status: NetworkStatus) -> None:
        if status.is_online:
            logger.info("Network came back online, syncing pending data")
            await self._notify(BACK_ONLINE)
            for collection in SYNCABLE_COLLECTIONS:
                self.schedule_drain(collection)
        else:
            await self._notify(WENT_OFFLINE)
