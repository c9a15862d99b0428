"""Composition root of the offline layer.

Nothing here runs at import time: build an ``OfflineService``, ``await
init()`` before use and ``await dispose()`` when done. Tests can run several
isolated instances side by side.
"""

import logging
import time
from typing import Any

import httpx

from src.config.settings import Settings, settings as default_settings
from src.offline.delivery import GraphQLRSVPDelivery, HttpPhotoDelivery, PhotoDelivery, RSVPDelivery
from src.offline.dtos import CachedImageDTO, CachedReferenceDataDTO, Collection, OfflineStatusDTO
from src.offline.network_monitor import NetworkMonitor
from src.offline.notifications import LoggingNotifier, Notifier
from src.offline.repository.store import LocalStore, SqlLocalStore
from src.offline.submission import SubmissionService
from src.offline.sync_queue import SyncQueue

logger = logging.getLogger(__name__)


class OfflineService:
    def __init__(
        self,
        config: Settings = default_settings,
        store: LocalStore | None = None,
        monitor: NetworkMonitor | None = None,
        rsvp_delivery: RSVPDelivery | None = None,
        photo_delivery: PhotoDelivery | None = None,
        notifier: Notifier | None = None,
        http_client_class: type[httpx.AsyncClient] = httpx.AsyncClient,
        start_monitor: bool = True,
    ) -> None:
        self.config = config
        self.store = store or SqlLocalStore(database_url=config.local_database_url)
        self.monitor = monitor or NetworkMonitor(config=config, http_client_class=http_client_class)
        self.notifier = notifier or LoggingNotifier()
        rsvp_delivery = rsvp_delivery or GraphQLRSVPDelivery(
            config=config, http_client_class=http_client_class
        )
        photo_delivery = photo_delivery or HttpPhotoDelivery(
            config=config, http_client_class=http_client_class
        )
        self.queue = SyncQueue(
            store=self.store,
            monitor=self.monitor,
            rsvp_delivery=rsvp_delivery,
            photo_delivery=photo_delivery,
            notifier=self.notifier,
            config=config,
        )
        self.submissions = SubmissionService(
            queue=self.queue,
            monitor=self.monitor,
            rsvp_delivery=rsvp_delivery,
            photo_delivery=photo_delivery,
            config=config,
        )
        self._start_monitor = start_monitor
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def init(self) -> None:
        if self._initialized:
            return
        await self.store.init()
        self.queue.attach()
        if self._start_monitor:
            self.monitor.start()
            # probe once so a reachable server starts us online and drains leftovers
            await self.monitor.handle_online()
        self._initialized = True
        logger.info("Offline service initialized")

    async def dispose(self) -> None:
        if not self._initialized:
            return
        await self.monitor.stop()
        self.queue.detach()
        await self.queue.wait_idle()
        await self.store.dispose()
        self._initialized = False
        logger.info("Offline service disposed")

    async def __aenter__(self) -> "OfflineService":
        await self.init()
        return self

    async def __aexit__(self, *args) -> None:
        await self.dispose()

    # -------------------------------------------------------------------------
    # Cached reference data
    # -------------------------------------------------------------------------

    async def save_wedding_data(self, key: str, data: Any) -> CachedReferenceDataDTO:
        item = CachedReferenceDataDTO(key=key, data=data, timestamp=int(time.time() * 1000))
        await self.store.put(Collection.WEDDING_DATA, item)
        return item

    async def get_wedding_data(self, key: str) -> CachedReferenceDataDTO | None:
        return await self.store.get(Collection.WEDDING_DATA, key)

    async def save_cached_image(
        self, url: str, blob: bytes, content_type: str = "image/jpeg"
    ) -> CachedImageDTO:
        image = CachedImageDTO(
            url=url, blob=blob, content_type=content_type, timestamp=int(time.time() * 1000)
        )
        await self.store.put(Collection.CACHED_IMAGES, image)
        return image

    async def get_cached_image(self, url: str) -> CachedImageDTO | None:
        return await self.store.get(Collection.CACHED_IMAGES, url)

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    async def get_offline_status(self) -> OfflineStatusDTO:
        network = self.monitor.get_status()
        return OfflineStatusDTO(
            is_online=network.is_online,
            is_connecting=network.is_connecting,
            connection_quality=network.connection_quality,
            last_connected=network.last_connected,
            pending_rsvps=await self.store.count(Collection.PENDING_RSVPS),
            pending_photos=await self.store.count(Collection.PENDING_PHOTOS),
            last_sync=self.queue.last_sync,
            failing_items=self.queue.failing_items,
        )
