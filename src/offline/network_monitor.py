"""Best-effort view of whether the wedding API is actually reachable.

The platform "offline" signal is trusted as is. The "online" signal is only
believed once a small static resource has been fetched from the server.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import replace
from datetime import UTC, datetime
from typing import Protocol

import httpx

from src.config.settings import settings
from src.offline.dtos import ConnectionQuality, NetworkStatus

logger = logging.getLogger(__name__)

StatusListener = Callable[[NetworkStatus], Awaitable[None]]


class ProbeConfig(Protocol):
    api_base_url: str
    probe_path: str
    probe_timeout: float
    periodic_probe_timeout: float
    probe_interval: float
    fast_connection_threshold_ms: float


class NetworkMonitor:
    def __init__(
        self,
        config: ProbeConfig = settings,
        http_client_class: type[httpx.AsyncClient] = httpx.AsyncClient,
        clock: Callable[[], float] = time.perf_counter,
        initially_online: bool = False,
    ) -> None:
        self._config = config
        self._http_client_class = http_client_class
        self._clock = clock
        self._status = NetworkStatus(
            is_online=initially_online,
            last_connected=datetime.now(UTC) if initially_online else None,
        )
        self._listeners: list[StatusListener] = []
        self._periodic_task: asyncio.Task | None = None
        self._started = False

    @property
    def probe_url(self) -> str:
        return f"{self._config.api_base_url.rstrip('/')}{self._config.probe_path}"

    def get_status(self) -> NetworkStatus:
        return self._status

    @property
    def is_online(self) -> bool:
        return self._status.is_online

    def add_listener(self, listener: StatusListener) -> None:
        """Register a coroutine called on every online/offline transition."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StatusListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def handle_offline(self) -> NetworkStatus:
        was_online = self._status.is_online
        self._status = replace(self._status, is_online=False, is_connecting=False)
        self._cancel_periodic_checks()
        logger.info("Network went offline, entering offline mode")
        if was_online:
            await self._notify_listeners()
        return self._status

    async def handle_online(self) -> NetworkStatus:
        """Confirm an "online" platform event with a reachability probe."""
        self._status = replace(self._status, is_connecting=True)

        rtt_ms = await self._probe(self._config.probe_timeout)
        if rtt_ms is None:
            # False positive, the server is still out of reach
            self._status = replace(self._status, is_connecting=False)
            logger.info("Online event not confirmed by reachability probe")
            return self._status

        was_online = self._status.is_online
        quality = (
            ConnectionQuality.FAST
            if rtt_ms < self._config.fast_connection_threshold_ms
            else ConnectionQuality.SLOW
        )
        self._status = NetworkStatus(
            is_online=True,
            is_connecting=False,
            last_connected=datetime.now(UTC),
            connection_quality=quality,
        )
        logger.info(f"Network reachable ({quality.value}, {rtt_ms:.0f} ms)")
        self._schedule_periodic_checks()
        if not was_online:
            await self._notify_listeners()
        return self._status

    async def check_connectivity(self) -> NetworkStatus:
        """Periodic probe that catches links the OS reports up but the server can't be reached on."""
        if not self._status.is_online:
            return self._status

        rtt_ms = await self._probe(self._config.periodic_probe_timeout)
        if rtt_ms is None:
            logger.warning("Reachability probe failed while online, switching to offline")
            self._status = replace(self._status, is_online=False, is_connecting=False)
            self._cancel_periodic_checks()
            await self._notify_listeners()
        else:
            self._status = replace(self._status, last_connected=datetime.now(UTC))
        return self._status

    def start(self) -> None:
        """Enable the periodic check; the timer only runs while we are online."""
        self._started = True
        self._schedule_periodic_checks()

    async def stop(self) -> None:
        self._started = False
        task = self._periodic_task
        self._cancel_periodic_checks()
        if task is not None and task is not asyncio.current_task():
            try:
                await task
            except asyncio.CancelledError:
                pass

    def _schedule_periodic_checks(self) -> None:
        if not (self._started and self._status.is_online):
            return
        if self._periodic_task is None or self._periodic_task.done():
            self._periodic_task = asyncio.create_task(self._run_periodic_checks())

    def _cancel_periodic_checks(self) -> None:
        task, self._periodic_task = self._periodic_task, None
        # a failing check ends its own loop instead of cancelling itself
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    async def _run_periodic_checks(self) -> None:
        while self._status.is_online:
            await asyncio.sleep(self._config.probe_interval)
            await self.check_connectivity()

    async def _probe(self, timeout: float) -> float | None:
        """Fetch the probe resource and return the round trip in ms, or None on any failure."""
        start = self._clock()
        try:
            async with self._http_client_class(timeout=timeout) as client:
                response = await client.get(self.probe_url, headers={"Cache-Control": "no-cache"})
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.debug(f"Reachability probe to {self.probe_url} failed: {e}")
            return None
        except Exception as e:
            logger.warning(f"Unexpected reachability probe error: {e}")
            return None
        return (self._clock() - start) * 1000

    async def _notify_listeners(self) -> None:
        status = self._status
        for listener in list(self._listeners):
            try:
                await listener(status)
            except Exception as e:
                logger.error(f"Network status listener failed: {e}")
