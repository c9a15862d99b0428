"""CLI commands for the wedding offline sync queue."""

import asyncio

import typer

from src.config.logging import setup_logging
from src.config.settings import settings
from src.offline.dtos import SYNCABLE_COLLECTIONS, AttendanceStatus, Collection, PendingRSVPDTO
from src.offline.errors import DeliveryRejectedError, StorageError, ValidationError
from src.offline.service import OfflineService

app = typer.Typer(help="CLI commands for the wedding offline sync queue")


def _service() -> OfflineService:
    # one-shot commands probe explicitly instead of running the periodic check
    return OfflineService(config=settings, start_monitor=False)


def _fail(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED)
    raise typer.Exit(1)


@app.callback()
def main():
    setup_logging()


@app.command()
def status(
    probe: bool = typer.Option(
        False,
        "--probe",
        "-p",
        help="Check the wedding API is reachable before reporting",
    ),
):
    """Show connection state and how many items are waiting to sync."""

    async def _status():
        async with _service() as service:
            if probe:
                await service.monitor.handle_online()
            return await service.get_offline_status()

    try:
        offline_status = asyncio.run(_status())
    except StorageError as e:
        _fail(str(e))

    color = typer.colors.GREEN if offline_status.is_online else typer.colors.YELLOW
    typer.secho("Online" if offline_status.is_online else "Offline", fg=color)
    typer.secho(f"  Connection: {offline_status.connection_quality.value}", fg=typer.colors.BLUE)
    if offline_status.last_connected:
        typer.secho(f"  Last connected: {offline_status.last_connected}", fg=typer.colors.BLUE)
    typer.secho(f"  Pending RSVPs: {offline_status.pending_rsvps}", fg=typer.colors.CYAN)
    typer.secho(f"  Pending photos: {offline_status.pending_photos}", fg=typer.colors.CYAN)


@app.command()
def sync(
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Drain even if the reachability probe fails",
    ),
):
    """Deliver every pending RSVP and photo to the wedding API."""

    async def _sync():
        async with _service() as service:
            network = await service.monitor.handle_online()
            if not network.is_online and not force:
                return None
            # a confirmed reconnect already scheduled drains; let them finish first
            await service.queue.wait_idle()
            return await service.queue.drain_all()

    results = asyncio.run(_sync())
    if results is None:
        _fail(f"Wedding API at {settings.api_base_url} is not reachable, nothing was sent")

    for result in results:
        typer.secho(f"{result.collection.value}:", fg=typer.colors.GREEN)
        typer.secho(f"  Delivered: {len(result.delivered)}", fg=typer.colors.BLUE)
        if result.failed:
            typer.secho(f"  Failed: {', '.join(result.failed)}", fg=typer.colors.RED)
        typer.secho(f"  Remaining: {result.remaining}", fg=typer.colors.CYAN)


@app.command()
def pending(
    collection: Collection = typer.Argument(
        Collection.PENDING_RSVPS,
        help="Queue to list",
    ),
):
    """List queued items without their payloads."""
    if collection not in SYNCABLE_COLLECTIONS:
        _fail(f"'{collection.value}' is not a sync queue")

    async def _pending():
        async with _service() as service:
            return await service.store.get_all(collection)

    items = asyncio.run(_pending())
    if not items:
        typer.secho("Nothing waiting to sync", fg=typer.colors.GREEN)
        return

    for item in items:
        label = item.full_name if isinstance(item, PendingRSVPDTO) else item.filename
        typer.secho(f"  - {item.id} {label} ({item.timestamp})", fg=typer.colors.BLUE)


@app.command()
def queue_rsvp(
    full_name: str = typer.Argument(
        ...,
        help="Guest full name",
    ),
    attending: AttendanceStatus = typer.Option(
        AttendanceStatus.YES,
        "--attending",
        "-a",
        help="YES, NO or MAYBE",
    ),
    meal_preference: str = typer.Option(
        "",
        "--meal",
        "-m",
        help="Meal choice, required when attending",
    ),
    allergies: str = typer.Option(
        "",
        "--allergies",
        help="Allergies or dietary notes",
    ),
    notes: str = typer.Option(
        "",
        "--notes",
        "-n",
        help="Additional notes for the couple",
    ),
    offline: bool = typer.Option(
        False,
        "--offline",
        help="Skip the reachability probe and always queue",
    ),
):
    """Submit an RSVP, queueing it locally when the wedding API is out of reach."""

    async def _queue_rsvp():
        async with _service() as service:
            if not offline:
                await service.monitor.handle_online()
            result = await service.submissions.submit_rsvp(
                full_name=full_name,
                attending=attending,
                meal_preference=meal_preference,
                allergies=allergies,
                additional_notes=notes,
            )
            await service.queue.wait_idle()
            return result

    try:
        result = asyncio.run(_queue_rsvp())
    except ValidationError as e:
        _fail(f"{e.field}: {e}" if e.field else str(e))
    except DeliveryRejectedError as e:
        _fail(f"Rejected by the wedding API: {e}")
    except StorageError as e:
        _fail(str(e))

    typer.secho(result.message, fg=typer.colors.GREEN)
    typer.secho(f"  Status: {result.status.value}", fg=typer.colors.BLUE)
    typer.secho(f"  Item ID: {result.item_id}", fg=typer.colors.CYAN)


@app.command()
def probe():
    """Check whether the wedding API is reachable, syncing pending items if it is."""

    async def _probe():
        async with _service() as service:
            network = await service.monitor.handle_online()
            await service.queue.wait_idle()
            return network

    network = asyncio.run(_probe())
    if not network.is_online:
        _fail(f"Wedding API at {settings.api_base_url} is not reachable")

    typer.secho("Wedding API reachable", fg=typer.colors.GREEN)
    typer.secho(f"  Connection: {network.connection_quality.value}", fg=typer.colors.BLUE)


if __name__ == "__main__":
    app()
