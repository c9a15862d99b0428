"""Local persistent store - keyed collections that survive restarts.

Read and write operations return DTOs, never ORM models.
"""

import contextlib
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from src.config.database import async_session_manager, create_engine, create_session_maker
from src.config.settings import settings
from src.config.table_names import TableNames
from src.models.base import BaseModel
from src.offline.dtos import (
    AttendanceStatus,
    CachedImageDTO,
    CachedReferenceDataDTO,
    Collection,
    GuestDTO,
    PendingPhotoUploadDTO,
    PendingRSVPDTO,
    StoredItem,
)
from src.offline.errors import StorageError
from src.offline.repository.orm_models import (
    SCHEMA_VERSION,
    CachedImage,
    PendingPhoto,
    PendingRSVP,
    SchemaMeta,
    WeddingData,
)

logger = logging.getLogger(__name__)

SCHEMA_META_ID = "schema"


class LocalStore(ABC):
    """Keyed upsert/lookup/scan/delete over independent collections."""

    async def init(self) -> None:
        """Prepare the underlying engine. Safe to call more than once."""

    async def dispose(self) -> None:
        """Release the underlying engine."""

    @abstractmethod
    async def put(self, collection: Collection, item: StoredItem) -> None:
        raise NotImplementedError

    @abstractmethod
    async def get(self, collection: Collection, key: str) -> StoredItem | None:
        raise NotImplementedError

    @abstractmethod
    async def get_all(self, collection: Collection) -> list[StoredItem]:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, collection: Collection, key: str) -> None:
        raise NotImplementedError

    async def count(self, collection: Collection) -> int:
        return len(await self.get_all(collection))


@dataclass(frozen=True)
class _Mapping:
    orm_class: type
    to_orm: Callable[[StoredItem], object]
    to_dto: Callable[[object], StoredItem]


def _rsvp_to_orm(item: PendingRSVPDTO) -> PendingRSVP:
    return PendingRSVP(
        id=item.id,
        full_name=item.full_name,
        attending=item.attending,
        meal_preference=item.meal_preference,
        allergies=item.allergies,
        additional_notes=item.additional_notes,
        guests=[guest.to_graphql_input() for guest in item.guests],
        timestamp=item.timestamp,
    )


def _rsvp_to_dto(row: PendingRSVP) -> PendingRSVPDTO:
    return PendingRSVPDTO(
        id=row.id,
        full_name=row.full_name,
        attending=AttendanceStatus(row.attending),
        meal_preference=row.meal_preference,
        allergies=row.allergies,
        additional_notes=row.additional_notes,
        timestamp=row.timestamp,
        guests=tuple(
            GuestDTO(
                full_name=guest["fullName"],
                meal_preference=guest.get("mealPreference", ""),
                allergies=guest.get("allergies", ""),
            )
            for guest in row.guests or []
        ),
    )


def _photo_to_orm(item: PendingPhotoUploadDTO) -> PendingPhoto:
    return PendingPhoto(
        id=item.id,
        file=item.file,
        filename=item.filename,
        content_type=item.content_type,
        caption=item.caption,
        guest_name=item.guest_name,
        timestamp=item.timestamp,
    )


def _photo_to_dto(row: PendingPhoto) -> PendingPhotoUploadDTO:
    return PendingPhotoUploadDTO(
        id=row.id,
        file=row.file,
        filename=row.filename,
        content_type=row.content_type,
        caption=row.caption,
        guest_name=row.guest_name,
        timestamp=row.timestamp,
    )


def _wedding_data_to_orm(item: CachedReferenceDataDTO) -> WeddingData:
    return WeddingData(id=item.key, data=item.data, timestamp=item.timestamp)


def _wedding_data_to_dto(row: WeddingData) -> CachedReferenceDataDTO:
    return CachedReferenceDataDTO(key=row.id, data=row.data, timestamp=row.timestamp)


def _image_to_orm(item: CachedImageDTO) -> CachedImage:
    return CachedImage(
        id=item.url,
        blob=item.blob,
        content_type=item.content_type,
        timestamp=item.timestamp,
    )


def _image_to_dto(row: CachedImage) -> CachedImageDTO:
    return CachedImageDTO(
        url=row.id,
        blob=row.blob,
        content_type=row.content_type,
        timestamp=row.timestamp,
    )


MAPPINGS: dict[Collection, _Mapping] = {
    Collection.PENDING_RSVPS: _Mapping(PendingRSVP, _rsvp_to_orm, _rsvp_to_dto),
    Collection.PENDING_PHOTOS: _Mapping(PendingPhoto, _photo_to_orm, _photo_to_dto),
    Collection.WEDDING_DATA: _Mapping(WeddingData, _wedding_data_to_orm, _wedding_data_to_dto),
    Collection.CACHED_IMAGES: _Mapping(CachedImage, _image_to_orm, _image_to_dto),
}

ITEM_TYPES: dict[Collection, type] = {
    Collection.PENDING_RSVPS: PendingRSVPDTO,
    Collection.PENDING_PHOTOS: PendingPhotoUploadDTO,
    Collection.WEDDING_DATA: CachedReferenceDataDTO,
    Collection.CACHED_IMAGES: CachedImageDTO,
}


def check_item_type(collection: Collection, item: StoredItem) -> None:
    expected = ITEM_TYPES[collection]
    if not isinstance(item, expected):
        raise TypeError(
            f"Collection '{collection.value}' stores {expected.__name__}, "
            f"got {type(item).__name__}"
        )


@contextlib.contextmanager
def _storage_errors(collection: Collection | str, operation: str) -> Iterator[None]:
    try:
        yield
    except (SQLAlchemyError, OSError) as e:
        name = collection.value if isinstance(collection, Collection) else collection
        logger.error(f"Local store {operation} on '{name}' failed: {e}")
        raise StorageError(name, operation, str(e)) from e


class SqlLocalStore(LocalStore):
    """SQLAlchemy implementation, SQLite through aiosqlite by default."""

    def __init__(
        self,
        database_url: str | None = None,
        engine: AsyncEngine | None = None,
    ) -> None:
        self._database_url = database_url or settings.local_database_url
        self._engine = engine
        self._session_maker = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = create_engine(self._database_url)
        return self._engine

    def _sessions(self):
        if self._session_maker is None:
            self._session_maker = create_session_maker(self.engine)
        return async_session_manager(self._session_maker)

    async def init(self) -> None:
        with _storage_errors(TableNames.SCHEMA_META.value, "init"):
            async with self.engine.begin() as conn:
                await conn.run_sync(BaseModel.metadata.create_all)
            async with self._sessions() as session:
                await session.merge(SchemaMeta(id=SCHEMA_META_ID, version=SCHEMA_VERSION))
        logger.debug(f"Local store ready at {self._database_url} (schema v{SCHEMA_VERSION})")

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_maker = None

    async def schema_version(self) -> int | None:
        with _storage_errors(TableNames.SCHEMA_META.value, "get"):
            async with self._sessions() as session:
                meta = await session.get(SchemaMeta, SCHEMA_META_ID)
                return meta.version if meta else None

    async def put(self, collection: Collection, item: StoredItem) -> None:
        check_item_type(collection, item)
        mapping = MAPPINGS[collection]
        with _storage_errors(collection, "put"):
            async with self._sessions() as session:
                await session.merge(mapping.to_orm(item))

    async def get(self, collection: Collection, key: str) -> StoredItem | None:
        mapping = MAPPINGS[collection]
        with _storage_errors(collection, "get"):
            async with self._sessions() as session:
                row = await session.get(mapping.orm_class, key)
                return mapping.to_dto(row) if row else None

    async def get_all(self, collection: Collection) -> list[StoredItem]:
        mapping = MAPPINGS[collection]
        orm_class = mapping.orm_class
        stmt = select(orm_class).order_by(orm_class.timestamp, orm_class.id)
        with _storage_errors(collection, "get_all"):
            async with self._sessions() as session:
                result = await session.execute(stmt)
                return [mapping.to_dto(row) for row in result.scalars().all()]

    async def delete(self, collection: Collection, key: str) -> None:
        orm_class = MAPPINGS[collection].orm_class
        with _storage_errors(collection, "delete"):
            async with self._sessions() as session:
                row = await session.get(orm_class, key)
                if row is not None:
                    await session.delete(row)

    async def count(self, collection: Collection) -> int:
        orm_class = MAPPINGS[collection].orm_class
        with _storage_errors(collection, "count"):
            async with self._sessions() as session:
                result = await session.execute(select(func.count()).select_from(orm_class))
                return result.scalar_one()


