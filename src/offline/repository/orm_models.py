from sqlalchemy import JSON, BigInteger, Enum, Integer, LargeBinary, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.config.table_names import TableNames
from src.models.base import Base, TimeStamp
from src.offline.dtos import AttendanceStatus

SCHEMA_VERSION = 1


class PendingRSVP(Base, TimeStamp):
    __tablename__ = TableNames.PENDING_RSVPS.value

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    attending: Mapped[str] = mapped_column(
        Enum(AttendanceStatus, name="attendance_status_enum"), nullable=False
    )
    meal_preference: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    allergies: Mapped[str] = mapped_column(Text, nullable=False, default="")
    additional_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # every guest on a multi-guest RSVP, as fullName / mealPreference / allergies dicts
    guests: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<PendingRSVP {self.id} {self.full_name}>"


class PendingPhoto(Base, TimeStamp):
    __tablename__ = TableNames.PENDING_PHOTOS.value

    file: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    caption: Mapped[str] = mapped_column(Text, nullable=False, default="")
    guest_name: Mapped[str] = mapped_column(String(255), nullable=False)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<PendingPhoto {self.id} {self.filename}>"


class WeddingData(Base, TimeStamp):
    __tablename__ = TableNames.WEDDING_DATA.value

    data: Mapped[dict] = mapped_column(JSON, nullable=True)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)

    def __repr__(self) -> str:
        return f"<WeddingData {self.id}>"


class SchemaMeta(Base):
    __tablename__ = TableNames.SCHEMA_META.value

    version: Mapped[int] = mapped_column(Integer, nullable=False)


class CachedImage(Base, TimeStamp):
    __tablename__ = TableNames.CACHED_IMAGES.value

    # keyed by the image url rather than a generated id
    id: Mapped[str] = mapped_column(String(2048), primary_key=True)
    blob: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)

    def __repr__(self) -> str:
        return f"<CachedImage {self.id}>"
