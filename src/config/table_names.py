from enum import Enum


class TableNames(str, Enum):
    PENDING_RSVPS = "pending_rsvps"
    PENDING_PHOTOS = "pending_photos"
    WEDDING_DATA = "wedding_data"
    CACHED_IMAGES = "cached_images"
    SCHEMA_META = "schema_meta"
