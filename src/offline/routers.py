from fastapi import APIRouter

from .features.cached_images.router import router as cached_images_router
from .features.offline_status.router import router as offline_status_router
from .features.submit_rsvp.router import router as submit_rsvp_router
from .features.sync_now.router import router as sync_now_router
from .features.upload_photo.router import router as upload_photo_router
from .features.wedding_data.router import router as wedding_data_router

router = APIRouter()

router.include_router(submit_rsvp_router)
router.include_router(upload_photo_router)
router.include_router(offline_status_router)
router.include_router(sync_now_router)
router.include_router(wedding_data_router)
router.include_router(cached_images_router)
