from fastapi import HTTPException, Request

from src.offline.service import OfflineService


def get_offline_service(request: Request) -> OfflineService:
    """Dependency to get the offline service created in the app lifespan. Override in tests."""
    service = getattr(request.app.state, "offline_service", None)
    if service is None or not service.initialized:
        raise HTTPException(status_code=503, detail="Offline service is not ready")
    return service
