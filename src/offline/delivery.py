"""Remote delivery of pending items to the wedding API.

Each delivery is a callable so it can be swapped for an in-memory one in
tests. Failures are raised as ``TransientNetworkError`` (worth retrying) or
``DeliveryRejectedError`` (the server refused the payload).
"""

import logging
from typing import Any, Protocol

import httpx

from src.config.settings import settings
from src.offline.dtos import PendingPhotoUploadDTO, PendingRSVPDTO
from src.offline.errors import DeliveryRejectedError, TransientNetworkError

logger = logging.getLogger(__name__)

SUBMIT_RSVP_MUTATION = """
mutation SubmitRSVP($input: RSVPInput!) {
  submitRSVP(input: $input) {
    _id
    fullName
    attending
  }
}
"""

# GraphQL error codes that will never succeed on retry
REJECTION_CODES = {"BAD_USER_INPUT", "GRAPHQL_VALIDATION_FAILED", "FORBIDDEN", "UNAUTHENTICATED"}

# HTTP statuses that are worth retrying
RETRYABLE_STATUSES = {408, 425, 429}


# =============================================================================
# Protocols (interfaces) for dependency injection
# =============================================================================


class RSVPDelivery(Protocol):
    async def __call__(self, rsvp: PendingRSVPDTO) -> None: ...


class PhotoDelivery(Protocol):
    async def __call__(self, photo: PendingPhotoUploadDTO) -> None: ...


class DeliveryConfig(Protocol):
    api_base_url: str
    graphql_path: str
    photo_upload_path: str
    delivery_timeout: float
    api_token: str


# =============================================================================
# Default implementations
# =============================================================================


def raise_for_delivery_status(response: httpx.Response, what: str) -> None:
    status = response.status_code
    if 200 <= status < 300:
        return
    if status >= 500 or status in RETRYABLE_STATUSES:
        raise TransientNetworkError(f"{what} failed with HTTP {status}", status_code=status)
    raise DeliveryRejectedError(f"{what} rejected with HTTP {status}", status_code=status)


class _HttpDelivery:
    def __init__(
        self,
        config: DeliveryConfig = settings,
        http_client_class: type[httpx.AsyncClient] = httpx.AsyncClient,
    ) -> None:
        self._config = config
        self._http_client_class = http_client_class

    def _url(self, path: str) -> str:
        return f"{self._config.api_base_url.rstrip('/')}{path}"

    def _headers(self, item_id: str) -> dict[str, str]:
        headers = {"Idempotency-Key": item_id}
        if self._config.api_token:
            headers["Authorization"] = f"Bearer {self._config.api_token}"
        return headers

    async def _post(self, path: str, item_id: str, **kwargs: Any) -> httpx.Response:
        try:
            async with self._http_client_class(timeout=self._config.delivery_timeout) as client:
                return await client.post(self._url(path), headers=self._headers(item_id), **kwargs)
        except httpx.HTTPError as e:
            raise TransientNetworkError(f"Could not reach {path}: {e}") from e


class GraphQLRSVPDelivery(_HttpDelivery):
    """Submits a pending RSVP through the ``submitRSVP`` GraphQL mutation."""

    async def __call__(self, rsvp: PendingRSVPDTO) -> None:
        response = await self._post(
            self._config.graphql_path,
            rsvp.id,
            json={
                "query": SUBMIT_RSVP_MUTATION,
                "variables": {"input": rsvp.to_graphql_input()},
            },
        )
        raise_for_delivery_status(response, "RSVP submission")

        try:
            payload = response.json()
        except ValueError as e:
            raise TransientNetworkError("RSVP submission returned invalid JSON") from e

        errors = payload.get("errors") if isinstance(payload, dict) else None
        if errors:
            first = errors[0]
            code = (first.get("extensions") or {}).get("code")
            message = first.get("message", "Unknown GraphQL error")
            if code in REJECTION_CODES:
                raise DeliveryRejectedError(message, status_code=response.status_code, code=code)
            raise TransientNetworkError(message, status_code=response.status_code)

        logger.debug(f"RSVP {rsvp.id} accepted by server")


class HttpPhotoDelivery(_HttpDelivery):
    """Uploads a pending photo as multipart form data."""

    async def __call__(self, photo: PendingPhotoUploadDTO) -> None:
        response = await self._post(
            self._config.photo_upload_path,
            photo.id,
            files={"photo": (photo.filename, photo.file, photo.content_type)},
            data={"caption": photo.caption, "guestName": photo.guest_name},
        )
        raise_for_delivery_status(response, "Photo upload")
        logger.debug(f"Photo {photo.id} accepted by server")
