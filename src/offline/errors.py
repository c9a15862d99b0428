"""Failure categories of the offline layer.

Callers branch on the exception class, never on the message text.
"""


class OfflineError(Exception):
    """Base class for every error raised by the offline layer."""


class TransientNetworkError(OfflineError):
    """Delivery failed for a reason that may succeed later (timeout, 5xx, connection reset)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class DeliveryRejectedError(OfflineError):
    """The server answered but refused the payload (4xx or a GraphQL validation error)."""

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None) -> None:
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class StorageError(OfflineError):
    """The local store is unavailable or out of quota."""

    def __init__(self, collection: str, operation: str, reason: str) -> None:
        self.collection = collection
        self.operation = operation
        self.reason = reason
        super().__init__(f"Local store {operation} on '{collection}' failed: {reason}")


class ValidationError(OfflineError):
    """Input is malformed and would never be accepted by the server."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)
