"""Error types surfaced by the request handlers.

Every error carries the HTTP status it maps to; ``create_app`` registers a
single handler that renders them as ``{"success": false, "error": ...}``.
"""

from __future__ import annotations

from fastapi import status


class ApiError(Exception):
    """Base error for request handling."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RequestValidationFailed(ApiError):
    """Raised when required request fields are missing or malformed."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationFailed(ApiError):
    """Raised for missing, invalid or expired tokens and bad credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ResourceNotFound(ApiError):
    """Raised when a referenced user or project does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class UpstreamServiceError(ApiError):
    """Raised when the document store or identity service fails."""


class StoreUnavailable(UpstreamServiceError):
    """Raised when a store-backed operation runs while the store is disabled."""

    def __init__(self, message: str = "Document store is not available"):
        super().__init__(message)


class UserNotFoundError(ResourceNotFound):
    def __init__(self, user_id: str):
        super().__init__("User not found")
        self.user_id = user_id


class RegistrationFailed(ApiError):
    """Raised when the identity service or store rejects a registration."""

    status_code = status.HTTP_400_BAD_REQUEST
