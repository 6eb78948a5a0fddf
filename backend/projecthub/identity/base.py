from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Any


class IdentityServiceError(RuntimeError):
    """Base error for identity service operations."""


class InvalidCredentialsError(IdentityServiceError):
    """Raised when an email/password pair does not match an account."""


class TokenVerificationError(IdentityServiceError):
    """Raised when a token is malformed, expired or revoked."""


@dataclass(slots=True)
class IdentityUser:
    """Account as known to the identity service."""

    uid: str
    email: str
    display_name: str | None = None


def subject_from_claims(claims: dict[str, Any]) -> str | None:
    """Extract the account id from verified token claims."""
    return claims.get("uid") or claims.get("user_id") or claims.get("sub")


class IdentityService(abc.ABC):
    """Credential management and bearer token issuing/verification."""

    @abc.abstractmethod
    async def create_user(
        self, email: str, password: str, display_name: str
    ) -> IdentityUser:
        """Create an account; raises :class:`IdentityServiceError` on rejection."""

    @abc.abstractmethod
    async def create_token(self, uid: str) -> str:
        """Issue a signed token for ``uid``."""

    @abc.abstractmethod
    async def verify_token(self, token: str) -> dict[str, Any]:
        """Return the token claims; raises :class:`TokenVerificationError`."""

    @abc.abstractmethod
    async def verify_password(self, email: str, password: str) -> str:
        """Return the uid owning the credentials; raises :class:`InvalidCredentialsError`."""
