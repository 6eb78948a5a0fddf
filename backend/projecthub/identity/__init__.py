"""Identity service adapters.

- ``LocalIdentityService``: SQL credential table and HS256 tokens (local.py)
- ``FirebaseIdentityService``: Firebase Authentication (firebase.py)
"""

from .base import (
    IdentityService,
    IdentityServiceError,
    IdentityUser,
    InvalidCredentialsError,
    TokenVerificationError,
    subject_from_claims,
)
from .local import LocalIdentityService

__all__ = [
    "IdentityService",
    "IdentityUser",
    "LocalIdentityService",
    "subject_from_claims",
    # Exceptions
    "IdentityServiceError",
    "InvalidCredentialsError",
    "TokenVerificationError",
]
