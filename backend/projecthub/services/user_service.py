from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from projecthub.backends import Backend
from projecthub.clock import Clock, epoch_millis, isoformat, utcnow
from projecthub.errors import (
    AuthenticationFailed,
    RegistrationFailed,
    StoreUnavailable,
    UpstreamServiceError,
    UserNotFoundError,
)
from projecthub.identity import (
    IdentityService,
    IdentityServiceError,
    subject_from_claims,
)
from projecthub.models.user import PROTECTED_USER_FIELDS, UserRecord, UserRole, UserSettings
from projecthub.repositories.user_repository import UserRepository
from projecthub.store import DocumentStoreError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AuthOutcome:
    """Result of a registration or login."""

    user: UserRecord
    token: str
    mock_mode: bool = False


class UserService:
    """Registration, login, token verification and profile operations."""

    def __init__(
        self,
        backend: Backend,
        *,
        login_verifies_password: bool = True,
        clock: Clock = utcnow,
    ):
        self.backend = backend
        self.login_verifies_password = login_verifies_password
        self.clock = clock

    @property
    def store_available(self) -> bool:
        return self.backend.store_available

    def _repository(self) -> UserRepository:
        if self.backend.store is None:
            raise StoreUnavailable()
        return UserRepository(self.backend.store)

    def _identity(self) -> IdentityService:
        if self.backend.identity is None:
            raise StoreUnavailable()
        return self.backend.identity

    def _mock_outcome(self, email: str, name: str) -> AuthOutcome:
        now = self.clock()
        millis = epoch_millis(now)
        user = UserRecord(
            uid=f"user_{millis}",
            email=email,
            name=name,
            created_at=isoformat(now),
        )
        return AuthOutcome(user=user, token=f"mock_token_{millis}", mock_mode=True)

    async def register(self, email: str, password: str, name: str) -> AuthOutcome:
        logger.info("Registration attempt: email=%s name=%s", email, name)

        if not self.store_available:
            logger.warning("Store not available, creating mock user")
            return self._mock_outcome(email, name)

        repository = self._repository()
        identity = self._identity()
        try:
            account = await identity.create_user(email, password, name)
            logger.info("Identity account created: %s", account.uid)

            timestamp = isoformat(self.clock())
            user = UserRecord(
                uid=account.uid,
                email=email,
                name=name,
                created_at=timestamp,
                last_login=timestamp,
                role=UserRole.USER.value,
                total_projects=0,
                settings=UserSettings(),
                projects=[],
            )
            await repository.create_user(user)
            logger.info("User document saved: %s", user.uid)

            token = await identity.create_token(account.uid)
        except (IdentityServiceError, DocumentStoreError) as exc:
            logger.error("Registration error: %s", exc)
            raise RegistrationFailed(str(exc) or "Registration failed") from exc

        return AuthOutcome(user=user, token=token)

    async def login(self, email: str, password: str) -> AuthOutcome:
        logger.info("Login attempt: %s", email)
        fallback_name = email.split("@")[0]

        if not self.store_available:
            logger.warning("Store not available, creating mock user")
            return self._mock_outcome(email, fallback_name)

        repository = self._repository()
        identity = self._identity()
        try:
            if not self.login_verifies_password:
                # Legacy flow: no password check, token for a synthesized id.
                now = self.clock()
                user = UserRecord(
                    uid=f"user_{epoch_millis(now)}",
                    email=email,
                    name=fallback_name,
                    created_at=isoformat(now),
                )
                return AuthOutcome(user=user, token=await identity.create_token(user.uid))

            uid = await identity.verify_password(email, password)
            timestamp = isoformat(self.clock())
            user = await repository.get_user(uid)
            if user is None:
                user = UserRecord(uid=uid, email=email, name=fallback_name, created_at=timestamp)
            else:
                await repository.update_fields(uid, {"lastLogin": timestamp})
                user.last_login = timestamp
            token = await identity.create_token(uid)
        except (IdentityServiceError, DocumentStoreError, ValidationError) as exc:
            logger.error("Login error: %s", exc)
            raise AuthenticationFailed("Invalid credentials") from exc

        return AuthOutcome(user=user, token=token)

    async def get_user(self, user_id: str) -> UserRecord:
        logger.info("Fetching user: %s", user_id)
        repository = self._repository()
        try:
            user = await repository.get_user(user_id)
        except DocumentStoreError as exc:
            logger.error("Get user error: %s", exc)
            raise UpstreamServiceError(f"Server error: {exc}") from exc
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def list_users(self) -> list[UserRecord]:
        repository = self._repository()
        try:
            return await repository.list_users()
        except DocumentStoreError as exc:
            logger.error("Get users error: %s", exc)
            raise UpstreamServiceError(f"Failed to fetch users: {exc}") from exc

    async def verify_token(self, token: Any) -> UserRecord:
        if not isinstance(token, str) or not token:
            raise AuthenticationFailed("No token provided")
        if not self.store_available:
            raise AuthenticationFailed("Invalid or expired token")

        repository = self._repository()
        try:
            claims = await self._identity().verify_token(token)
            user_id = subject_from_claims(claims)
            if not user_id:
                raise AuthenticationFailed("Invalid or expired token")
            user = await repository.get_user(user_id)
        except (IdentityServiceError, DocumentStoreError, ValidationError) as exc:
            logger.error("Token verification error: %s", exc)
            raise AuthenticationFailed("Invalid or expired token") from exc

        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def update_user(self, user_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        """Merge ``updates`` into the stored user and return the stored document.

        Identity fields (``uid``, ``email``, ``createdAt``) are always dropped.
        """
        logger.info("Updating user: %s", user_id)
        repository = self._repository()
        fields = {
            key: value for key, value in updates.items() if key not in PROTECTED_USER_FIELDS
        }
        fields["updatedAt"] = isoformat(self.clock())

        try:
            await repository.update_fields(user_id, fields)
            document = await repository.get_document(user_id)
        except DocumentStoreError as exc:
            logger.error("Update user error: %s", exc)
            raise UpstreamServiceError(f"Failed to update profile: {exc}") from exc

        if document is None:
            raise UserNotFoundError(user_id)
        return document
