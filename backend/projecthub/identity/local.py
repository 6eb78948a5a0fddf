from __future__ import annotations

import asyncio
import time
from typing import Any
from uuid import uuid4

import bcrypt
import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from projecthub.models.credential_db import CredentialDB

from .base import (
    IdentityService,
    IdentityServiceError,
    IdentityUser,
    InvalidCredentialsError,
    TokenVerificationError,
)

_DEFAULT_HASH_ROUNDS = 12
_MIN_PASSWORD_LENGTH = 6
# bcrypt only accepts passwords up to 72 bytes
_MAX_PASSWORD_BYTES = 72
_TOKEN_ALGORITHM = "HS256"


def hash_password(password: str, rounds: int = _DEFAULT_HASH_ROUNDS) -> str:
    """Hash a password with bcrypt."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password_hash(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


class LocalIdentityService(IdentityService):
    """Identity service keeping credentials in the local SQL database.

    Tokens are HS256 JWTs signed with the configured secret.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        secret_key: str,
        token_ttl_seconds: int = 3600,
        hash_rounds: int = _DEFAULT_HASH_ROUNDS,
    ):
        self.session_factory = session_factory
        self.secret_key = secret_key
        self.token_ttl_seconds = token_ttl_seconds
        self.hash_rounds = hash_rounds

    async def _get_by_email(self, email: str) -> CredentialDB | None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(CredentialDB).where(CredentialDB.email == email.lower())
            )
            return result.scalar_one_or_none()

    async def create_user(
        self, email: str, password: str, display_name: str
    ) -> IdentityUser:
        if "@" not in email:
            raise IdentityServiceError("The email address is improperly formatted.")
        if len(password) < _MIN_PASSWORD_LENGTH:
            raise IdentityServiceError(
                f"The password must be a string with at least {_MIN_PASSWORD_LENGTH} characters."
            )
        if len(password.encode("utf-8")) > _MAX_PASSWORD_BYTES:
            raise IdentityServiceError(
                f"The password must be at most {_MAX_PASSWORD_BYTES} bytes long."
            )

        password_hash = await asyncio.to_thread(hash_password, password, self.hash_rounds)
        credential = CredentialDB(
            uid=uuid4().hex,
            email=email.lower(),
            display_name=display_name,
            password_hash=password_hash,
            email_verified=False,
        )
        try:
            async with self.session_factory() as session:
                session.add(credential)
                await session.commit()
        except IntegrityError as exc:
            raise IdentityServiceError(
                "The email address is already in use by another account."
            ) from exc
        except SQLAlchemyError as exc:
            raise IdentityServiceError(str(exc)) from exc

        return IdentityUser(uid=credential.uid, email=email, display_name=display_name)

    async def create_token(self, uid: str) -> str:
        issued_at = int(time.time())
        payload = {
            "sub": uid,
            "uid": uid,
            "iat": issued_at,
            "exp": issued_at + self.token_ttl_seconds,
        }
        return jwt.encode(payload, self.secret_key, algorithm=_TOKEN_ALGORITHM)

    async def verify_token(self, token: str) -> dict[str, Any]:
        try:
            return jwt.decode(token, self.secret_key, algorithms=[_TOKEN_ALGORITHM])
        except ExpiredSignatureError as exc:
            raise TokenVerificationError("Token has expired") from exc
        except InvalidTokenError as exc:
            raise TokenVerificationError(f"Invalid token: {str(exc)}") from exc

    async def verify_password(self, email: str, password: str) -> str:
        try:
            credential = await self._get_by_email(email)
        except SQLAlchemyError as exc:
            raise IdentityServiceError(str(exc)) from exc
        if credential is None:
            raise InvalidCredentialsError("Invalid credentials")

        matches = await asyncio.to_thread(
            verify_password_hash, password, credential.password_hash
        )
        if not matches:
            raise InvalidCredentialsError("Invalid credentials")
        return credential.uid
