from __future__ import annotations

import asyncio
from typing import Any

import httpx
from firebase_admin import auth
from firebase_admin import exceptions as firebase_exceptions

from .base import (
    IdentityService,
    IdentityServiceError,
    IdentityUser,
    InvalidCredentialsError,
    TokenVerificationError,
)

SIGN_IN_WITH_PASSWORD_URL = (
    "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"
)

# Identity Toolkit error codes meaning "wrong email or password".
_CREDENTIAL_ERROR_CODES = {
    "EMAIL_NOT_FOUND",
    "INVALID_PASSWORD",
    "INVALID_LOGIN_CREDENTIALS",
    "INVALID_EMAIL",
    "USER_DISABLED",
}


class FirebaseIdentityService(IdentityService):
    """Identity service backed by Firebase Authentication.

    Account management and token handling go through the Admin SDK. The Admin
    SDK cannot check passwords, so ``verify_password`` calls the Identity
    Toolkit REST API with the project's web API key.
    """

    def __init__(
        self,
        app: Any = None,
        web_api_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.app = app
        self.web_api_key = web_api_key
        self.timeout = timeout
        self._transport = transport

    async def create_user(
        self, email: str, password: str, display_name: str
    ) -> IdentityUser:
        try:
            record = await asyncio.to_thread(
                auth.create_user,
                email=email,
                password=password,
                display_name=display_name,
                email_verified=False,
                app=self.app,
            )
        except (ValueError, firebase_exceptions.FirebaseError) as exc:
            raise IdentityServiceError(str(exc)) from exc
        return IdentityUser(
            uid=record.uid,
            email=record.email or email,
            display_name=record.display_name or display_name,
        )

    async def create_token(self, uid: str) -> str:
        try:
            token = await asyncio.to_thread(auth.create_custom_token, uid, app=self.app)
        except (ValueError, firebase_exceptions.FirebaseError) as exc:
            raise IdentityServiceError(str(exc)) from exc
        if isinstance(token, bytes):
            return token.decode("utf-8")
        return token

    async def verify_token(self, token: str) -> dict[str, Any]:
        try:
            return await asyncio.to_thread(auth.verify_id_token, token, app=self.app)
        except (ValueError, firebase_exceptions.FirebaseError) as exc:
            raise TokenVerificationError(str(exc)) from exc

    async def verify_password(self, email: str, password: str) -> str:
        if not self.web_api_key:
            raise IdentityServiceError("Password sign-in requires a Firebase web API key")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    SIGN_IN_WITH_PASSWORD_URL,
                    params={"key": self.web_api_key},
                    json={"email": email, "password": password, "returnSecureToken": True},
                )
        except httpx.RequestError as exc:
            raise IdentityServiceError(f"Failed to contact identity service: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.status_code >= 400:
            error = payload.get("error") if isinstance(payload, dict) else None
            message = error.get("message", "") if isinstance(error, dict) else ""
            code = message.split(":", 1)[0].strip()
            if code in _CREDENTIAL_ERROR_CODES:
                raise InvalidCredentialsError("Invalid credentials")
            raise IdentityServiceError(
                message or f"Identity service request failed with status {response.status_code}"
            )

        uid = payload.get("localId") if isinstance(payload, dict) else None
        if not uid:
            raise IdentityServiceError("Identity service response is missing the account id")
        return uid
