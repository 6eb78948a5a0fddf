from __future__ import annotations

from fastapi import APIRouter

from projecthub.dependencies import UserServiceDep
from projecthub.models.api import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserSummary,
    VerifiedUser,
    VerifyTokenRequest,
    VerifyTokenResponse,
)

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=AuthResponse)
async def register(payload: RegisterRequest, service: UserServiceDep) -> AuthResponse:
    outcome = await service.register(payload.email, payload.password, payload.name)
    message = (
        "Registration successful (store disabled - mock mode)!"
        if outcome.mock_mode
        else "Registration successful!"
    )
    return AuthResponse(
        user=UserSummary.from_record(outcome.user),
        token=outcome.token,
        message=message,
    )


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginRequest, service: UserServiceDep) -> AuthResponse:
    outcome = await service.login(payload.email, payload.password)
    message = (
        "Login successful (store disabled - mock mode)!"
        if outcome.mock_mode
        else "Login successful!"
    )
    return AuthResponse(
        user=UserSummary.from_record(outcome.user),
        token=outcome.token,
        message=message,
    )


@router.post("/verify", response_model=VerifyTokenResponse)
async def verify_token(
    service: UserServiceDep,
    payload: VerifyTokenRequest | None = None,
) -> VerifyTokenResponse:
    """Resolve a bearer token to the user it was issued for."""
    user = await service.verify_token(payload.token if payload else None)
    return VerifyTokenResponse(user=VerifiedUser.from_record(user))
