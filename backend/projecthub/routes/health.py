from __future__ import annotations

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from projecthub.clock import isoformat, utcnow
from projecthub.dependencies import BackendDep
from projecthub.models.api import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

ENDPOINTS = [
    "POST /api/register - Register new user",
    "POST /api/login - Login user",
    "POST /api/verify - Verify token",
    "GET /api/user/:userId - Get user data",
    "PUT /api/user/:userId - Update user profile",
    "GET /api/user/:userId/projects - Get user's projects",
    "POST /api/projects - Create project",
    "GET /api/users - Get all users (admin)",
]


@router.get("/", response_model=HealthResponse)
async def health_check(backend: BackendDep):
    try:
        logger.info("Health check request received")
        return HealthResponse(
            message="Project Hub backend is running!",
            timestamp=isoformat(utcnow()),
            store_available=backend.store_available,
            store_status="initialized" if backend.store_available else "disabled",
            store_backend=backend.store_backend,
            endpoints=list(ENDPOINTS),
        )
    except Exception as exc:
        logger.exception("Health check error")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc), "status": "error"},
        )
