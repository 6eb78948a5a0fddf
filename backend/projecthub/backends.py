"""Startup wiring of the document store and identity service."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine

from projecthub.config import Settings
from projecthub.database import create_engine, create_session_factory, init_db
from projecthub.identity import IdentityService, LocalIdentityService
from projecthub.store import DocumentStore, SqlDocumentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Backend:
    """Store and identity service shared by all requests, fixed at startup."""

    store: DocumentStore | None = None
    identity: IdentityService | None = None
    engine: AsyncEngine | None = None

    @property
    def store_available(self) -> bool:
        return self.store is not None and self.identity is not None

    @property
    def store_backend(self) -> str:
        return self.store.backend_name if self.store is not None else "none"

    async def close(self) -> None:
        if self.store is not None:
            await self.store.close()
        if self.engine is not None:
            await self.engine.dispose()


def _firebase_app(service_account: dict[str, Any]) -> Any:
    import firebase_admin
    from firebase_admin import credentials

    try:
        return firebase_admin.get_app()
    except ValueError:
        return firebase_admin.initialize_app(credentials.Certificate(service_account))


def build_firebase_backend(settings: Settings) -> Backend:
    from firebase_admin import firestore

    from projecthub.identity.firebase import FirebaseIdentityService
    from projecthub.store.firestore import FirestoreDocumentStore

    service_account = json.loads(settings.firebase_config or "")
    app = _firebase_app(service_account)
    return Backend(
        store=FirestoreDocumentStore(firestore.client(app=app)),
        identity=FirebaseIdentityService(app=app, web_api_key=settings.firebase_web_api_key),
    )


async def build_sql_backend(database_url: str, settings: Settings) -> Backend:
    engine = create_engine(database_url)
    await init_db(engine)
    session_factory = create_session_factory(engine)
    return Backend(
        store=SqlDocumentStore(session_factory),
        identity=LocalIdentityService(
            session_factory,
            secret_key=settings.token_secret,
            token_ttl_seconds=settings.token_ttl_seconds,
            hash_rounds=settings.password_hash_rounds,
        ),
        engine=engine,
    )


async def build_backend(settings: Settings) -> Backend:
    """Select the backend from configuration.

    Firebase configuration wins over a database URL. A Firebase setup that
    fails to initialize leaves the service running in mock mode.
    """
    if settings.firebase_config:
        try:
            backend = build_firebase_backend(settings)
        except Exception as exc:
            logger.error("Firebase initialization error: %s", exc)
            logger.warning("Firebase is disabled, but server will continue running")
            return Backend()
        logger.info("Firebase Admin initialized successfully")
        return backend

    if settings.database_url:
        backend = await build_sql_backend(settings.database_url, settings)
        logger.info("SQL document store initialized")
        return backend

    logger.warning("No FIREBASE_CONFIG or database URL set - running in mock mode")
    return Backend()
