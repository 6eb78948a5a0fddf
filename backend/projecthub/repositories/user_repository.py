from __future__ import annotations

from typing import Any

from projecthub.models.user import USERS_COLLECTION, UserRecord
from projecthub.store import DocumentStore


class UserRepository:
    """Repository for documents in the ``users`` collection."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get_document(self, user_id: str) -> dict[str, Any] | None:
        return await self.store.get(USERS_COLLECTION, user_id)

    async def get_user(self, user_id: str) -> UserRecord | None:
        document = await self.get_document(user_id)
        if document is None:
            return None
        return UserRecord.from_document(document)

    async def create_user(self, user: UserRecord) -> UserRecord:
        await self.store.set(USERS_COLLECTION, user.uid, user.to_document())
        return user

    async def update_fields(self, user_id: str, fields: dict[str, Any]) -> None:
        await self.store.update(USERS_COLLECTION, user_id, fields)

    async def list_users(self) -> list[UserRecord]:
        documents = await self.store.list(USERS_COLLECTION)
        return [UserRecord.from_document(document) for document in documents]
