from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from projecthub.models.document_db import DocumentDB

from .base import (
    CreateWrite,
    DocumentAlreadyExistsError,
    DocumentNotFoundError,
    DocumentStore,
    DocumentStoreError,
    SetWrite,
    WriteBatch,
    apply_update,
)


def _field_equals(field_name: str, value: Any):
    element = DocumentDB.data[field_name]
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return element.as_boolean() == value
    if isinstance(value, int):
        return element.as_integer() == value
    if isinstance(value, float):
        return element.as_float() == value
    if isinstance(value, str):
        return element.as_string() == value
    raise DocumentStoreError(
        f"Unsupported query value for '{field_name}': {type(value).__name__}"
    )


class SqlDocumentStore(DocumentStore):
    """Document store persisting JSON documents in a single SQL table."""

    backend_name = "sql"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def _load(
        self, session: AsyncSession, collection: str, document_id: str
    ) -> DocumentDB | None:
        result = await session.execute(
            select(DocumentDB).where(
                DocumentDB.collection == collection,
                DocumentDB.id == document_id,
            )
        )
        return result.scalar_one_or_none()

    async def _apply_create(self, session: AsyncSession, write: CreateWrite) -> None:
        if await self._load(session, write.collection, write.document_id) is not None:
            raise DocumentAlreadyExistsError(write.collection, write.document_id)
        session.add(
            DocumentDB(
                collection=write.collection,
                id=write.document_id,
                data=dict(write.data),
            )
        )

    async def _apply_set(self, session: AsyncSession, write: SetWrite) -> None:
        document_db = await self._load(session, write.collection, write.document_id)
        if document_db is None:
            session.add(
                DocumentDB(
                    collection=write.collection,
                    id=write.document_id,
                    data=dict(write.data),
                )
            )
        else:
            document_db.data = dict(write.data)

    async def _apply_update(
        self,
        session: AsyncSession,
        collection: str,
        document_id: str,
        fields: dict[str, Any],
    ) -> None:
        document_db = await self._load(session, collection, document_id)
        if document_db is None:
            raise DocumentNotFoundError(collection, document_id)
        # Reassign so the JSON column is flagged dirty
        document_db.data = apply_update(document_db.data or {}, fields)

    async def _fetch(self, query) -> list[dict[str, Any]]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(query)
                rows = result.scalars().all()
        except SQLAlchemyError as exc:
            raise DocumentStoreError(str(exc)) from exc
        return [dict(row.data or {}) for row in rows]

    async def get(self, collection: str, document_id: str) -> dict[str, Any] | None:
        try:
            async with self.session_factory() as session:
                document_db = await self._load(session, collection, document_id)
        except SQLAlchemyError as exc:
            raise DocumentStoreError(str(exc)) from exc
        if document_db is None:
            return None
        return dict(document_db.data or {})

    async def set(self, collection: str, document_id: str, data: dict[str, Any]) -> None:
        await self.commit(WriteBatch().set(collection, document_id, data))

    async def update(self, collection: str, document_id: str, fields: dict[str, Any]) -> None:
        await self.commit(WriteBatch().update(collection, document_id, fields))

    async def query(
        self,
        collection: str,
        field_name: str,
        value: Any,
        *,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        query = select(DocumentDB).where(
            DocumentDB.collection == collection,
            _field_equals(field_name, value),
        )
        if order_by is not None:
            # Ordering compares the field's text form (ISO timestamps sort correctly)
            order_column = DocumentDB.data[order_by].as_string()
            query = query.order_by(order_column.desc() if descending else order_column.asc())
        return await self._fetch(query)

    async def list(self, collection: str) -> list[dict[str, Any]]:
        return await self._fetch(
            select(DocumentDB)
            .where(DocumentDB.collection == collection)
            .order_by(DocumentDB.id.asc())
        )

    async def commit(self, batch: WriteBatch) -> None:
        try:
            # Uncommitted writes are rolled back when the session closes
            async with self.session_factory() as session:
                for write in batch.writes:
                    if isinstance(write, CreateWrite):
                        await self._apply_create(session, write)
                    elif isinstance(write, SetWrite):
                        await self._apply_set(session, write)
                    else:
                        await self._apply_update(
                            session, write.collection, write.document_id, write.fields
                        )
                    await session.flush()
                await session.commit()
        except SQLAlchemyError as exc:
            raise DocumentStoreError(str(exc)) from exc
