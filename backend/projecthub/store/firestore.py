from __future__ import annotations

import asyncio
from typing import Any

from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1 import FieldFilter

from .base import (
    ArrayUnion,
    CreateWrite,
    DocumentAlreadyExistsError,
    DocumentNotFoundError,
    DocumentStore,
    DocumentStoreError,
    Increment,
    SetWrite,
    UpdateWrite,
    WriteBatch,
)


def _to_firestore_fields(fields: dict[str, Any]) -> dict[str, Any]:
    translated: dict[str, Any] = {}
    for key, value in fields.items():
        if isinstance(value, Increment):
            translated[key] = firestore.Increment(value.amount)
        elif isinstance(value, ArrayUnion):
            translated[key] = firestore.ArrayUnion(list(value.values))
        else:
            translated[key] = value
    return translated


class FirestoreDocumentStore(DocumentStore):
    """Document store backed by Cloud Firestore.

    The Firestore client is synchronous, so every call runs in a worker thread.
    """

    backend_name = "firestore"

    def __init__(self, client: Any):
        self.client = client

    def _document(self, collection: str, document_id: str) -> Any:
        return self.client.collection(collection).document(document_id)

    async def _call(
        self,
        func,
        *args,
        not_found: tuple[str, str] | None = None,
        already_exists: tuple[str, str] | None = None,
    ) -> Any:
        try:
            return await asyncio.to_thread(func, *args)
        except google_exceptions.AlreadyExists as exc:
            if already_exists is not None:
                raise DocumentAlreadyExistsError(*already_exists) from exc
            raise DocumentStoreError(str(exc)) from exc
        except google_exceptions.NotFound as exc:
            if not_found is not None:
                raise DocumentNotFoundError(*not_found) from exc
            raise DocumentStoreError(str(exc)) from exc
        except google_exceptions.GoogleAPIError as exc:
            raise DocumentStoreError(str(exc)) from exc

    async def get(self, collection: str, document_id: str) -> dict[str, Any] | None:
        def _get() -> dict[str, Any] | None:
            snapshot = self._document(collection, document_id).get()
            if not snapshot.exists:
                return None
            return snapshot.to_dict() or {}

        return await self._call(_get)

    async def set(self, collection: str, document_id: str, data: dict[str, Any]) -> None:
        await self._call(self._document(collection, document_id).set, dict(data))

    async def update(self, collection: str, document_id: str, fields: dict[str, Any]) -> None:
        await self._call(
            self._document(collection, document_id).update,
            _to_firestore_fields(fields),
            not_found=(collection, document_id),
        )

    async def query(
        self,
        collection: str,
        field_name: str,
        value: Any,
        *,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        def _query() -> list[dict[str, Any]]:
            query = self.client.collection(collection).where(
                filter=FieldFilter(field_name, "==", value)
            )
            if order_by is not None:
                direction = (
                    firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
                )
                query = query.order_by(order_by, direction=direction)
            return [snapshot.to_dict() or {} for snapshot in query.stream()]

        return await self._call(_query)

    async def list(self, collection: str) -> list[dict[str, Any]]:
        def _list() -> list[dict[str, Any]]:
            return [snapshot.to_dict() or {} for snapshot in self.client.collection(collection).stream()]

        return await self._call(_list)

    async def commit(self, batch: WriteBatch) -> None:
        def _commit() -> None:
            firestore_batch = self.client.batch()
            for write in batch.writes:
                reference = self._document(write.collection, write.document_id)
                if isinstance(write, CreateWrite):
                    firestore_batch.create(reference, dict(write.data))
                elif isinstance(write, SetWrite):
                    firestore_batch.set(reference, dict(write.data))
                else:
                    firestore_batch.update(reference, _to_firestore_fields(write.fields))
            firestore_batch.commit()

        updates = [write for write in batch.writes if isinstance(write, UpdateWrite)]
        creates = [write for write in batch.writes if isinstance(write, CreateWrite)]
        not_found = (updates[0].collection, updates[0].document_id) if len(updates) == 1 else None
        already_exists = (
            (creates[0].collection, creates[0].document_id) if len(creates) == 1 else None
        )
        await self._call(_commit, not_found=not_found, already_exists=already_exists)
