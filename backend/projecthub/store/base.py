from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Any


class DocumentStoreError(RuntimeError):
    """Base error for document store operations."""


class DocumentNotFoundError(DocumentStoreError):
    """Raised when updating a document that does not exist."""

    def __init__(self, collection: str, document_id: str):
        super().__init__(f"No document to update: {collection}/{document_id}")
        self.collection = collection
        self.document_id = document_id


class DocumentAlreadyExistsError(DocumentStoreError):
    """Raised when a create-only write targets an existing document."""

    def __init__(self, collection: str, document_id: str):
        super().__init__(f"Document already exists: {collection}/{document_id}")
        self.collection = collection
        self.document_id = document_id


@dataclass(frozen=True, slots=True)
class Increment:
    """Field transform adding ``amount`` to a numeric field (missing counts as 0)."""

    amount: int = 1


@dataclass(frozen=True, slots=True)
class ArrayUnion:
    """Field transform appending values not already present in an array field."""

    values: tuple[Any, ...]

    def __init__(self, *values: Any):
        object.__setattr__(self, "values", tuple(values))


@dataclass(frozen=True, slots=True)
class SetWrite:
    collection: str
    document_id: str
    data: dict[str, Any]


@dataclass(frozen=True, slots=True)
class CreateWrite:
    collection: str
    document_id: str
    data: dict[str, Any]


@dataclass(frozen=True, slots=True)
class UpdateWrite:
    collection: str
    document_id: str
    fields: dict[str, Any]


@dataclass(slots=True)
class WriteBatch:
    """Ordered writes that a store applies atomically."""

    writes: list[CreateWrite | SetWrite | UpdateWrite] = field(default_factory=list)

    def create(self, collection: str, document_id: str, data: dict[str, Any]) -> WriteBatch:
        """Write a new document; the batch fails if it already exists."""
        self.writes.append(CreateWrite(collection, document_id, dict(data)))
        return self

    def set(self, collection: str, document_id: str, data: dict[str, Any]) -> WriteBatch:
        self.writes.append(SetWrite(collection, document_id, dict(data)))
        return self

    def update(self, collection: str, document_id: str, fields: dict[str, Any]) -> WriteBatch:
        self.writes.append(UpdateWrite(collection, document_id, dict(fields)))
        return self


def apply_update(document: dict[str, Any], fields: dict[str, Any]) -> dict[str, Any]:
    """Return ``document`` with ``fields`` merged in at the top level."""
    merged = dict(document)
    for key, value in fields.items():
        if isinstance(value, Increment):
            merged[key] = (merged.get(key) or 0) + value.amount
        elif isinstance(value, ArrayUnion):
            current = list(merged.get(key) or [])
            for item in value.values:
                if item not in current:
                    current.append(item)
            merged[key] = current
        else:
            merged[key] = value
    return merged


class DocumentStore(abc.ABC):
    """Collections of JSON documents keyed by id."""

    backend_name: str = "unknown"

    @abc.abstractmethod
    async def get(self, collection: str, document_id: str) -> dict[str, Any] | None:
        """Return the document or ``None`` when it does not exist."""

    @abc.abstractmethod
    async def set(self, collection: str, document_id: str, data: dict[str, Any]) -> None:
        """Create or overwrite a document."""

    @abc.abstractmethod
    async def update(self, collection: str, document_id: str, fields: dict[str, Any]) -> None:
        """Merge ``fields`` into an existing document.

        Raises :class:`DocumentNotFoundError` when the document is missing.
        """

    @abc.abstractmethod
    async def query(
        self,
        collection: str,
        field_name: str,
        value: Any,
        *,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        """Return documents whose ``field_name`` equals ``value``."""

    @abc.abstractmethod
    async def list(self, collection: str) -> list[dict[str, Any]]:
        """Return every document of ``collection``."""

    @abc.abstractmethod
    async def commit(self, batch: WriteBatch) -> None:
        """Apply all writes of ``batch`` or none of them."""

    async def close(self) -> None:
        return None
