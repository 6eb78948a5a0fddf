"""Document store adapters.

- ``SqlDocumentStore``: documents in a SQL table through SQLAlchemy (sql.py)
- ``FirestoreDocumentStore``: Cloud Firestore through firebase-admin (firestore.py)
"""

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
    apply_update,
)
from .sql import SqlDocumentStore

__all__ = [
    "DocumentStore",
    "SqlDocumentStore",
    "WriteBatch",
    "CreateWrite",
    "SetWrite",
    "UpdateWrite",
    "Increment",
    "ArrayUnion",
    "apply_update",
    # Exceptions
    "DocumentStoreError",
    "DocumentNotFoundError",
    "DocumentAlreadyExistsError",
]
