from unittest.mock import MagicMock

import pytest
from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions

from projecthub.store import (
    ArrayUnion,
    DocumentAlreadyExistsError,
    DocumentNotFoundError,
    DocumentStoreError,
    Increment,
    WriteBatch,
)
from projecthub.store.firestore import FirestoreDocumentStore


def snapshot(data, exists=True):
    snap = MagicMock()
    snap.exists = exists
    snap.to_dict.return_value = data
    return snap


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def store(client):
    return FirestoreDocumentStore(client)


@pytest.mark.asyncio
async def test_get(store, client):
    document = client.collection.return_value.document.return_value
    document.get.return_value = snapshot({"uid": "u1"})

    assert await store.get("users", "u1") == {"uid": "u1"}
    client.collection.assert_called_with("users")
    client.collection.return_value.document.assert_called_with("u1")

    document.get.return_value = snapshot(None, exists=False)
    assert await store.get("users", "u1") is None


@pytest.mark.asyncio
async def test_update_translates_field_transforms(store, client):
    document = client.collection.return_value.document.return_value

    await store.update("users", "u1", {"totalProjects": Increment(1), "projects": ArrayUnion("p1"), "name": "Ada"})

    (fields,), _ = document.update.call_args
    assert isinstance(fields["totalProjects"], firestore.Increment)
    assert isinstance(fields["projects"], firestore.ArrayUnion)
    assert fields["name"] == "Ada"


@pytest.mark.asyncio
async def test_update_missing_document(store, client):
    document = client.collection.return_value.document.return_value
    document.update.side_effect = google_exceptions.NotFound("No document to update")

    with pytest.raises(DocumentNotFoundError):
        await store.update("users", "ghost", {"name": "Boo"})


@pytest.mark.asyncio
async def test_api_errors_become_store_errors(store, client):
    client.collection.return_value.stream.side_effect = google_exceptions.ServiceUnavailable("down")

    with pytest.raises(DocumentStoreError):
        await store.list("users")


@pytest.mark.asyncio
async def test_query_filters_and_orders(store, client):
    query = client.collection.return_value.where.return_value
    ordered = query.order_by.return_value
    ordered.stream.return_value = [snapshot({"id": "p2"}), snapshot({"id": "p1"})]

    documents = await store.query("projects", "userId", "u1", order_by="createdAt", descending=True)

    assert documents == [{"id": "p2"}, {"id": "p1"}]
    query.order_by.assert_called_once_with("createdAt", direction=firestore.Query.DESCENDING)


@pytest.mark.asyncio
async def test_commit_uses_a_single_batch(store, client):
    batch = client.batch.return_value

    await store.commit(
        WriteBatch()
        .set("projects", "p1", {"id": "p1"})
        .update("users", "u1", {"totalProjects": Increment(1)})
    )

    batch.set.assert_called_once()
    batch.update.assert_called_once()
    batch.commit.assert_called_once_with()


@pytest.mark.asyncio
async def test_create_write_uses_batch_create(store, client):
    batch = client.batch.return_value

    await store.commit(WriteBatch().create("projects", "p1", {"id": "p1"}))

    batch.create.assert_called_once()
    batch.set.assert_not_called()


@pytest.mark.asyncio
async def test_create_on_existing_document(store, client):
    client.batch.return_value.commit.side_effect = google_exceptions.AlreadyExists("exists")

    with pytest.raises(DocumentAlreadyExistsError, match="projects/p1"):
        await store.commit(
            WriteBatch()
            .create("projects", "p1", {"id": "p1"})
            .update("users", "u1", {"totalProjects": Increment(1)})
        )
