"""Pytest configuration and fixtures."""

import asyncio
import sys
from pathlib import Path
from typing import Any

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from fastapi.testclient import TestClient

from search_sync.app import create_app
from search_sync.config import FieldsMap, Settings, TypesenseSettings
from search_sync.errors import AlreadyExistsError, BackendError, NotFoundError

STREAM_ARN = (
    "arn:aws:dynamodb:us-east-1:446581856886:table/Blog-abc123/stream/"
    "2023-09-14T15:08:09.233"
)


class FakeBackend:
    """In-memory IndexBackend recording every call."""

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict[str, Any]]] = {}
        self.calls: list[tuple[str, Any]] = []
        self.search_response: dict[str, Any] = {"found": 0, "hits": []}
        self.fail_upsert: BackendError | None = None
        self.fail_create: BackendError | None = None

    def count(self, operation: str) -> int:
        return sum(1 for name, _ in self.calls if name == operation)

    async def list_collections(self) -> list[str]:
        self.calls.append(("list_collections", None))
        names = list(self.collections)
        # Yield so concurrent provisioners interleave here.
        await asyncio.sleep(0)
        return names

    async def create_collection(self, schema: dict[str, Any]) -> None:
        self.calls.append(("create_collection", schema))
        if self.fail_create is not None:
            raise self.fail_create
        if schema["name"] in self.collections:
            raise AlreadyExistsError("Collection already exists", "create_collection")
        self.collections[schema["name"]] = {}

    async def upsert_document(self, collection: str, document: dict[str, Any]) -> None:
        self.calls.append(("upsert", (collection, document)))
        if self.fail_upsert is not None:
            raise self.fail_upsert
        if collection not in self.collections:
            raise NotFoundError("Not found", "upsert")
        self.collections[collection][str(document["id"])] = document

    async def delete_document(self, collection: str, document_id: str) -> None:
        self.calls.append(("delete", (collection, document_id)))
        docs = self.collections.get(collection)
        if docs is None or document_id not in docs:
            raise NotFoundError("Could not find a document", "delete")
        del docs[document_id]

    async def search(self, collection: str, parameters: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(("search", (collection, parameters)))
        return self.search_response


def make_record(
    kind: str = "INSERT",
    new_image: dict[str, Any] | None = None,
    old_image: dict[str, Any] | None = None,
    arn: str = STREAM_ARN,
    event_id: str = "evt-1",
) -> dict[str, Any]:
    """Build a raw DynamoDB stream record."""
    images: dict[str, Any] = {}
    if new_image is not None:
        images["NewImage"] = new_image
    if old_image is not None:
        images["OldImage"] = old_image
    return {
        "eventID": event_id,
        "eventName": kind,
        "eventSource": "aws:dynamodb",
        "eventSourceARN": arn,
        "dynamodb": images,
    }


def blog_image(doc_id: str = "x1", **extra: dict[str, Any]) -> dict[str, Any]:
    """Typed image of a Blog item."""
    image: dict[str, Any] = {
        "id": {"S": doc_id},
        "name": {"S": "t"},
        "updatedAt": {"S": "2023-09-15T19:24:19.368Z"},
    }
    image.update(extra)
    return image


@pytest.fixture
def backend() -> FakeBackend:
    """Fresh in-memory backend."""
    return FakeBackend()


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        host="127.0.0.1",
        port=8000,
        debug=True,
        typesense=TypesenseSettings(
            api_key="test",
            fields_map=FieldsMap.model_validate(
                {"defaultFields": {"Post": {"extraDateFields": ["publishedAt"]}}}
            ),
        ),
    )


@pytest.fixture
def client(settings: Settings, backend: FakeBackend) -> TestClient:
    """Create test client with configured app."""
    app = create_app(settings, backend=backend)
    return TestClient(app)
