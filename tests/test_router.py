"""End-to-end routing of stream batches and query invocations."""

import json

import pytest

from conftest import FakeBackend, blog_image, make_record
from search_sync.errors import UnknownEventError
from search_sync.index import BatchSummary
from search_sync.router import EventRouter


@pytest.mark.asyncio
async def test_insert_batch_is_indexed(backend: FakeBackend) -> None:
    """An INSERT batch upserts the expanded document."""
    router = EventRouter.from_backend(backend)

    result = await router.route({"Records": [make_record(new_image=blog_image())]})

    assert result == BatchSummary(upserted=1, deleted=0)
    upserts = [args for name, args in backend.calls if name == "upsert"]
    assert upserts == [
        (
            "blog-abc123",
            {
                "id": "x1",
                "name": "t",
                "updatedAt": "2023-09-15T19:24:19.368Z",
                "updatedAtYear": "2023",
                "updatedAtMonth": "2023-09",
                "updatedAtDay": "2023-09-15",
                "updatedAtHour": "19",
            },
        )
    ]


@pytest.mark.asyncio
async def test_raw_search_invocation(backend: FakeBackend) -> None:
    """A rawSearch invocation returns the backend response as JSON text."""
    backend.search_response = {"found": 3, "hits": [], "page": 1}
    router = EventRouter.from_backend(backend)
    payload = {
        "typeName": "Query",
        "fieldName": "rawSearch",
        "arguments": json.dumps(
            {
                "collection": "Blog",
                "searchParameters": {"q": "text", "query_by": "name"},
            }
        ),
    }

    result = await router.route(payload)

    assert backend.calls == [("search", ("blog", {"q": "text", "query_by": "name"}))]
    assert json.loads(result) == {"found": 3, "hits": [], "page": 1}


@pytest.mark.asyncio
async def test_table_query_as_json_text(backend: FakeBackend) -> None:
    """A query arriving as JSON text searches the table's collection."""
    router = EventRouter.from_backend(backend)
    payload = json.dumps(
        {
            "typeName": "Query",
            "tableName": "Blog-mp6xr657pvbpjbyd4nqbvk44du-dev",
            "arguments": json.dumps({"searchParameters": {"q": "*"}}),
        }
    )

    await router.route(payload)

    assert backend.calls == [
        ("search", ("blog-mp6xr657pvbpjbyd4nqbvk44du-dev", {"q": "*"}))
    ]


@pytest.mark.asyncio
async def test_unknown_payload_makes_no_backend_calls(backend: FakeBackend) -> None:
    """Unknown payloads fail before touching the backend."""
    router = EventRouter.from_backend(backend)

    with pytest.raises(UnknownEventError):
        await router.route({"detail-type": "Scheduled Event"})

    assert backend.calls == []


@pytest.mark.asyncio
async def test_cache_survives_between_invocations(backend: FakeBackend) -> None:
    """The collection cache is reused across route calls."""
    router = EventRouter.from_backend(backend)

    await router.route({"Records": [make_record(new_image=blog_image("a"))]})
    await router.route({"Records": [make_record(new_image=blog_image("b"))]})

    assert backend.count("list_collections") == 1
    assert backend.count("create_collection") == 1
