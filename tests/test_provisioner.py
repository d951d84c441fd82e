"""Tests for on-demand collection provisioning."""

import asyncio

import pytest

from conftest import FakeBackend
from search_sync.errors import BackendError, ProvisionError
from search_sync.index.provisioner import CollectionCache, CollectionProvisioner


@pytest.mark.asyncio
async def test_creates_missing_collection_with_catch_all_schema(
    backend: FakeBackend,
) -> None:
    """A missing collection is created with the catch-all schema."""
    provisioner = CollectionProvisioner(backend)

    await provisioner.ensure_collection("blog-abc123")

    assert backend.calls[-1] == (
        "create_collection",
        {
            "name": "blog-abc123",
            "fields": [{"name": ".*", "type": "auto"}],
            "enable_nested_fields": True,
        },
    )
    assert "blog-abc123" in provisioner.cache


@pytest.mark.asyncio
async def test_second_call_is_a_cache_hit(backend: FakeBackend) -> None:
    """A known collection is not looked up again."""
    provisioner = CollectionProvisioner(backend)

    await provisioner.ensure_collection("blog")
    await provisioner.ensure_collection("blog")

    assert backend.count("create_collection") == 1
    assert backend.count("list_collections") == 1


@pytest.mark.asyncio
async def test_existing_collection_is_not_recreated(backend: FakeBackend) -> None:
    """A collection already on the backend is only cached."""
    backend.collections["blog"] = {}
    provisioner = CollectionProvisioner(backend)

    await provisioner.ensure_collection("blog")

    assert backend.count("create_collection") == 0
    assert "blog" in provisioner.cache


@pytest.mark.asyncio
async def test_concurrent_first_use_tolerates_duplicate_create(
    backend: FakeBackend,
) -> None:
    """Racing creates both succeed and leave one collection."""
    provisioner = CollectionProvisioner(backend)

    await asyncio.gather(
        provisioner.ensure_collection("blog"),
        provisioner.ensure_collection("blog"),
    )

    assert backend.count("create_collection") == 2
    assert list(backend.collections) == ["blog"]
    assert "blog" in provisioner.cache


@pytest.mark.asyncio
async def test_other_create_failures_raise(backend: FakeBackend) -> None:
    """Other create failures raise and are not cached."""
    backend.fail_create = BackendError("Bad schema", "create_collection")
    provisioner = CollectionProvisioner(backend)

    with pytest.raises(ProvisionError) as exc_info:
        await provisioner.ensure_collection("blog")

    assert exc_info.value.collection == "blog"
    assert "blog" not in provisioner.cache


@pytest.mark.asyncio
async def test_shared_cache_across_provisioners(backend: FakeBackend) -> None:
    """Provisioners sharing a cache share what it knows."""
    cache = CollectionCache()
    await CollectionProvisioner(backend, cache).ensure_collection("blog")
    await CollectionProvisioner(backend, cache).ensure_collection("blog")

    assert backend.count("list_collections") == 1
    assert len(cache) == 1
