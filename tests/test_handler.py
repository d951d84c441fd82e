"""Serverless handler tests."""

import pytest
from structlog.testing import capture_logs

from conftest import FakeBackend, blog_image, make_record
from search_sync import handler as handler_module
from search_sync.errors import UnknownEventError
from search_sync.router import EventRouter


@pytest.fixture
def router(monkeypatch: pytest.MonkeyPatch, backend: FakeBackend) -> EventRouter:
    """Process-wide router backed by the fake backend."""
    router = EventRouter.from_backend(backend)
    monkeypatch.setattr(handler_module, "_router", router)
    return router


def test_batch_returns_counts(router: EventRouter, backend: FakeBackend) -> None:
    """A batch invocation returns a plain counts mapping."""
    result = handler_module.handler(
        {"Records": [make_record(kind="REMOVE", old_image=blog_image())]}
    )
    assert result == {"upserted": 0, "deleted": 1}


def test_query_returns_json_text(router: EventRouter, backend: FakeBackend) -> None:
    """A query invocation returns the search response as JSON text."""
    backend.search_response = {"found": 0}
    result = handler_module.handler(
        '{"typeName": "Query", "fieldName": "rawSearch", '
        '"arguments": "{\\"collection\\": \\"Blog\\", \\"searchParameters\\": {}}"}'
    )
    assert result == '{"found": 0}'


def test_failures_are_raised(router: EventRouter) -> None:
    """Sync errors are logged and re-raised to the runtime."""
    with capture_logs() as entries, pytest.raises(UnknownEventError):
        handler_module.handler({"unexpected": True})

    failed = [entry for entry in entries if entry["event"] == "invocation_failed"]
    assert failed[0]["error_type"] == "UnknownEventError"


def test_startup_failure_is_logged_and_raised(monkeypatch: pytest.MonkeyPatch) -> None:
    """Errors while building the router are logged before propagating."""

    def broken_router() -> EventRouter:
        raise RuntimeError("TYPESENSE_API_KEY missing")

    monkeypatch.setattr(handler_module, "get_router", broken_router)

    with capture_logs() as entries, pytest.raises(RuntimeError, match="API_KEY"):
        handler_module.handler({"Records": []})

    crashed = [entry for entry in entries if entry["event"] == "invocation_crashed"]
    assert crashed[0]["error_type"] == "RuntimeError"
    assert crashed[0]["log_level"] == "error"


def test_unexpected_runtime_errors_are_logged(
    monkeypatch: pytest.MonkeyPatch, router: EventRouter
) -> None:
    """Errors outside the sync taxonomy are logged before propagating."""

    async def explode(payload: object) -> None:
        raise KeyError("boom")

    monkeypatch.setattr(router, "route", explode)

    with capture_logs() as entries, pytest.raises(KeyError):
        handler_module.handler({"Records": []})

    assert [entry["event"] for entry in entries] == ["invocation_crashed"]
