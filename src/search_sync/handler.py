"""Serverless entry point for stream triggers and resolver invocations."""

import asyncio
from typing import Any

import structlog

from search_sync.config import TypesenseSettings
from search_sync.errors import SearchSyncError
from search_sync.index.backend import TypesenseBackend
from search_sync.index.schemas import BatchSummary
from search_sync.logging import configure_logging
from search_sync.router import EventRouter

logger = structlog.get_logger()

_router: EventRouter | None = None


def get_router() -> EventRouter:
    """Return the process-wide router, building it on first use.

    The router (and its collection cache) survives warm invocations of
    the same process.
    """
    global _router
    if _router is None:
        configure_logging()
        settings = TypesenseSettings()
        _router = EventRouter.from_backend(
            TypesenseBackend.from_settings(settings),
            fields_map=settings.fields_map,
        )
    return _router


def handler(event: Any, context: Any = None) -> dict[str, int] | str:
    """Handle one invocation.

    Args:
        event: Stream batch or query invocation payload.
        context: Runtime context object (unused).

    Returns:
        Upsert/delete counts for a batch, or the search response as JSON text.
    """
    try:
        router = get_router()
        result = asyncio.run(router.route(event))
    except SearchSyncError as e:
        logger.error("invocation_failed", error_type=type(e).__name__, error=str(e))
        raise
    except Exception as e:
        logger.exception("invocation_crashed", error_type=type(e).__name__)
        raise

    if isinstance(result, BatchSummary):
        return result.model_dump()
    return result
