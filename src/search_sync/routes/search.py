"""Raw search endpoint targeting an explicit collection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Body, Request

if TYPE_CHECKING:
    from search_sync.index.proxy import QueryProxy

router = APIRouter(prefix="/collections", tags=["search"])


@router.post(
    "/{collection}/search",
    summary="Search a collection with pass-through parameters",
    description="Forwards the request body to the index backend as search parameters.",
)
async def raw_search(
    request: Request,
    collection: str,
    parameters: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """Search one collection, returning the backend response as-is.

    Args:
        request: FastAPI request (provides access to app state).
        collection: Collection name; matched case-insensitively.
        parameters: Backend search parameters such as ``q`` and ``query_by``.

    Returns:
        The backend's search response.
    """
    proxy: QueryProxy = request.app.state.event_router.proxy
    name = collection.strip().lower()
    request.state.collection = name
    return await proxy.search(name, parameters)
