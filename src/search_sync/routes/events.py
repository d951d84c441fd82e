"""Invocation endpoint accepting stream batches and query invocations."""

from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Body, Request
from fastapi.responses import Response

from search_sync.index.schemas import BatchSummary
from search_sync.stream.decoder import parse_event
from search_sync.stream.types import ChangeBatch

if TYPE_CHECKING:
    from search_sync.router import EventRouter

router = APIRouter(prefix="/events", tags=["events"])


@router.post(
    "",
    summary="Apply a change batch or run a query invocation",
    responses={200: {"description": "Batch summary or raw search response"}},
)
async def invoke(request: Request, payload: Any = Body(...)) -> Response:
    """Dispatch one inbound payload through the event router.

    Records the event kind (and batch size) on ``request.state`` for the
    access log.

    Args:
        request: FastAPI request (provides access to app state).
        payload: DynamoDB stream batch, or a query invocation object or its
            JSON text.

    Returns:
        Upsert/delete counts for a batch, the backend's search response
        for a query.
    """
    event_router: EventRouter = request.app.state.event_router
    event = parse_event(payload)

    if isinstance(event, ChangeBatch):
        request.state.event_kind = "change_batch"
        request.state.records = len(event.records)
    else:
        request.state.event_kind = "query"

    result = await event_router.dispatch(event)

    if isinstance(result, BatchSummary):
        return Response(content=result.model_dump_json(), media_type="application/json")
    return Response(content=result, media_type="application/json")
